"""
Fetch state variants shared by every independent fetch concern.

A concern is always in exactly one of Idle, Loading, Success(value) or
Error(message). Zero external dependencies.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Idle:
    status = "idle"


@dataclass(frozen=True)
class Loading:
    status = "loading"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    status = "success"


@dataclass(frozen=True)
class Error:
    message: str
    status = "error"


FetchState = Union[Idle, Loading, Success, Error]
