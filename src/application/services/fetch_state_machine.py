"""
Application service: loading / success / error bookkeeping for one fetch concern.

run() moves the concern to Loading synchronously and records the attempt's
generation as the in-flight one. When the attempt finishes its outcome is applied
only if its generation is still the in-flight one; otherwise it is dropped
without any transition. This is the only place where a failed operation is
turned into an Error state: nothing raised by an operation escapes run().
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from src.domain.entities.fetch_state import Error, FetchState, Idle, Loading, Success
from src.domain.exceptions import ProviderError, StaleResultDiscarded

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransitionListener = Callable[[str, FetchState], None]


class FetchStateMachine(Generic[T]):
    def __init__(self, concern: str, on_transition: Optional[TransitionListener] = None) -> None:
        self.concern = concern
        self._on_transition = on_transition
        self._state: FetchState = Idle()
        self._in_flight_generation: Optional[int] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def in_flight_generation(self) -> Optional[int]:
        return self._in_flight_generation

    def run(self, generation: int, operation: Callable[[], Awaitable[T]]) -> asyncio.Task:
        """Start a fetch attempt tagged with *generation*.

        Must be called from a running event loop. Returns the scheduled task;
        awaiting it never raises.
        """
        self._in_flight_generation = generation
        task = asyncio.get_running_loop().create_task(self._execute(generation, operation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._transition(Loading())
        return task

    async def drain(self) -> None:
        """Wait until every attempt started so far has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _execute(self, generation: int, operation: Callable[[], Awaitable[T]]) -> None:
        try:
            value = await operation()
        except ProviderError as exc:
            logger.warning("%s fetch failed (generation %d): %s", self.concern, generation, exc)
            outcome: FetchState = Error(message=str(exc) or exc.__class__.__name__)
        except Exception as exc:
            logger.exception("%s fetch raised unexpectedly (generation %d)", self.concern, generation)
            outcome = Error(message=f"Unexpected error: {exc}")
        else:
            outcome = Success(value=value)

        try:
            self._accept(generation)
        except StaleResultDiscarded as stale:
            logger.debug("%s", stale)
            return
        self._transition(outcome)

    def _accept(self, generation: int) -> None:
        if generation != self._in_flight_generation:
            raise StaleResultDiscarded(self.concern, generation, self._in_flight_generation)

    def _transition(self, state: FetchState) -> None:
        self._state = state
        if self._on_transition is None:
            return
        try:
            self._on_transition(self.concern, state)
        except Exception:
            logger.exception("%s transition listener failed on %s", self.concern, state.status)
