"""
Process-wide logging configuration.

Modules log through logging.getLogger(__name__); this installs a single rich
console handler on the root logger. Called once by the entry point.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route all records at *level* and above to a rich console handler."""
    handler = RichHandler(
        console=Console(color_system="auto", stderr=True),
        rich_tracebacks=True,
        show_path=False,
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(name)s - %(message)s",
        datefmt="%d.%m.%Y %H:%M:%S",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
