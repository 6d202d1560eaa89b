from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class _SqlNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - tasktracker logs pass at the configured level
    - sqlalchemy / uvicorn access chatter only at WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("tasktracker."):
            return True
        if record.name.startswith(("sqlalchemy.", "uvicorn.access")):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(level: str | int = logging.INFO, *, sql_echo: bool = False) -> None:
    """
    Configure the root logger once with a single console handler.

    Calling it again replaces the handler instead of stacking duplicates.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_tasktracker", False):
            root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(_FORMAT))
    if not sql_echo:
        console.addFilter(_SqlNoiseFilter())
    console._tasktracker = True  # type: ignore[attr-defined]
    root.addHandler(console)

    logging.getLogger(__name__).debug("Logging configured level=%s", logging.getLevelName(level))
