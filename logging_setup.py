from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional


class _QuietThirdPartyFilter(logging.Filter):
    """
    Keep the console readable:
    - our modules pass through at the handler level
    - uvicorn access lines and other libraries only at WARNING+
    """

    OWN_LOGGERS = ("app", "auth", "dashboard", "db", "scoring", "storage", "uvicorn.error", "root")

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name in self.OWN_LOGGERS:
            return True
        return record.levelno >= logging.WARNING


def setup_logging(*, level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger with a console handler and, when log_file is
    set, a file handler that keeps DEBUG records as well.

    Safe to call more than once: existing handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_level = logging.getLevelName(level)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_QuietThirdPartyFilter())
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
