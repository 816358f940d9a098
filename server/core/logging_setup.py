# server/core/logging_setup.py

import logging
import sys
from pathlib import Path


LOG_FILE_NAME = "tasks_api.log"


def setup_logging(level: str | int = logging.INFO, log_dir: str | Path | None = None) -> None:
    """
    Configure root logging with a console handler on stderr and, when
    ``log_dir`` is given, a file handler that keeps DEBUG records too.

    Call this once, before the app starts serving.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / LOG_FILE_NAME), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
