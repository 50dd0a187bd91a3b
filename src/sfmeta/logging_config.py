from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"

# urllib3 warns on SOAP response headers; asyncio chatters at DEBUG
_NOISY_LOGGERS = ("urllib3.connection", "asyncio")


def configure_logging(level: Optional[int]) -> None:
    """Configure root logging once; safe to call multiple times."""
    lvl = level if level is not None else logging.WARNING
    root = logging.getLogger()

    if root.handlers:
        root.setLevel(lvl)
    else:
        logging.basicConfig(level=lvl, format=_DEFAULT_FMT, datefmt=_DEFAULT_DATEFMT)

    for name in _NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        if noisy.level == logging.NOTSET or noisy.level < logging.WARNING:
            noisy.setLevel(logging.ERROR if name == "urllib3.connection" else logging.WARNING)
