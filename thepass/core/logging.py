# thepass/core/logging.py
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once per process (uvicorn reloads call this again)."""
    global _configured
    if _configured:
        return

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is controlled separately; keep engine logs quiet by default
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
