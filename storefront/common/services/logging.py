import json
import os
import sys
from datetime import datetime, timezone
from typing import Optional


_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}
_configured_level: Optional[str] = None


def configure(level: Optional[str]) -> None:
    """Override the LOG_LEVEL environment variable; ``None`` restores it."""
    global _configured_level
    _configured_level = level.lower() if level else None


def _threshold() -> int:
    name = _configured_level or os.getenv("LOG_LEVEL", "INFO").strip().lower()
    return _LEVELS.get(name, 20)


def log_event(level: str, event: str, **fields) -> None:
    lvl = level.lower()
    if _LEVELS.get(lvl, 20) < _threshold():
        return
    payload = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": lvl,
        "event": event,
    }
    payload.update(fields or {})
    try:
        sys.stdout.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except (OSError, ValueError):
        # best-effort logging
        pass
