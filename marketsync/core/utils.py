"""
Small shared helpers.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def format_metadata(metadata: Dict[str, Any]) -> str:
    """Render log metadata as sorted JSON, falling back to key:value pairs."""
    if not metadata:
        return "{}"
    try:
        return json.dumps(metadata, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return ",".join(f"{k}:{v}" for k, v in metadata.items())
