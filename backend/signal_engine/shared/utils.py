"""Shared utility functions used across components."""

import json
import math
import re
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    """Return the current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positive scores (Python's round() is banker's rounding)."""
    factor = 10 ** digits
    return math.floor(float(value) * factor + 0.5) / factor


def humanize_slug(value: str) -> str:
    return str(value or "").replace("_", " ")


_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a single wrapping markdown code fence (```json ... ```) if present."""
    cleaned = (text or "").strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def loads_fenced_json(text: str) -> Any:
    return json.loads(strip_code_fences(text))
