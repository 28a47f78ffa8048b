"""Operation timeline and payload parsing helpers shared by runtime layers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured operation timeline event.

    Args:
        stage: Stage name (`resolve`, `mapping`, `submit`, ...).
        status: Stage status marker (`completed`, `degraded`, `failed`).
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        event_payload["details"] = details
    return event_payload


def domain_parse_optional_timestamp(value: object | None) -> datetime | None:
    """Parse one optional backend timestamp into an aware `datetime`.

    Accepts ISO-8601 text (including a trailing `Z`) and epoch seconds or
    milliseconds. Anything else yields None.

    Args:
        value: Candidate timestamp from an API payload.

    Returns:
        datetime | None: Parsed UTC-aware timestamp, else None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        epoch_seconds = float(value) / 1000.0 if value > 10_000_000_000 else float(value)
        try:
            return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    normalized_value = value.strip()
    if not normalized_value:
        return None
    if normalized_value.endswith("Z"):
        normalized_value = normalized_value[:-1] + "+00:00"

    try:
        parsed_value = datetime.fromisoformat(normalized_value)
    except ValueError:
        return None

    if parsed_value.tzinfo is None:
        return parsed_value.replace(tzinfo=timezone.utc)
    return parsed_value.astimezone(timezone.utc)


def domain_normalize_optional_text(value: object | None) -> str | None:
    """Return stripped text, or None for missing, non-text, or blank values."""

    if not isinstance(value, str):
        return None
    normalized_value = value.strip()
    return normalized_value or None
