from datetime import datetime, timezone


def now_iso() -> str:
    """Current UTC time as ISO-8601 with a trailing Z, e.g. 2024-05-01T12:00:00.123456Z."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
