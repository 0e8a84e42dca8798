from datetime import datetime, timezone


def get_current_time() -> datetime:
    return datetime.now(timezone.utc)


def get_wall_clock_millis() -> int:
    """Milliseconds since the epoch on the local clock. Not unique across clients."""
    return int(get_current_time().timestamp() * 1000)
