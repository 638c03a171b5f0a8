"""Millisecond wall clock shared by every timestamped row."""
import time

MS_PER_DAY = 24 * 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def days_from_now(days: float, now: int | None = None) -> int:
    base = now if now is not None else now_ms()
    return base + int(days * MS_PER_DAY)
