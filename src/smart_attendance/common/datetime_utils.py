from __future__ import annotations

from datetime import datetime


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def now_ms() -> int:
    return to_epoch_ms(now_local())
