"""
NexaProc Core Time — Explicit Clock Protocol
==============================================
Engines never call datetime.now() directly. Services receive a Clock
so that document numbering (calendar year / month) and activity
timestamps are reproducible in tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Protocol


class Clock(Protocol):
    """Injectable time source."""

    def now(self) -> datetime:
        ...  # pragma: no cover


class SystemClock:
    """Production clock. Numbering periods follow `tz` (UTC by default)."""

    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self._tz = tz or timezone.utc

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """
    Test clock — returns a fixed timestamp.

        clock = FixedClock(datetime(2024, 3, 5, tzinfo=timezone.utc))
        clock.advance(days=40)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now(self) -> datetime:
        return self._fixed_dt

    def advance(self, **delta) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(**delta)
