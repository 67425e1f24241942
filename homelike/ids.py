"""Clock and time-derived identifier generation."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def slugify(name: str) -> str:
    """Lower-case ``name`` and collapse every non-alphanumeric run to a hyphen.

    >>> slugify("  Sunday Chai Masala! ")
    'sunday-chai-masala'
    """
    return _NON_ALNUM_RUN.sub("-", name.lower()).strip("-")


class IdGenerator:
    """Issues identifiers derived from the clock in epoch milliseconds.

    Wall-clock time is the only source of uniqueness, so the generator never
    hands out the same millisecond value twice: a clock that stands still or
    runs backwards yields the previous value plus one.  Tests inject a fixed
    clock to get deterministic identifiers.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._last = 0

    def now(self) -> datetime:
        return self._clock()

    def millis(self) -> int:
        value = int(self._clock().timestamp() * 1000)
        if value <= self._last:
            value = self._last + 1
        self._last = value
        return value

    def prefixed(self, prefix: str) -> str:
        return f"{prefix}-{self.millis()}"

    def unique(self, candidate: str, taken: Callable[[str], bool]) -> str:
        """Return ``candidate`` or, if taken, ``candidate`` with a time suffix."""
        if not taken(candidate):
            return candidate
        while True:
            suffixed = f"{candidate}-{self.millis()}"
            if not taken(suffixed):
                return suffixed
