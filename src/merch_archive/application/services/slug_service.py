"""Slug availability search.

Hey future me - this is the -2/-3/... loop that turns a desired slug into one nobody
holds yet. It only ever PROBES; the unique index on insert is what actually guarantees
uniqueness. Two requests can both see "weezer-2" as free, one insert wins, the other gets
UniqueViolationError and the user is asked to tweak their input.
"""

import logging
import threading
import time

from merch_archive.domain.exceptions import ProbeError
from merch_archive.domain.ports import IExistenceProbe

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 50


class MonotonicMillisClock:
    """Wall-clock milliseconds that never repeat within one process.

    Two fallbacks in the same millisecond would otherwise produce the same
    "slug-<ts>" value. Each call returns max(now_ms, last + 1).
    """

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            now = time.time_ns() // 1_000_000
            self._last = max(now, self._last + 1)
            return self._last


# Shared by everything that names files or slugs after "now"
millis_clock = MonotonicMillisClock()


class SlugService:
    """Find a free value for a unique column by suffixing -2, -3, ..."""

    def __init__(
        self,
        probe: IExistenceProbe,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: MonotonicMillisClock | None = None,
    ) -> None:
        """Initialize slug service.

        Args:
            probe: Existence prober for whitelisted columns
            max_attempts: Total number of probes before falling back to a timestamp
            clock: Millisecond clock for the fallback suffix
        """
        self._probe = probe
        self._max_attempts = max(1, max_attempts)
        self._clock = clock or millis_clock

    # Listen up, three ways out of this loop:
    # 1. A free candidate -> return it.
    # 2. The probe blew up -> return THAT candidate right away and let the insert decide.
    #    A failed probe never counts as "taken".
    # 3. All attempts taken -> desired-<ms>, NOT probed again. The unique index still guards it.
    async def find_available_slug(self, table: str, column: str, desired: str) -> str:
        """Return desired or the first free desired-N variant.

        Args:
            table: Whitelisted table name (e.g. "artists")
            column: Whitelisted column name (e.g. "slug")
            desired: Already-normalized base value

        Returns:
            A candidate value, or "" when desired is blank
        """
        base = (desired or "").strip()
        if not base:
            return ""

        for attempt in range(self._max_attempts):
            candidate = base if attempt == 0 else f"{base}-{attempt + 1}"
            try:
                taken = await self._probe.exists_by_column(table, column, candidate)
            except ProbeError as e:
                logger.warning(
                    "Existence probe failed, continuing optimistically with %r: %s",
                    candidate,
                    e,
                    extra={"table": table, "column": column, "attempt": attempt + 1},
                )
                return candidate
            if not taken:
                if attempt > 0:
                    logger.debug(
                        "Resolved %s.%s collision: %r -> %r", table, column, base, candidate
                    )
                return candidate

        fallback = f"{base}-{self._clock()}"
        logger.warning(
            "All %d slug candidates taken for %r, using timestamp fallback %r",
            self._max_attempts,
            base,
            fallback,
            extra={"table": table, "column": column},
        )
        return fallback
