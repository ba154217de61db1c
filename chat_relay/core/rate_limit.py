"""
rate_limit.py: Per-address daily message quota.

Keeps one UsageRecord per originating address in process memory. Nothing is
persisted: a restart starts everyone from zero, and running several worker
processes gives each its own independent counters.

Day rollover is detected lazily. A record whose date is not today is treated
as absent by check_limit / increment_limit, so correctness never depends on
the sweeper. The sweeper only drops those stale records to bound memory.

check_limit never mutates; increment_limit never refuses. Callers check first
and increment only when they actually spend quota:

    check = limiter.check_limit(ip)
    if not check.allowed:
        ...reject...
    ...forward...
    limiter.increment_limit(ip)

increment_limit past the limit keeps counting (remaining goes negative).
That is intentional: the limiter reports, the caller decides.

Lifecycle (wired in main.py):
    limiter = DailyRateLimiter(settings.daily_message_limit)
    limiter.start_sweeper(settings.rate_limit_sweep_interval_seconds)   # startup
    await limiter.close()                                               # shutdown
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def utc_today() -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return datetime.now(tz=timezone.utc).date().isoformat()


@dataclass
class UsageRecord:
    identifier: str
    date: str  # YYYY-MM-DD (UTC)
    count: int = 0


@dataclass(frozen=True)
class LimitCheck:
    allowed: bool
    count: int
    remaining: int


@dataclass(frozen=True)
class LimitIncrement:
    count: int
    remaining: int


class DailyRateLimiter:
    """
    In-memory daily counter keyed by client identifier.

    All map access happens under one threading.Lock, so the limiter is safe
    to share between the event loop, threadpool-run handlers and the sweeper.
    `today` is injectable so tests can move the calendar.
    """

    def __init__(self, daily_limit: int = 10, today: Callable[[], str] = utc_today) -> None:
        self.daily_limit = daily_limit
        self._today = today
        self._records: dict[str, UsageRecord] = {}
        self._lock = threading.Lock()
        self._sweeper_task: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def check_limit(self, identifier: str) -> LimitCheck:
        """Report the identifier's quota for today without consuming any."""
        today = self._today()
        with self._lock:
            record = self._records.get(identifier)
            if record is None or record.date != today:
                return LimitCheck(allowed=True, count=0, remaining=self.daily_limit)
            if record.count >= self.daily_limit:
                return LimitCheck(allowed=False, count=record.count, remaining=0)
            return LimitCheck(
                allowed=True,
                count=record.count,
                remaining=self.daily_limit - record.count,
            )

    def increment_limit(self, identifier: str) -> LimitIncrement:
        """Charge one message to the identifier for today."""
        today = self._today()
        with self._lock:
            record = self._records.get(identifier)
            if record is None or record.date != today:
                # Stale records are replaced, never merged into.
                record = UsageRecord(identifier=identifier, date=today, count=1)
                self._records[identifier] = record
            else:
                record.count += 1
            return LimitIncrement(count=record.count, remaining=self.daily_limit - record.count)

    def snapshot(self) -> dict[str, UsageRecord]:
        """Copy of the current records, for inspection and tests."""
        with self._lock:
            return {
                key: UsageRecord(rec.identifier, rec.date, rec.count)
                for key, rec in self._records.items()
            }

    def sweep(self) -> int:
        """Drop every record not dated today. Returns how many were removed."""
        today = self._today()
        with self._lock:
            stale = [key for key, rec in self._records.items() if rec.date != today]
            for key in stale:
                del self._records[key]
        if stale:
            logger.info("Rate limit sweep removed %d stale record(s)", len(stale))
        else:
            logger.debug("Rate limit sweep found nothing to remove")
        return len(stale)

    # ── Sweeper lifecycle ─────────────────────────────────────────────────────

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper_task is not None and not self._sweeper_task.done()

    def start_sweeper(self, interval: float) -> None:
        """Schedule sweep() every `interval` seconds on the running event loop."""
        if self.sweeper_running:
            logger.warning("Rate limit sweeper is already running")
            return
        self._sweeper_task = asyncio.create_task(self._sweep_loop(interval))
        logger.info("Rate limit sweeper started (interval: %ss)", interval)

    async def stop_sweeper(self) -> None:
        task, self._sweeper_task = self._sweeper_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Rate limit sweeper stopped")

    async def close(self) -> None:
        """Stop the sweeper and forget all usage."""
        await self.stop_sweeper()
        with self._lock:
            self._records.clear()

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Rate limit sweep failed")
