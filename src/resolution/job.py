"""Periodic resolution pass and its scheduler loop.

A pass reads the election window once, enumerates the tables that still need a
verdict and resolves each one in its own session and transaction. Passes are
serialized by a lock shared with the run-once command, so two passes never
interleave the per-table commit.
"""
import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from src.config import settings
from src.database import AsyncSessionLocal
from src.elections.service import ElectionConfigService, WindowState
from src.resolution.service import ResolutionService
from src.shared.models import utcnow

logger = logging.getLogger(__name__)

# Marks tables not attempted because shutdown was requested mid-pass.
_NOT_STARTED = object()


@dataclass
class RunReport:
    skipped: bool = False
    reason: Optional[str] = None
    processed: int = 0
    failed: int = 0
    statuses: Dict[str, int] = field(default_factory=dict)


class ResolverJob:
    def __init__(
        self,
        session_factory=AsyncSessionLocal,
        table_timeout: float = settings.RESOLVER_TABLE_TIMEOUT_SECONDS,
        concurrency: int = settings.RESOLVER_CONCURRENCY,
    ):
        self.session_factory = session_factory
        self.table_timeout = table_timeout
        self.concurrency = max(1, concurrency)
        self._lock = asyncio.Lock()
        self._stopping = False

    def request_stop(self):
        """Let in-flight tables finish and start no new ones."""
        self._stopping = True

    def resume(self):
        self._stopping = False

    async def run_once(self, now: Optional[datetime] = None) -> RunReport:
        async with self._lock:
            return await self._run(now)

    async def _read_window(self, now: Optional[datetime]):
        async with self.session_factory() as db:
            state = await ElectionConfigService(db).get_window_state(now)
            if not state.resolution_permitted:
                return state, []
            table_codes = await ResolutionService(db).pending_table_codes()
        return state, table_codes

    async def _run(self, now: Optional[datetime]) -> RunReport:
        state, table_codes = await asyncio.wait_for(self._read_window(now), self.table_timeout)

        if not state.has_active_config:
            logger.info("No active election configuration; resolution skipped")
            return RunReport(skipped=True, reason="no active election configuration")
        if not state.voting_closed:
            logger.info("Voting period has not ended; resolution skipped")
            return RunReport(skipped=True, reason="voting period has not ended")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(table_code: str):
            async with semaphore:
                if self._stopping:
                    return _NOT_STARTED
                return await self._resolve_one(table_code, state)

        outcomes = await asyncio.gather(*(worker(code) for code in table_codes))

        report = RunReport()
        statuses: Counter = Counter()
        for outcome in outcomes:
            if outcome is _NOT_STARTED:
                continue
            if outcome is False:
                report.failed += 1
                continue
            report.processed += 1
            if outcome is not None:
                statuses[outcome.status.value] += 1
        report.statuses = dict(statuses)

        logger.info(
            "Resolution pass: %d tables pending, %d processed, %d failed, statuses=%s",
            len(table_codes), report.processed, report.failed, report.statuses,
        )
        return report

    async def _resolve_one(self, table_code: str, state: WindowState):
        """Returns the verdict, None for an already terminal case, or False on failure.

        Never raises: a failing table must not abandon the other workers of
        the pass outside the lock.
        """
        async with self.session_factory() as db:
            service = ResolutionService(db)
            try:
                return await asyncio.wait_for(
                    service.resolve_table(table_code, state.now), self.table_timeout
                )
            except (asyncio.TimeoutError, SQLAlchemyError) as e:
                logger.warning("Resolution of table %s failed, retrying next cycle: %s", table_code, e, exc_info=True)
                return False
            except Exception:
                logger.exception("Unexpected error resolving table %s, retrying next cycle", table_code)
                return False


class ResolverScheduler:
    """Runs the resolver job every ``interval_seconds`` until stopped."""

    def __init__(self, job: ResolverJob, interval_seconds: int = settings.RESOLVER_INTERVAL_SECONDS):
        self.job = job
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self._last_run_at: Optional[datetime] = None
        self._total_runs = 0
        self._failed_runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def get_health(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
            "total_runs": self._total_runs,
            "failed_runs": self._failed_runs,
        }

    async def start(self):
        if self.is_running:
            logger.warning("Resolver scheduler already running")
            return
        self._stop_event.clear()
        self.job.resume()
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Resolver scheduler started (interval=%ss)", self.interval_seconds)

    async def stop(self):
        self.job.request_stop()
        self._stop_event.set()
        if self._task:
            await self._task
            self._task = None
        logger.info("Resolver scheduler stopped")

    async def _run_loop(self):
        while not self._stop_event.is_set():
            self._total_runs += 1
            self._last_run_at = utcnow()
            try:
                await self.job.run_once()
            except Exception:
                # A failed pass is retried on the next tick.
                self._failed_runs += 1
                logger.exception("Resolution pass failed")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass


resolver_job = ResolverJob()


def get_resolver_job() -> ResolverJob:
    return resolver_job
