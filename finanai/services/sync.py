"""Company-wide self-healing pass over recurring and installment series."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from finanai.dates import sync_window_start
from finanai.exceptions import ValidationError
from finanai.logging import company_logger
from finanai.models.transaction import Transaction
from finanai.services.projection import ProjectionEngine
from finanai.store.base import TRANSACTIONS, Condition, Filter, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Outcome of one reconciliation pass."""

    company_id: str
    candidates: int = 0
    series: int = 0
    inserted: int = 0
    failures: int = 0


class ReconciliationSync:
    """Re-run projection once per logical series of a company.

    Restores future records lost to manual edits or skipped sessions. Only
    records dated from the start of the look-back window are considered,
    newest first, so each series is projected from its latest member.
    """

    def __init__(
        self,
        store: RecordStore,
        engine: ProjectionEngine,
        clock: Callable[[], date] = date.today,
        lookback_months: int = 2,
    ) -> None:
        self.store = store
        self.engine = engine
        self.clock = clock
        self.lookback_months = lookback_months

    async def sync(self, company_id: str) -> SyncReport:
        """Project every series of ``company_id`` once. Never raises."""
        report = SyncReport(company_id=company_id)
        log = company_logger(__name__, company_id)
        window_start = sync_window_start(self.clock(), self.lookback_months)

        flt = (
            Filter()
            .eq("company_id", company_id)
            .any_of(
                Condition("is_recurring", "eq", True),
                Condition("installment_total", "gt", 0),
            )
            .gte("date", window_start)
        )
        try:
            rows = await self.store.query(TRANSACTIONS, flt, order_by="date", descending=True)
        except Exception as e:
            report.failures += 1
            log.warning("Recurrence sync failed: %s", e)
            return report

        report.candidates = len(rows)
        seeds = self.series_seeds(rows, report)
        report.series = len(seeds)

        results = await asyncio.gather(
            *(self._project_series(key, seed) for key, seed in seeds.items())
        )
        for inserted in results:
            if inserted is None:
                report.failures += 1
            else:
                report.inserted += inserted

        log.info(
            "Recurrence sync: %d series, %d inserted, %d failures",
            report.series,
            report.inserted,
            report.failures,
        )
        return report

    @staticmethod
    def series_seeds(rows: list[dict], report: SyncReport | None = None) -> dict[str, Transaction]:
        """Pick the first record of every logical series from ``rows``."""
        seeds: dict[str, Transaction] = {}
        for row in rows:
            try:
                tx = Transaction.from_record(row)
            except ValidationError as e:
                if report is not None:
                    report.failures += 1
                logger.warning("Skipping malformed record %s during sync: %s", row.get("id"), e)
                continue
            seeds.setdefault(tx.series_key(), tx)
        return seeds

    async def _project_series(self, key: str, seed: Transaction) -> int | None:
        try:
            result = await self.engine.project(seed)
        except Exception as e:
            company_logger(__name__, seed.company_id, series=key).warning(
                "Projection failed: %s", e
            )
            return None
        return len(result.inserted)
