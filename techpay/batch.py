"""Per-run bookkeeping and batch processing across technicians"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Tuple

from .errors import RosterUnavailableError, TechPayError

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """
    Counters for a single processing run.

    A fresh context is created for every invocation and passed down to the
    calculators, so nothing about a run lives in module state.
    """
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    messages: List[str] = field(default_factory=list)

    def record_processed(self) -> None:
        self.processed += 1

    def record_skipped(self, reason: str = "") -> None:
        self.skipped += 1
        if reason:
            logger.debug("Skipped: %s", reason)

    def record_error(self, message: str) -> None:
        self.errors += 1
        self.messages.append(message)
        logger.warning(message)

    def summary(self) -> dict:
        return {
            'processed': self.processed,
            'skipped': self.skipped,
            'errors': self.errors,
        }


@dataclass
class BatchResult:
    """Outcome of running one calculator for many technicians"""
    results: list = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    context: RunContext = field(default_factory=RunContext)

    @property
    def technicians(self) -> int:
        return len(self.results)

    @property
    def entries(self) -> int:
        return sum(len(r.entries) for r in self.results)

    @property
    def total(self) -> float:
        return round(sum(r.total for r in self.results), 2)


class PayrollBatch:
    """
    Runs the PBP or Lead Set calculator for every requested technician.

    A failure for one technician is counted and the batch moves on; a
    missing roster stops the batch before anything is calculated.
    """

    def __init__(self, roster=None, jobs=None, leads=None,
                 sink: Optional[Callable] = None):
        self.roster = roster
        self.jobs = jobs or []
        self.leads = leads or []
        self.sink = sink

    def run_pbp(self, technician_names: List[str]) -> BatchResult:
        from .calculator import PBPCalculator

        if self.roster is None:
            raise RosterUnavailableError("A roster is required to calculate PBP splits")
        calculator = PBPCalculator(self.roster)
        return self._run(
            technician_names,
            lambda name, ctx: calculator.calculate_for_technician(self.jobs, name, ctx)
        )

    def run_lead_set(self, technician_names: List[str],
                     date_range: Optional[Tuple[date, date]] = None) -> BatchResult:
        from .calculator import LeadSetCalculator

        calculator = LeadSetCalculator()
        return self._run(
            technician_names,
            lambda name, ctx: calculator.calculate_for_technician(self.leads, name, date_range, ctx)
        )

    def _run(self, technician_names: List[str], calculate: Callable) -> BatchResult:
        batch = BatchResult()
        for name in technician_names:
            logger.info("Processing %s...", name)
            try:
                result = calculate(name, batch.context)
                if self.sink is not None:
                    self.sink(result)
            except RosterUnavailableError:
                raise
            except (TechPayError, ValueError, KeyError, OSError) as e:
                logger.error("Error processing %s: %s", name, e)
                batch.failed.append((name, str(e)))
                continue
            batch.results.append(result)

        logger.info(
            "Batch complete: %d technicians, %d entries, total %.2f, %d failed",
            batch.technicians, batch.entries, batch.total, len(batch.failed)
        )
        return batch
