"""PBP payout and Lead Set commission calculations"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from .batch import RunContext
from .classifier import TechnicianRoster
from .errors import LedgerRecordError
from .ledger_parser import LedgerParser
from .models import (
    JobRecord, JobTechnicianAssignment, PayoutEntry, TechnicianPayout,
    LeadRecord, LeadEntry, TechnicianLeads
)
from .team_split import allocate_pool, format_team_details
from config import LEAD_SET_TIERS, LEAD_SET_TOP_PERCENTAGE

logger = logging.getLogger(__name__)


class PBPCalculator:
    """
    Calculates Performance-Based Pay for technicians.

    Business Logic:
    ===============

    Every job in the ledger carries a fixed dollar pool. The pool is split
    between the technicians on the job by role:
    - The roster position title gives each technician a class (0-4)
    - Classes 3-4 lead, class 2 assists (or leads with no senior present)
    - Class 1 apprentices take an Assistant slot but are never paid
    - Technicians not on the roster are ignored for the split

    The split percentage depends on how many Leads and Assistants worked the
    job (see team_split.SPLIT_TABLE).

    A job listed more than once in the ledger is only paid once per run.
    """

    def __init__(self, roster: TechnicianRoster):
        self.roster = roster
        self.parser = LedgerParser(roster)

    def technician_names(self, job: JobRecord) -> List[str]:
        return self.parser.unique_names(job.primary_technician_name, job.assigned_technician_names)

    def allocate_job(self, job: JobRecord) -> List[JobTechnicianAssignment]:
        """
        Split one job's pool across every technician on it.

        Args:
            job: The job to split

        Returns:
            One assignment per technician, primary technician first
        """
        names = self.technician_names(job)
        if not names:
            raise LedgerRecordError("Job has no technicians", job.row_number)
        profiles = [self.roster.lookup(name) for name in names]
        return allocate_pool(profiles, job.pool_amount)

    def calculate_for_technician(self, jobs: List[JobRecord], technician_name: str,
                                 context: Optional[RunContext] = None) -> TechnicianPayout:
        """
        Build the PBP rows for one technician.

        Args:
            jobs: Ledger rows in source order
            technician_name: Technician to collect rows for
            context: Run counters; a new one is used if not given

        Returns:
            TechnicianPayout with one entry per paid job
        """
        context = context if context is not None else RunContext()
        target = technician_name.strip().lower()
        payout = TechnicianPayout(technician_name=technician_name)
        processed_keys = set()

        for job in jobs:
            try:
                entry = self._process_job(job, target, processed_keys)
            except LedgerRecordError as e:
                context.record_error(f"{technician_name}: {e}")
                continue

            if entry is None:
                context.record_skipped()
                continue

            payout.entries.append(entry)
            context.record_processed()

        logger.info(
            "%s: %d PBP entries, total $%.2f",
            technician_name, len(payout.entries), payout.total
        )
        return payout

    def _process_job(self, job: JobRecord, target: str, processed_keys: set) -> Optional[PayoutEntry]:
        if job.pool_amount is None or job.pool_amount <= 0:
            return None

        names = self.technician_names(job)
        if not names:
            raise LedgerRecordError("Job has no technicians", job.row_number)
        if target not in (n.lower() for n in names):
            return None
        if not job.customer_name:
            raise LedgerRecordError("Job has no customer name", job.row_number)

        key = job.dedup_key
        if key in processed_keys:
            logger.debug("Duplicate job skipped: %s", key)
            return None
        processed_keys.add(key)

        assignments = allocate_pool([self.roster.lookup(n) for n in names], job.pool_amount)
        mine = next(a for a in assignments if a.profile.name.lower() == target)

        # Apprentices and unclassified technicians never get a row
        if not mine.is_payable:
            return None

        return PayoutEntry(
            customer_name=job.customer_name,
            job_business_unit=job.job_business_unit,
            completion_date=job.completion_date,
            item_name=job.item_name,
            total_pool_amount=job.pool_amount,
            technician_share=mine.payout_amount,
            role_for_job=mine.final_role,
            split_percentage=mine.split_percent,
            team_details=format_team_details(assignments)
        )


class LeadSetCalculator:
    """
    Calculates lead commission for the technician who generated a lead.

    Tiered percentage of the job's total revenue:
    - 2% below $10,000
    - 3% from $10,000 to $29,999
    - 4% from $30,000
    """

    def commission_percentage(self, revenue: float) -> int:
        for upper_bound, percentage in LEAD_SET_TIERS:
            if revenue < upper_bound:
                return percentage
        return LEAD_SET_TOP_PERCENTAGE

    def calculate_lead(self, revenue) -> Tuple[float, int]:
        """
        Commission amount (rounded to cents) and percentage for a revenue.

        Raises:
            LedgerRecordError: revenue is not a positive number
        """
        if isinstance(revenue, bool) or not isinstance(revenue, (int, float)) or revenue != revenue:
            raise LedgerRecordError("Revenue must be a valid number")
        if revenue <= 0:
            raise LedgerRecordError("Revenue must be greater than zero")

        percentage = self.commission_percentage(revenue)
        amount = round(revenue * percentage / 100, 2)
        return amount, percentage

    def calculate_for_technician(self, leads: List[LeadRecord], technician_name: str,
                                 date_range: Optional[Tuple[date, date]] = None,
                                 context: Optional[RunContext] = None) -> TechnicianLeads:
        """
        Build the lead commission rows for one technician.

        Args:
            leads: Lead Set rows
            technician_name: Technician who generated the leads
            date_range: Optional inclusive (start, end) completion date filter
            context: Run counters; a new one is used if not given

        Returns:
            TechnicianLeads with one entry per lead
        """
        context = context if context is not None else RunContext()
        target = technician_name.strip().lower()
        result = TechnicianLeads(technician_name=technician_name)

        for lead in leads:
            if (lead.lead_generated_by or '').strip().lower() != target:
                continue

            if date_range and lead.completion_date:
                start, end = date_range
                if lead.completion_date < start or lead.completion_date > end:
                    context.record_skipped("outside date range")
                    continue

            try:
                amount, percentage = self.calculate_lead(lead.revenue)
            except LedgerRecordError as e:
                context.record_error(f"Error processing lead for {technician_name} "
                                     f"(row {lead.row_number}): {e}")
                continue

            result.entries.append(LeadEntry(
                customer_name=lead.customer_name or 'Unknown Customer',
                business_unit=lead.business_unit,
                completion_date=lead.completion_date,
                revenue=lead.revenue,
                amount=amount,
                percentage=percentage,
                notes=f"{percentage}% commission: ${amount:.2f}"
            ))
            context.record_processed()

        logger.info(
            "%s: %d leads, total commission $%.2f",
            technician_name, len(result.entries), result.total
        )
        return result
