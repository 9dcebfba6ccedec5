"""Data loading utilities for Technician Payroll Splits"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .batch import RunContext
from .errors import LedgerRecordError, RosterUnavailableError
from .ledger_parser import LedgerParser
from .models import JobRecord, LeadRecord, RosterEntry

logger = logging.getLogger(__name__)


def _find_column(columns: Sequence[str], *needles: str) -> Optional[str]:
    """First column whose lowercase header contains one of the needles, by needle priority."""
    normalized = [(c, str(c).strip().lower()) for c in columns]
    for needle in needles:
        for original, header in normalized:
            if needle in header:
                return original
    return None


def _is_blank_record(record: Dict[str, Any]) -> bool:
    return all(LedgerParser.is_blank(v) for v in record.values())


def _text(value) -> str:
    if value is None or (isinstance(value, float) and value != value):
        return ''
    return str(value).strip()


class DataLoader:
    """
    Load roster, PBP ledger and Lead Set data from Excel/CSV exports
    or from lists of row dicts (Google Sheets records).
    """

    @staticmethod
    def read_table(filepath: str) -> pd.DataFrame:
        """Read an Excel or CSV file into a DataFrame."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if path.suffix.lower() == '.csv':
            return pd.read_csv(path, skip_blank_lines=False)
        return pd.read_excel(path)

    @staticmethod
    def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
        # Blank rows stay in place so row numbers match the sheet
        return df.to_dict('records')

    # ============ ROSTER ============

    @staticmethod
    def load_roster(filepath: str) -> List[RosterEntry]:
        """
        Load the technician roster.

        Expected columns:
        - Name / Technician
        - Position / Title (e.g. "Class 3 Technician")

        Raises:
            RosterUnavailableError: file missing, unreadable or empty
        """
        try:
            df = DataLoader.read_table(filepath)
        except (OSError, ValueError) as e:
            raise RosterUnavailableError(f"Could not read roster {filepath}: {e}") from e
        return DataLoader.records_to_roster(DataLoader._records(df))

    @staticmethod
    def records_to_roster(records: List[Dict[str, Any]]) -> List[RosterEntry]:
        if not records:
            raise RosterUnavailableError("Roster has no rows")

        columns = list(records[0].keys())
        name_col = _find_column(columns, 'technician name', 'name', 'technician')
        position_col = _find_column(columns, 'position', 'title', 'class')
        if name_col is None:
            raise RosterUnavailableError(f"Roster has no name column: {columns}")

        entries = []
        for record in records:
            name = _text(record.get(name_col))
            if not name:
                continue
            position = _text(record.get(position_col)) if position_col else ''
            entries.append(RosterEntry(name=name, position=position))
        return entries

    # ============ PBP LEDGER ============

    @staticmethod
    def load_jobs(filepath: str, context: Optional[RunContext] = None) -> List[JobRecord]:
        """
        Load the PBP job ledger.

        Expected columns:
        - Customer Name
        - Job Business Unit (optional)
        - Completion Date
        - Item Name (optional)
        - Cross Reference / PBP / Pool: "PBP 150" tag
        - Primary Technician
        - Assigned Technicians (optional)

        Rows without a pool tag are not pool-bearing and are dropped.
        Rows with bad dates are logged and dropped.
        """
        df = DataLoader.read_table(filepath)
        return DataLoader.records_to_jobs(DataLoader._records(df), context)

    @staticmethod
    def records_to_jobs(records: List[Dict[str, Any]],
                        context: Optional[RunContext] = None) -> List[JobRecord]:
        context = context if context is not None else RunContext()
        if not records:
            return []

        parser = LedgerParser()
        columns = list(records[0].keys())
        customer_col = _find_column(columns, 'customer')
        unit_col = _find_column(columns, 'business unit', 'unit')
        date_col = _find_column(columns, 'completion', 'date')
        item_col = _find_column(columns, 'item')
        pool_col = _find_column(columns, 'cross reference', 'pbp', 'pool', 'tag')
        primary_col = _find_column(columns, 'primary')
        assigned_col = _find_column(columns, 'assigned')

        missing = [label for label, col in [('customer', customer_col), ('completion date', date_col),
                                            ('pool tag', pool_col), ('primary technician', primary_col)]
                   if col is None]
        if missing:
            raise ValueError(f"Job ledger is missing columns: {', '.join(missing)}")

        jobs = []
        # Header is row 1 in the source sheet
        for idx, record in enumerate(records, start=2):
            if _is_blank_record(record):
                continue
            pool_amount = parser.parse_pool_amount(record.get(pool_col))
            if pool_amount is None or pool_amount <= 0:
                context.record_skipped(f"row {idx}: no pool amount")
                continue

            try:
                completion_date = parser.parse_date(record.get(date_col), idx)
            except LedgerRecordError as e:
                context.record_error(str(e))
                continue

            jobs.append(JobRecord(
                customer_name=_text(record.get(customer_col)),
                job_business_unit=_text(record.get(unit_col)) if unit_col else '',
                completion_date=completion_date,
                item_name=_text(record.get(item_col)) if item_col else '',
                pool_amount=pool_amount,
                primary_technician_name=_text(record.get(primary_col)),
                assigned_technician_names=_text(record.get(assigned_col)) if assigned_col else '',
                row_number=idx
            ))

        logger.info("Loaded %d pool-bearing jobs from %d rows", len(jobs), len(records))
        return jobs

    # ============ LEAD SET ============

    @staticmethod
    def load_leads(filepath: str, context: Optional[RunContext] = None) -> List[LeadRecord]:
        """
        Load the Lead Set sheet.

        Expected columns:
        - Invoice ID (optional)
        - Completion Date
        - Customer Name
        - Business Unit (optional)
        - Job Total Revenue
        - Lead Generated By
        """
        df = DataLoader.read_table(filepath)
        return DataLoader.records_to_leads(DataLoader._records(df), context)

    @staticmethod
    def records_to_leads(records: List[Dict[str, Any]],
                         context: Optional[RunContext] = None) -> List[LeadRecord]:
        context = context if context is not None else RunContext()
        if not records:
            return []

        parser = LedgerParser()
        columns = list(records[0].keys())
        tech_col = _find_column(columns, 'lead generated', 'technician')
        customer_col = _find_column(columns, 'customer')
        unit_col = _find_column(columns, 'business unit')
        date_col = _find_column(columns, 'completion')
        revenue_col = _find_column(columns, 'revenue', 'amount')

        if tech_col is None or customer_col is None or date_col is None:
            raise ValueError(
                f"Required columns not found: Tech={tech_col}, Customer={customer_col}, "
                f"CompletionDate={date_col}"
            )

        leads = []
        for idx, record in enumerate(records, start=2):
            technician = _text(record.get(tech_col))
            customer = _text(record.get(customer_col))
            if not technician and not customer:
                continue

            completion_date = None
            if not parser.is_blank(record.get(date_col)):
                try:
                    completion_date = parser.parse_date(record.get(date_col), idx)
                except LedgerRecordError as e:
                    context.record_error(str(e))
                    continue

            revenue = parser.parse_money(record.get(revenue_col)) if revenue_col else 0.0
            leads.append(LeadRecord(
                customer_name=customer,
                lead_generated_by=technician,
                revenue=revenue,
                completion_date=completion_date,
                business_unit=_text(record.get(unit_col)) if unit_col else '',
                row_number=idx
            ))

        logger.info("Loaded %d leads", len(leads))
        return leads
