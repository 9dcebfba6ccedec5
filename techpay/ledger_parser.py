"""Parsing helpers for job ledger cells (pool tags, name lists, dates, money)"""
import math
import numbers
import re
from datetime import date, datetime
from typing import List, Optional, Union

from .errors import LedgerRecordError


class LedgerParser:
    """
    Parses the free-text cells of the job ledger.

    Pool tag examples:
        "PBP 150"      -> 150.0
        "pbp150"       -> 150.0
        "Ref 42, PBP 87.5" -> 87.5
        "Warranty"     -> None (not a pool-bearing record)

    Name list examples:
        "Bob, Carol; Dan"
        "Bob & Carol"
        "Bob Carol" (split around roster names)
    """

    POOL_TAG_PATTERN = re.compile(r'pbp\s*(\d+(\.\d+)?)', re.IGNORECASE)

    NAME_SEPARATOR_PATTERN = re.compile(r'\s*(?:[,;&/\n]|\band\b)\s*', re.IGNORECASE)

    MONEY_STRIP_PATTERN = re.compile(r'[$,\s]')

    DATE_FORMATS = ['%Y-%m-%d', '%m/%d/%Y', '%m/%d/%y', '%Y%m%d', '%d/%m/%Y']

    def __init__(self, roster=None):
        self.roster = roster

    @staticmethod
    def is_blank(value) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        return isinstance(value, str) and not value.strip()

    def parse_pool_amount(self, value) -> Optional[float]:
        """
        Extract the pool amount from a tagged cell.

        The cell must carry a "pbp <number>" tag. A bare number (a reference
        or invoice number read as int by pandas or gspread) is not a pool.
        Returns None when there is no amount.
        """
        if self.is_blank(value) or isinstance(value, bool):
            return None

        match = self.POOL_TAG_PATTERN.search(str(value))
        if not match:
            return None
        return float(match.group(1))

    def parse_money(self, value) -> float:
        """Parse a currency cell ("$1,250.00"), 0.0 when unparseable."""
        if self.is_blank(value) or isinstance(value, bool):
            return 0.0
        if isinstance(value, numbers.Real):
            return float(value)
        try:
            return float(self.MONEY_STRIP_PATTERN.sub('', str(value)))
        except ValueError:
            return 0.0

    def parse_date(self, value, row_number: int = None) -> Union[date, str]:
        """
        Normalize a completion date cell.

        Raises LedgerRecordError for blank or unparseable values.
        """
        if self.is_blank(value):
            raise LedgerRecordError("Missing completion date", row_number)
        # datetime and pandas Timestamp are both datetime subclasses
        if isinstance(value, datetime):
            if value != value:  # NaT
                raise LedgerRecordError("Missing completion date", row_number)
            return value.date()
        if isinstance(value, date):
            return value

        text = str(value).strip()
        # Drop a trailing time component ("2024-03-01 00:00:00")
        text = text.split(' ')[0] if re.match(r'^\d{4}-\d{2}-\d{2} ', text) else text
        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise LedgerRecordError(f"Unparseable completion date: {value!r}", row_number)

    def split_names(self, text) -> List[str]:
        """Split a free-text technician list into names."""
        if self.is_blank(text):
            return []

        names = []
        for chunk in self.NAME_SEPARATOR_PATTERN.split(str(text)):
            chunk = ' '.join(chunk.split())
            if not chunk:
                continue
            names.extend(self._split_on_spaces(chunk))
        return names

    def _split_on_spaces(self, chunk: str) -> List[str]:
        """
        Split a space separated list around the roster names it contains.

        The longest run of tokens forming a roster name wins ("Mary Ann Bob"
        -> "Mary Ann", "Bob"). Tokens outside any roster name stand alone.
        A chunk with no roster name in it is kept whole ("John Doe").
        """
        if self.roster is None or ' ' not in chunk or self.roster.knows(chunk):
            return [chunk]

        tokens = chunk.split(' ')
        names = []
        found = False
        i = 0
        while i < len(tokens):
            for j in range(len(tokens), i, -1):
                candidate = ' '.join(tokens[i:j])
                if self.roster.knows(candidate):
                    names.append(candidate)
                    found = True
                    i = j
                    break
            else:
                names.append(tokens[i])
                i += 1
        return names if found else [chunk]

    def unique_names(self, primary, assigned) -> List[str]:
        """
        Primary technician first, then assigned technicians.

        Duplicates are dropped case-insensitively, keeping the first spelling.
        """
        seen = set()
        names = []
        candidates = []
        if not self.is_blank(primary):
            candidates.append(' '.join(str(primary).split()))
        candidates.extend(self.split_names(assigned))

        for name in candidates:
            key = name.lower()
            if key in seen:
                continue
            seen.add(key)
            names.append(name)
        return names
