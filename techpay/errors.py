"""Exceptions raised by the payroll calculators"""


class TechPayError(Exception):
    """Base class for payroll calculation errors"""


class RosterUnavailableError(TechPayError):
    """The technician roster could not be read at all."""


class LedgerRecordError(TechPayError, ValueError):
    """A single ledger row is malformed and has to be skipped."""

    def __init__(self, message: str, row_number: int = None):
        self.row_number = row_number
        if row_number is not None:
            message = f"Row {row_number}: {message}"
        super().__init__(message)


class MissingTechnicianSheetError(TechPayError):
    """The spreadsheet has no tab for a technician."""
