"""Google Sheets access for rosters, ledgers and technician tabs"""
import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import gspread
import streamlit as st
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1

from .data_loader import DataLoader
from .errors import MissingTechnicianSheetError, RosterUnavailableError
from .models import RosterEntry, TechnicianLeads, TechnicianPayout
from .team_split import format_percent
from config import (
    GOOGLE_SHEET_ID, ROSTER_SHEET_NAME, PBP_SHEET_NAME, LEAD_SET_SHEET_NAME,
    EXCLUDED_SHEETS, TECH_SHEET_FIRST_DATA_ROW, TECH_SHEET_FIRST_COLUMN,
    TECH_SHEET_MARKER_COLUMN, SUMMARY_CELLS, LEAD_MARKER, PBP_MARKER
)

logger = logging.getLogger(__name__)

# Google Sheets configuration
SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive'
]


class GoogleSheetsClient:
    """Client for reading payroll sources and writing technician tabs"""

    def __init__(self, spreadsheet=None, sheet_id: str = None):
        self.client = None
        self.spreadsheet = spreadsheet
        if self.spreadsheet is None:
            self._connect(sheet_id or GOOGLE_SHEET_ID)

    def _get_credentials(self) -> Optional[Credentials]:
        """Get Google credentials from various sources"""

        # Option 1: Streamlit secrets (for deployed app)
        try:
            if 'gcp_service_account' in st.secrets:
                creds_dict = dict(st.secrets['gcp_service_account'])
                return Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
        except FileNotFoundError:
            logger.debug("No Streamlit secrets file")

        # Option 2: Environment variable with JSON content
        creds_json = os.environ.get('GOOGLE_CREDENTIALS_JSON')
        if creds_json:
            try:
                creds_dict = json.loads(creds_json)
                return Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
            except ValueError as e:
                logger.warning("GOOGLE_CREDENTIALS_JSON is not valid credentials: %s", e)

        # Option 3: Local file in secrets folder
        secrets_path = Path(__file__).parent.parent / "secrets" / "google_credentials.json"
        if secrets_path.exists():
            return Credentials.from_service_account_file(str(secrets_path), scopes=SCOPES)

        # Option 4: File path from environment variable
        creds_file = os.environ.get('GOOGLE_CREDENTIALS_FILE')
        if creds_file and Path(creds_file).exists():
            return Credentials.from_service_account_file(creds_file, scopes=SCOPES)

        return None

    def _connect(self, sheet_id: str):
        """Connect to Google Sheets"""
        if not sheet_id:
            raise ValueError("GOOGLE_SHEET_ID is not set")

        creds = self._get_credentials()
        if not creds:
            raise ValueError(
                "Google credentials not found. Please provide credentials via:\n"
                "1. Streamlit secrets (gcp_service_account)\n"
                "2. GOOGLE_CREDENTIALS_JSON environment variable\n"
                "3. secrets/google_credentials.json file\n"
                "4. GOOGLE_CREDENTIALS_FILE environment variable"
            )

        self.client = gspread.authorize(creds)
        self.spreadsheet = self.client.open_by_key(sheet_id)

    def get_worksheet(self, name: str):
        return self.spreadsheet.worksheet(name)

    # ============ SOURCES ============

    def get_records(self, sheet_name: str) -> List[Dict[str, Any]]:
        """All rows of a sheet as dicts keyed by the header row"""
        try:
            return self.get_worksheet(sheet_name).get_all_records()
        except gspread.WorksheetNotFound:
            logger.error("Sheet %s not found", sheet_name)
            return []
        except gspread.exceptions.APIError as e:
            logger.error("Error reading sheet %s: %s", sheet_name, e)
            return []

    def get_roster_records(self) -> List[Dict[str, Any]]:
        """Roster rows; a roster that cannot be read stops the run."""
        try:
            records = self.get_worksheet(ROSTER_SHEET_NAME).get_all_records()
        except (gspread.WorksheetNotFound, gspread.exceptions.APIError) as e:
            raise RosterUnavailableError(f"Could not read roster sheet {ROSTER_SHEET_NAME}: {e}") from e
        if not records:
            raise RosterUnavailableError(f"Roster sheet {ROSTER_SHEET_NAME} is empty")
        return records

    def get_pbp_records(self) -> List[Dict[str, Any]]:
        return self.get_records(PBP_SHEET_NAME)

    def get_lead_set_records(self) -> List[Dict[str, Any]]:
        return self.get_records(LEAD_SET_SHEET_NAME)

    def get_technician_sheet_names(self) -> List[str]:
        """Names of all technician tabs (everything but the system sheets)"""
        return [
            ws.title for ws in self.spreadsheet.worksheets()
            if ws.title not in EXCLUDED_SHEETS and not ws.title.startswith('_')
        ]

    def find_technician_sheet(self, name: str) -> Optional[str]:
        """Title of the technician's tab, matched case-insensitively, or None"""
        target = name.strip().lower()
        for title in self.get_technician_sheet_names():
            if title.strip().lower() == target:
                return title
        return None

    # ============ TECHNICIAN TABS ============

    @staticmethod
    def _format_date(value) -> str:
        if isinstance(value, date):
            return value.strftime('%m/%d/%Y')
        return str(value or '')

    def build_rows(self, result: Union[TechnicianPayout, TechnicianLeads]) -> List[List[Any]]:
        """Rows for columns E-J of a technician tab"""
        rows = []
        if isinstance(result, TechnicianPayout):
            for e in result.entries:
                notes = (f"{e.role_for_job} {format_percent(e.split_percentage)} of "
                         f"${e.total_pool_amount:,.2f} - {e.team_details}")
                rows.append([
                    e.customer_name,
                    e.job_business_unit,
                    self._format_date(e.completion_date),
                    e.technician_share,
                    notes,
                    PBP_MARKER
                ])
        else:
            for e in result.entries:
                rows.append([
                    e.customer_name,
                    e.business_unit,
                    self._format_date(e.completion_date),
                    e.amount,
                    e.notes,
                    LEAD_MARKER
                ])
        return rows

    def write_technician_result(self, result: Union[TechnicianPayout, TechnicianLeads]) -> int:
        """
        Replace a technician's rows for one feature and update the summary cells.

        Rows carrying the feature's marker in column J are cleared first, then
        the new rows are written below the last used row.

        Raises:
            MissingTechnicianSheetError: no technician tab for the name

        Returns:
            Number of rows written
        """
        marker = PBP_MARKER if isinstance(result, TechnicianPayout) else LEAD_MARKER
        title = self.find_technician_sheet(result.technician_name)
        if title is None:
            raise MissingTechnicianSheetError(f"No technician tab for {result.technician_name}")
        worksheet = self.get_worksheet(title)
        values = worksheet.get_all_values()

        first_col = TECH_SHEET_FIRST_COLUMN - 1
        marker_col = TECH_SHEET_MARKER_COLUMN - 1

        stale_rows = [
            i + 1 for i, row in enumerate(values)
            if len(row) > marker_col and marker in str(row[marker_col]).upper()
        ]
        if stale_rows:
            logger.info("Clearing %d existing %s rows on %s", len(stale_rows), marker, result.technician_name)
            worksheet.batch_clear([
                f"{rowcol_to_a1(r, TECH_SHEET_FIRST_COLUMN)}:{rowcol_to_a1(r, TECH_SHEET_MARKER_COLUMN)}"
                for r in stale_rows
            ])

        last_used = 0
        for i, row in enumerate(values):
            row_number = i + 1
            if row_number in stale_rows:
                continue
            if any(str(cell).strip() for cell in row[first_col:marker_col + 1]):
                last_used = row_number
        start_row = max(TECH_SHEET_FIRST_DATA_ROW, last_used + 1)

        rows = self.build_rows(result)
        if rows:
            end_row = start_row + len(rows) - 1
            range_name = (f"{rowcol_to_a1(start_row, TECH_SHEET_FIRST_COLUMN)}:"
                          f"{rowcol_to_a1(end_row, TECH_SHEET_MARKER_COLUMN)}")
            worksheet.update(range_name=range_name, values=rows, value_input_option='USER_ENTERED')
            logger.info("Wrote %d rows to %s (%s)", len(rows), result.technician_name, range_name)

        cells = SUMMARY_CELLS[marker]
        worksheet.update_cell(*cells['count'], len(result.entries))
        worksheet.update_cell(*cells['total'], result.total)
        return len(rows)


def roster_entries_from_sheet(client: GoogleSheetsClient) -> List[RosterEntry]:
    return DataLoader.records_to_roster(client.get_roster_records())


# Singleton instance - cached as Streamlit resource (survives reruns)
@st.cache_resource
def get_sheets_client() -> GoogleSheetsClient:
    """Get or create the Google Sheets client singleton (cached across reruns)."""
    return GoogleSheetsClient()
