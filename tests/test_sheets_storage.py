"""Google Sheets client tests using in-memory worksheets."""
import sys
from datetime import date
from pathlib import Path

import gspread
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from techpay.batch import PayrollBatch
from techpay.classifier import TechnicianRoster
from techpay.errors import MissingTechnicianSheetError, RosterUnavailableError
from techpay.models import JobRecord, LeadEntry, PayoutEntry, RosterEntry, TechnicianLeads, TechnicianPayout
from techpay.sheets_storage import GoogleSheetsClient, roster_entries_from_sheet


class FakeWorksheet:
    def __init__(self, title, records=None, values=None):
        self.title = title
        self.records = records or []
        self.values = values or []
        self.cleared = []
        self.updates = []
        self.cells = {}

    def get_all_records(self):
        return self.records

    def get_all_values(self):
        return self.values

    def batch_clear(self, ranges):
        self.cleared.extend(ranges)

    def update(self, range_name=None, values=None, value_input_option=None):
        self.updates.append((range_name, values, value_input_option))

    def update_cell(self, row, col, value):
        self.cells[(row, col)] = value


class FakeSpreadsheet:
    def __init__(self, worksheets):
        self._worksheets = {ws.title: ws for ws in worksheets}

    def worksheet(self, name):
        if name not in self._worksheets:
            raise gspread.WorksheetNotFound(name)
        return self._worksheets[name]

    def worksheets(self):
        return list(self._worksheets.values())


def tech_sheet_values(markers):
    """Rows 1-15 hold the header block, markers fill column J from row 16."""
    values = [[''] * 10 for _ in range(15)]
    values[0][0] = 'Technician'
    for marker in markers:
        values.append(['', '', '', '', 'Customer', 'HVAC', '03/01/2024', '10', 'note', marker])
    return values


def pbp_result():
    return TechnicianPayout(technician_name='Alice', entries=[PayoutEntry(
        customer_name='Acme',
        job_business_unit='HVAC',
        completion_date=date(2024, 3, 1),
        item_name='Furnace',
        total_pool_amount=150,
        technician_share=97.5,
        role_for_job='Lead',
        split_percentage=65,
        team_details='Alice (Class 4): Lead 65% | Bob (Class 2): Assistant 35%'
    )])


class TestSources:

    def test_technician_sheet_names_skip_system_sheets(self):
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([
            FakeWorksheet('PBP'), FakeWorksheet('Alice'), FakeWorksheet('Lead Set'),
            FakeWorksheet('_scratch'), FakeWorksheet('Bob'), FakeWorksheet('Technicians'),
        ]))

        assert client.get_technician_sheet_names() == ['Alice', 'Bob']

    def test_missing_sheet_returns_no_records(self):
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([]))
        assert client.get_pbp_records() == []

    def test_missing_roster_is_fatal(self):
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([]))
        with pytest.raises(RosterUnavailableError):
            client.get_roster_records()

    def test_empty_roster_is_fatal(self):
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([FakeWorksheet('Technicians')]))
        with pytest.raises(RosterUnavailableError):
            roster_entries_from_sheet(client)

    def test_roster_entries(self):
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([FakeWorksheet('Technicians', records=[
            {'Name': 'Alice', 'Position': 'Class 4 Technician'},
        ])]))

        entries = roster_entries_from_sheet(client)

        assert entries[0].name == 'Alice'
        assert entries[0].position == 'Class 4 Technician'


class TestWriteTechnicianResult:

    def test_replaces_previous_pbp_rows(self):
        sheet = FakeWorksheet('Alice', values=tech_sheet_values(['L-E-A-D', 'L-E-A-D', 'P-B-P']))
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([sheet]))

        written = client.write_technician_result(pbp_result())

        assert written == 1
        assert sheet.cleared == ['E18:J18']
        range_name, rows, option = sheet.updates[0]
        assert range_name == 'E18:J18'
        assert option == 'USER_ENTERED'
        assert rows[0][:4] == ['Acme', 'HVAC', '03/01/2024', 97.5]
        assert rows[0][4].startswith('Lead 65% of $150.00 - Alice (Class 4)')
        assert rows[0][5] == 'P-B-P'
        assert sheet.cells[(14, 4)] == 1
        assert sheet.cells[(13, 5)] == 97.5

    def test_empty_sheet_starts_at_first_data_row(self):
        sheet = FakeWorksheet('Bob', values=tech_sheet_values([]))
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([sheet]))
        leads = TechnicianLeads(technician_name='Bob', entries=[
            LeadEntry('Acme', 'HVAC', date(2024, 3, 1), 5000, 100.0, 2, '2% commission: $100.00'),
            LeadEntry('Beta', 'HVAC', date(2024, 3, 2), 12000, 360.0, 3, '3% commission: $360.00'),
        ])

        client.write_technician_result(leads)

        assert sheet.cleared == []
        range_name, rows, _ = sheet.updates[0]
        assert range_name == 'E16:J17'
        assert [r[5] for r in rows] == ['L-E-A-D', 'L-E-A-D']
        assert sheet.cells[(14, 2)] == 2
        assert sheet.cells[(13, 3)] == 460.0

    def test_no_entries_still_updates_summary(self):
        sheet = FakeWorksheet('Alice', values=tech_sheet_values(['P-B-P']))
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([sheet]))

        written = client.write_technician_result(TechnicianPayout(technician_name='Alice'))

        assert written == 0
        assert sheet.cleared == ['E16:J16']
        assert sheet.updates == []
        assert sheet.cells[(13, 5)] == 0

    def test_tab_is_matched_case_insensitively(self):
        sheet = FakeWorksheet('ALICE', values=tech_sheet_values([]))
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([sheet]))

        client.write_technician_result(pbp_result())

        assert sheet.updates[0][0] == 'E16:J16'

    def test_missing_tab_raises(self):
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([FakeWorksheet('Alice')]))

        with pytest.raises(MissingTechnicianSheetError, match="Carl"):
            client.write_technician_result(TechnicianPayout(technician_name='Carl'))

    def test_system_sheet_is_never_a_technician_tab(self):
        pbp_sheet = FakeWorksheet('PBP', values=tech_sheet_values([]))
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([pbp_sheet]))

        with pytest.raises(MissingTechnicianSheetError):
            client.write_technician_result(TechnicianPayout(technician_name='PBP'))
        assert pbp_sheet.updates == []

    def test_batch_continues_past_missing_tab(self):
        alice = FakeWorksheet('Alice', values=tech_sheet_values([]))
        client = GoogleSheetsClient(spreadsheet=FakeSpreadsheet([alice]))
        roster = TechnicianRoster.from_entries([
            RosterEntry('Alice', 'Class 4 Technician'),
            RosterEntry('Bob', 'Class 2 Technician'),
        ])
        jobs = [JobRecord('Acme', date(2024, 3, 1), 150, 'Alice', 'Bob', 'HVAC', 'Furnace')]

        batch = PayrollBatch(roster=roster, jobs=jobs,
                             sink=client.write_technician_result).run_pbp(['Alice', 'Bob'])

        assert [r.technician_name for r in batch.results] == ['Alice']
        assert batch.failed == [('Bob', 'No technician tab for Bob')]
        assert alice.cells[(13, 5)] == 97.5
