"""Report generation for Technician Payroll Splits"""
from datetime import date
from pathlib import Path
from typing import List, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side

from .models import TechnicianPayout, TechnicianLeads
from config import COMPANY_NAME, EXCEL_STYLES

PBP_COLUMNS = ['Date', 'Customer', 'Business Unit', 'Item', 'Pool', 'Role', 'Split %', 'Share', 'Team']
LEAD_COLUMNS = ['Date', 'Customer', 'Business Unit', 'Revenue', '%', 'Commission', 'Notes']


def _format_date(value) -> str:
    if isinstance(value, date):
        return value.strftime('%m/%d/%Y')
    return str(value or '')


class ReportGenerator:
    """
    Generates Excel reports for a technician's PBP or Lead Set results.
    """

    def __init__(self, result: Union[TechnicianPayout, TechnicianLeads]):
        self.result = result

    @property
    def is_pbp(self) -> bool:
        return isinstance(self.result, TechnicianPayout)

    @property
    def title(self) -> str:
        return "PBP Report" if self.is_pbp else "Lead Set Report"

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert results to a pandas DataFrame.
        """
        data = []
        if self.is_pbp:
            for e in self.result.entries:
                data.append({
                    'Date': _format_date(e.completion_date),
                    'Customer': e.customer_name,
                    'Business Unit': e.job_business_unit,
                    'Item': e.item_name,
                    'Pool': e.total_pool_amount,
                    'Role': e.role_for_job,
                    'Split %': round(e.split_percentage, 2),
                    'Share': e.technician_share,
                    'Team': e.team_details
                })
            return pd.DataFrame(data, columns=PBP_COLUMNS)

        for e in self.result.entries:
            data.append({
                'Date': _format_date(e.completion_date),
                'Customer': e.customer_name,
                'Business Unit': e.business_unit,
                'Revenue': e.revenue,
                '%': e.percentage,
                'Commission': e.amount,
                'Notes': e.notes
            })
        return pd.DataFrame(data, columns=LEAD_COLUMNS)

    def get_summary_row(self) -> dict:
        """Get summary row data."""
        count = len(self.result.entries)
        if self.is_pbp:
            row = {c: '' for c in PBP_COLUMNS}
            row['Date'] = f"{count} Jobs"
            row['Pool'] = sum(e.total_pool_amount for e in self.result.entries)
            row['Share'] = self.result.total
        else:
            row = {c: '' for c in LEAD_COLUMNS}
            row['Date'] = f"{count} Leads"
            row['Revenue'] = sum(e.revenue for e in self.result.entries)
            row['Commission'] = self.result.total
        return row

    def get_date_range(self) -> tuple:
        """Get the date range of the entries."""
        dates = [e.completion_date for e in self.result.entries if isinstance(e.completion_date, date)]
        if not dates:
            return None, None
        return min(dates), max(dates)

    def export_excel(self, filepath: str) -> None:
        """
        Export report to Excel file.

        Args:
            filepath: Path to save the Excel file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = self.title

        # Styles
        header_fill = PatternFill(start_color=EXCEL_STYLES['header_bg_color'],
                                  end_color=EXCEL_STYLES['header_bg_color'],
                                  fill_type='solid')
        summary_fill = PatternFill(start_color=EXCEL_STYLES['summary_bg_color'],
                                   end_color=EXCEL_STYLES['summary_bg_color'],
                                   fill_type='solid')
        header_font = Font(name=EXCEL_STYLES['font_name'],
                           size=EXCEL_STYLES['font_size'],
                           bold=True)
        title_font = Font(name=EXCEL_STYLES['font_name'],
                          size=14,
                          bold=True)
        border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        money_columns = {'Pool', 'Share', 'Revenue', 'Commission'}

        # Title section
        ws['A1'] = f"{COMPANY_NAME} - {self.title}"
        ws['A1'].font = title_font

        ws['A2'] = f"Technician: {self.result.technician_name}"
        ws['A2'].font = Font(size=12, bold=True)

        start_date, end_date = self.get_date_range()
        if start_date and end_date:
            date_str = f"{start_date.strftime('%m/%d/%Y')} - {end_date.strftime('%m/%d/%Y')}"
            ws['A3'] = f"Period: {date_str}"

        # Data starts at row 5
        df = self.to_dataframe()
        start_row = 5

        # Headers
        for col_idx, col_name in enumerate(df.columns, 1):
            cell = ws.cell(row=start_row, column=col_idx, value=col_name)
            cell.fill = header_fill
            cell.font = header_font
            cell.border = border
            cell.alignment = Alignment(horizontal='center')

        # Data rows
        for row_idx, (_, row) in enumerate(df.iterrows()):
            for col_idx, col_name in enumerate(df.columns, 1):
                value = row[col_name]
                cell = ws.cell(row=start_row + row_idx + 1, column=col_idx, value=value)
                cell.border = border
                if col_name in money_columns:
                    cell.alignment = Alignment(horizontal='right')
                    cell.number_format = '$#,##0.00'

        # Summary row
        summary_row = start_row + len(df) + 1
        summary_data = self.get_summary_row()
        for col_idx, col_name in enumerate(df.columns, 1):
            cell = ws.cell(row=summary_row, column=col_idx, value=summary_data[col_name])
            cell.fill = summary_fill
            cell.font = Font(bold=True)
            cell.border = border
            if col_name in money_columns:
                cell.alignment = Alignment(horizontal='right')
                cell.number_format = '$#,##0.00'

        # Adjust column widths
        if self.is_pbp:
            column_widths = [12, 28, 18, 24, 12, 11, 9, 12, 70]
        else:
            column_widths = [12, 28, 18, 14, 6, 14, 30]
        for idx, width in enumerate(column_widths, 1):
            ws.column_dimensions[chr(64 + idx)].width = width

        # Save
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        wb.save(filepath)


def export_batch(results: List[Union[TechnicianPayout, TechnicianLeads]], output_dir: str,
                 suffix: str = '') -> List[str]:
    """Write one workbook per technician, returns the written paths."""
    paths = []
    for result in results:
        name = result.technician_name.replace(' ', '_')
        filepath = str(Path(output_dir) / f"{name}{suffix}.xlsx")
        ReportGenerator(result).export_excel(filepath)
        paths.append(filepath)
    return paths
