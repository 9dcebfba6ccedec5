"""Configuration settings for Technician Payroll Splits"""
import os

# Company Information
COMPANY_NAME = "Technician Payroll"

# Google Sheets
GOOGLE_SHEET_ID = os.environ.get('GOOGLE_SHEET_ID', '')
ROSTER_SHEET_NAME = 'Technicians'
PBP_SHEET_NAME = 'PBP'
LEAD_SET_SHEET_NAME = 'Lead Set'

# Sheets that are never technician tabs
EXCLUDED_SHEETS = [
    'Lead Set', 'Menu', 'PBP', 'Spiff/Bonus', 'Yard Signs', 'Timesheet',
    'Technicians', 'Setup', 'Summary', 'Config', 'Instructions',
]

# Technician sheet layout (1-based rows/columns)
TECH_SHEET_FIRST_DATA_ROW = 16
TECH_SHEET_FIRST_COLUMN = 5   # Column E
TECH_SHEET_MARKER_COLUMN = 10  # Column J

# Summary cells: (count row, count col), (total row, total col)
SUMMARY_CELLS = {
    'L-E-A-D': {'count': (14, 2), 'total': (13, 3)},
    'P-B-P': {'count': (14, 4), 'total': (13, 5)},
}

# Row markers written in column J
LEAD_MARKER = 'L-E-A-D'
PBP_MARKER = 'P-B-P'

# Lead Set commission tiers: (revenue upper bound, percentage)
LEAD_SET_TIERS = [
    (10000, 2),
    (30000, 3),
]
LEAD_SET_TOP_PERCENTAGE = 4

# Logging
LOG_LEVEL = os.environ.get('TECHPAY_LOG_LEVEL', 'INFO')

# Excel styling
EXCEL_STYLES = {
    'header_bg_color': 'D3D3D3',  # Light gray
    'summary_bg_color': '00FFFF',  # Cyan
    'font_name': 'Arial',
    'font_size': 10
}
