"""
Technician Payroll Splits - Streamlit Application
"""
import logging
import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path

import pandas as pd
import streamlit as st

from techpay.batch import PayrollBatch, RunContext
from techpay.calculator import PBPCalculator
from techpay.classifier import TechnicianRoster
from techpay.data_loader import DataLoader
from techpay.errors import LedgerRecordError, MissingTechnicianSheetError, RosterUnavailableError
from techpay.report_generator import ReportGenerator
from techpay.sheets_storage import get_sheets_client, roster_entries_from_sheet
from techpay.team_split import format_percent
from config import COMPANY_NAME, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)


def _save_upload(uploaded) -> str:
    """Write an uploaded file to a temp path so the loaders can read it."""
    suffix = Path(uploaded.name).suffix or '.xlsx'
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(uploaded.getvalue())
        return tmp.name


def _excel_bytes(generator: ReportGenerator) -> bytes:
    with tempfile.NamedTemporaryFile(delete=False, suffix='.xlsx') as tmp:
        tmp_path = tmp.name
    generator.export_excel(tmp_path)
    data = Path(tmp_path).read_bytes()
    Path(tmp_path).unlink(missing_ok=True)
    return data


def _show_counts(context: RunContext) -> None:
    counts = context.summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("Processed", counts['processed'])
    col2.metric("Skipped", counts['skipped'])
    col3.metric("Errors", counts['errors'])
    if context.messages:
        with st.expander("⚠️ Rows with errors"):
            for message in context.messages:
                st.text(message)


def _show_result(result, use_sheets: bool, key: str) -> None:
    generator = ReportGenerator(result)
    st.markdown(f"#### 👷 {result.technician_name}: ${result.total:,.2f} ({len(result.entries)} rows)")
    if not result.entries:
        st.caption("No payable rows")
        return

    st.dataframe(generator.to_dataframe(), use_container_width=True)

    timestamp = datetime.now().strftime('%Y%m%d')
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="📊 Download Excel Report",
            data=_excel_bytes(generator),
            file_name=f"{result.technician_name.replace(' ', '_')}_{key}_{timestamp}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key=f"download_{key}_{result.technician_name}"
        )
    with col2:
        if use_sheets and st.button("📤 Write to technician sheet", key=f"write_{key}_{result.technician_name}"):
            try:
                rows = get_sheets_client().write_technician_result(result)
            except MissingTechnicianSheetError as e:
                st.warning(f"⚠️ {e}")
            else:
                st.success(f"Wrote {rows} rows to {result.technician_name}")


def page_pbp(use_sheets: bool):
    """Performance-Based Pay splits"""
    st.header("💰 Performance-Based Pay")

    load_context = RunContext()
    try:
        if use_sheets:
            client = get_sheets_client()
            roster = TechnicianRoster.from_entries(roster_entries_from_sheet(client))
            jobs = DataLoader.records_to_jobs(client.get_pbp_records(), load_context)
        else:
            roster_file = st.file_uploader("Technician roster", type=['xlsx', 'xls', 'csv'], key="roster")
            ledger_file = st.file_uploader("PBP job ledger", type=['xlsx', 'xls', 'csv'], key="ledger")
            if not roster_file or not ledger_file:
                st.info("📭 Upload a roster and a job ledger to start.")
                return
            roster = TechnicianRoster.from_entries(DataLoader.load_roster(_save_upload(roster_file)))
            jobs = DataLoader.load_jobs(_save_upload(ledger_file), load_context)
    except RosterUnavailableError as e:
        st.error(f"❌ {e}")
        return

    st.success(f"📋 {len(roster)} technicians, {len(jobs)} pool-bearing jobs")
    if use_sheets:
        tabs = {title.lower() for title in client.get_technician_sheet_names()}
        missing = [name for name in roster.names() if name.lower() not in tabs]
        if missing:
            st.warning(f"⚠️ No technician tab for: {', '.join(missing)}")

    with st.expander("🔍 Job split preview"):
        calculator = PBPCalculator(roster)
        preview = []
        for job in jobs:
            try:
                assignments = calculator.allocate_job(job)
            except LedgerRecordError:
                continue
            for a in assignments:
                preview.append({
                    'Customer': job.customer_name,
                    'Date': job.completion_date,
                    'Pool': job.pool_amount,
                    'Technician': a.profile.name,
                    'Class': a.profile.skill_class,
                    'Role': a.final_role,
                    'Split': format_percent(a.split_percent),
                    'Payout': a.payout_amount,
                })
        st.dataframe(pd.DataFrame(preview), use_container_width=True)

    selected = st.multiselect("Technicians", options=roster.names(), default=roster.names())
    if not st.button("▶️ Calculate PBP", type="primary"):
        return

    batch = PayrollBatch(roster=roster, jobs=jobs).run_pbp(selected)
    st.metric("Total PBP", f"${batch.total:,.2f}")
    _show_counts(batch.context)
    for result in batch.results:
        _show_result(result, use_sheets, 'PBP')
    for name, error in batch.failed:
        st.error(f"{name}: {error}")


def page_lead_set(use_sheets: bool):
    """Lead Set commissions"""
    st.header("🎯 Lead Set")

    load_context = RunContext()
    if use_sheets:
        leads = DataLoader.records_to_leads(get_sheets_client().get_lead_set_records(), load_context)
    else:
        leads_file = st.file_uploader("Lead Set export", type=['xlsx', 'xls', 'csv'], key="leads")
        if not leads_file:
            st.info("📭 Upload a Lead Set export to start.")
            return
        leads = DataLoader.load_leads(_save_upload(leads_file), load_context)

    names = sorted({l.lead_generated_by for l in leads if l.lead_generated_by})
    selected = st.multiselect("Technicians", options=names, default=names)

    col1, col2 = st.columns(2)
    with col1:
        start_date = st.date_input("From", value=date.today() - timedelta(days=30), key="lead_start")
    with col2:
        end_date = st.date_input("To", value=date.today(), key="lead_end")

    if not st.button("▶️ Calculate Lead Set", type="primary"):
        return

    batch = PayrollBatch(leads=leads).run_lead_set(selected, (start_date, end_date))
    st.metric("Total Commission", f"${batch.total:,.2f}")
    _show_counts(batch.context)
    for result in batch.results:
        _show_result(result, use_sheets, 'LeadSet')


def main():
    st.set_page_config(
        page_title=f"{COMPANY_NAME} - Payroll",
        page_icon="💵",
        layout="wide"
    )

    st.sidebar.title(f"💵 {COMPANY_NAME}")
    use_sheets = st.sidebar.toggle("Use Google Sheet", value=False)
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation",
        ["💰 PBP", "🎯 Lead Set"],
        label_visibility="collapsed"
    )

    if page == "💰 PBP":
        page_pbp(use_sheets)
    elif page == "🎯 Lead Set":
        page_lead_set(use_sheets)


if __name__ == '__main__':
    main()
