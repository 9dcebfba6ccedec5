"""Main entry point for Technician Payroll Splits"""
import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from techpay.batch import PayrollBatch, RunContext
from techpay.classifier import TechnicianRoster
from techpay.data_loader import DataLoader
from techpay.errors import RosterUnavailableError
from techpay.report_generator import export_batch
from config import LOG_LEVEL


def _parse_day(value: str):
    return datetime.strptime(value, '%Y-%m-%d').date()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Calculate technician PBP splits and lead commissions')
    subparsers = parser.add_subparsers(dest='command', required=True)

    pbp = subparsers.add_parser('pbp', help='Split PBP job pools between technicians')
    pbp.add_argument('ledger', help='Path to PBP job ledger (Excel/CSV)')
    pbp.add_argument('--roster', '-r', required=True, help='Path to technician roster (Excel/CSV)')
    pbp.add_argument('--technician', '-t', action='append', default=None,
                     help='Technician name (repeatable). Default: every roster technician')
    pbp.add_argument('--output', '-o', default=None, help='Output directory for reports')

    leads = subparsers.add_parser('leads', help='Calculate Lead Set commissions')
    leads.add_argument('leads_file', help='Path to Lead Set export (Excel/CSV)')
    leads.add_argument('--technician', '-t', action='append', default=None,
                       help='Technician name (repeatable). Default: everyone who generated a lead')
    leads.add_argument('--start', type=_parse_day, default=None, help='First completion date (YYYY-MM-DD)')
    leads.add_argument('--end', type=_parse_day, default=None, help='Last completion date (YYYY-MM-DD)')
    leads.add_argument('--output', '-o', default=None, help='Output directory for reports')

    return parser


def print_batch(batch, load_context: RunContext) -> None:
    for result in batch.results:
        print(f"  {result.technician_name}: {len(result.entries)} entries, ${result.total:,.2f}")
    for name, error in batch.failed:
        print(f"  {name}: FAILED - {error}")

    counts = batch.context.summary()
    print(f"\n=== Summary ===")
    print(f"Technicians: {batch.technicians}")
    print(f"Entries: {batch.entries}")
    print(f"Total: ${batch.total:,.2f}")
    print(f"Processed: {counts['processed']}  Skipped: {counts['skipped'] + load_context.skipped}  "
          f"Errors: {counts['errors'] + load_context.errors + len(batch.failed)}")


def run_pbp(args) -> int:
    load_context = RunContext()
    roster = TechnicianRoster.from_entries(DataLoader.load_roster(args.roster))
    jobs = DataLoader.load_jobs(args.ledger, load_context)
    print(f"Loaded {len(roster)} technicians and {len(jobs)} PBP jobs")

    names = args.technician or roster.names()
    batch = PayrollBatch(roster=roster, jobs=jobs).run_pbp(names)
    print_batch(batch, load_context)

    if args.output:
        paths = export_batch(batch.results, args.output, suffix='_PBP')
        print(f"Reports saved to: {Path(args.output)} ({len(paths)} files)")
    return 0


def run_leads(args) -> int:
    load_context = RunContext()
    leads = DataLoader.load_leads(args.leads_file, load_context)
    print(f"Loaded {len(leads)} leads")

    names = args.technician
    if not names:
        seen = {}
        for lead in leads:
            if lead.lead_generated_by:
                seen.setdefault(lead.lead_generated_by.lower(), lead.lead_generated_by)
        names = list(seen.values())

    date_range = None
    if args.start or args.end:
        date_range = (args.start or date.min, args.end or date.max)

    batch = PayrollBatch(leads=leads).run_lead_set(names, date_range)
    print_batch(batch, load_context)

    if args.output:
        paths = export_batch(batch.results, args.output, suffix='_LeadSet')
        print(f"Reports saved to: {Path(args.output)} ({len(paths)} files)")
    return 0


def main(argv=None) -> int:
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    args = build_parser().parse_args(argv)

    try:
        if args.command == 'pbp':
            return run_pbp(args)
        return run_leads(args)
    except RosterUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
