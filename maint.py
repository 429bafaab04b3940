#!/usr/bin/env python3
"""
Unified CLI for fleet preventive maintenance.

Commands:
  status         - Show which PM plans are ok, due or overdue
  grid           - Show the annual PM grid for a year
  set-month      - Set a month of the annual grid (optionally logging a service)
  log            - Log a performed service and advance the plan
  history        - View PM service history
  delete-history - Remove a PM history entry
  compliance     - Compare performed services to their due targets
"""

import argparse
import logging
import sys
from datetime import date, datetime, time
from pathlib import Path
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from tabulate import tabulate

from fleetpm import (
    ComplianceItem,
    EnrichedPlan,
    GridRow,
    HistoryLog,
    MonthEditError,
    MonthStatus,
    PlanConfigError,
    PlanStatus,
    PMHistory,
    load_fleet,
)
from fleetpm.compliance import summarize
from fleetpm.loader import (
    append_history_entry,
    delete_history_entry,
    save_annual_plans,
    update_plan,
)
from fleetpm.reconciler import show_completed_dot, show_plan_dot

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance or odometer reading for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_date(value) -> str:
    """Format a date or ISO string for display (date part only)."""
    if value is None or value == "":
        return "-"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def format_days(days: Optional[int]) -> str:
    """Format days remaining (e.g., '3mo 15d' or '-2mo 5d')."""
    if days is None:
        return "-"
    sign = "-" if days < 0 else ""
    days = abs(days)
    months = days // 30
    remaining_days = days % 30
    if months > 0:
        return f"{sign}{months}mo {remaining_days}d"
    return f"{sign}{days}d"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def format_cell(status: MonthStatus) -> str:
    """Grid cell: plan dot and/or completion mark."""
    cell = ""
    if show_plan_dot(status):
        cell += "o"
    if show_completed_dot(status):
        cell += "x"
    return cell or "."


# =============================================================================
# Table builders
# =============================================================================


def make_status_table(plans: List[EnrichedPlan]) -> List[List[str]]:
    """Convert enriched plans to table rows."""
    rows = []
    for e in plans:
        rows.append(
            [
                e.status.value.upper(),
                e.plan.id,
                e.plan.vehicle_license_plate,
                e.vehicle_type or "-",
                e.plan.plan_name,
                e.plan.frequency_label,
                format_date(e.plan.last_service_date),
                format_date(e.next_service_date),
                format_days(e.days_until_next_service),
                format_km(e.current_mileage),
                format_km(e.next_service_mileage),
                format_km(e.km_until_next_service),
            ]
        )
    return rows


def make_grid_table(rows: List[GridRow]) -> List[List[str]]:
    """Convert grid rows to table rows, one column per month."""
    table = []
    for row in rows:
        plan = row.enriched.plan
        table.append(
            [plan.id, plan.vehicle_license_plate, truncate(plan.plan_name, 24)]
            + [format_cell(status) for status in row.statuses]
        )
    return table


def make_history_table(entries: List[PMHistory]) -> List[List[str]]:
    """Convert history entries to table rows."""
    rows = []
    for entry in entries:
        rows.append(
            [
                entry.id,
                format_date(entry.service_date),
                entry.vehicle_license_plate,
                entry.plan_name,
                format_km(entry.mileage),
                format_date(entry.target_service_date),
                format_km(entry.target_mileage),
                entry.technician_id or "-",
                truncate(entry.notes),
            ]
        )
    return rows


def make_compliance_table(items: List[ComplianceItem]) -> List[List[str]]:
    """Convert compliance items to table rows."""
    rows = []
    for item in items:
        rows.append(
            [
                item.status.value,
                item.vehicle_license_plate,
                item.plan_name,
                format_date(item.target_date),
                format_date(item.actual_date),
                f"{item.date_diff:+d}d" if item.date_diff is not None else "-",
                format_km(item.target_mileage),
                format_km(item.actual_mileage),
                f"{item.mileage_diff:+,.0f}" if item.mileage_diff is not None else "-",
            ]
        )
    return rows


# =============================================================================
# Commands
# =============================================================================


def get_now(args) -> datetime:
    """Evaluation time: --as-of at midnight, or the current time."""
    if args.as_of:
        return datetime.combine(date.fromisoformat(args.as_of), time.min)
    return datetime.now()


def parse_status_filter(value: Optional[str]) -> Optional[PlanStatus]:
    return PlanStatus(value) if value else None


def cmd_status(args):
    """Show which PM plans are ok, due or overdue."""
    fleet = load_fleet(args.fleet_file)
    now = get_now(args)
    plans = fleet.enriched_plans(
        now, status_filter=parse_status_filter(args.status), search_term=args.search
    )

    print(f"As of: {now.date().isoformat()}")
    print(f"Plans: {len(fleet.plans)}")
    if args.status or args.search:
        print(f"Showing: {len(plans)} (filtered)")
    print()

    if not plans:
        print("No plans found.")
        return 0

    headers = [
        "Status",
        "Plan ID",
        "Plate",
        "Type",
        "Plan",
        "Every",
        "Last Done",
        "Next Due",
        "Remaining (time)",
        "Current (km)",
        "Due (km)",
        "Remaining (km)",
    ]
    print(tabulate(make_status_table(plans), headers=headers, tablefmt="simple"))
    return 0


def cmd_grid(args):
    """Show the annual PM grid for a year."""
    fleet = load_fleet(args.fleet_file)
    now = get_now(args)
    year = args.year or now.year
    rows = fleet.annual_grid(
        year,
        now,
        search_term=args.search,
        status_filter=parse_status_filter(args.status),
    )

    print(f"Annual PM plan {year}")
    print("Legend: o = planned, x = completed, ox = completed as planned")
    print()

    if not rows:
        print(f"No plans found for {year}.")
        return 0

    headers = ["Plan ID", "Plate", "Plan"] + MONTH_NAMES
    print(tabulate(make_grid_table(rows), headers=headers, tablefmt="simple"))
    return 0


def cmd_set_month(args):
    """Set a month of the annual grid."""
    fleet = load_fleet(args.fleet_file)
    now = get_now(args)
    status = MonthStatus(args.status)
    month_index = args.month - 1

    history_log = None
    if status.is_completed:
        history_log = HistoryLog(
            service_date=args.date or now.date().isoformat(),
            mileage=args.mileage,
            technician_id=args.by,
            notes=args.notes or "",
        )

    plan = fleet.require_plan(args.plan_id)
    before = fleet.effective_month_status(plan.id, args.year, month_index)
    edit = fleet.set_month_status(plan.id, args.year, month_index, status, history_log)

    print(f"Plan:  {plan.display_name}")
    print(f"Month: {MONTH_NAMES[month_index]} {args.year}")
    print(f"Status: {before.value} -> {status.value}")
    if edit.history_entry:
        entry = edit.history_entry
        print(f"History: {entry.service_date} @ {format_km(entry.mileage)} km")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_annual_plans(args.fleet_file, fleet.annual_plans)
    if edit.history_entry:
        append_history_entry(args.fleet_file, edit.history_entry)
    print("Month saved.")
    return 0


def cmd_log(args):
    """Log a performed service and advance the plan."""
    fleet = load_fleet(args.fleet_file)
    now = get_now(args)
    service_date = args.date or now.date().isoformat()

    entry = fleet.log_service(
        args.plan_id, service_date, args.mileage, now, args.by, args.notes or ""
    )
    plan = fleet.require_plan(args.plan_id)

    print(f"Adding service entry to {args.fleet_file}:")
    print(f"  Plan:    {plan.display_name}")
    print(f"  Date:    {entry.service_date}")
    print(f"  Mileage: {format_km(entry.mileage)}")
    print(f"  Target:  {format_date(entry.target_service_date)} / "
          f"{format_km(entry.target_mileage)} km")
    if entry.technician_id:
        print(f"  By:      {entry.technician_id}")
    if entry.notes:
        print(f"  Notes:   {entry.notes}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    append_history_entry(args.fleet_file, entry)
    update_plan(args.fleet_file, plan)
    print("Entry saved.")
    return 0


def cmd_history(args):
    """View PM service history."""
    fleet = load_fleet(args.fleet_file)
    entries = fleet.history_sorted(reverse=not args.asc)

    if args.plan:
        term = args.plan.lower()
        entries = [
            e
            for e in entries
            if term in e.plan_name.lower()
            or term in e.vehicle_license_plate.lower()
            or term == e.maintenance_plan_id.lower()
        ]
    if args.since:
        entries = [e for e in entries if format_date(e.service_date) >= args.since]

    print(f"Total services: {len(fleet.history)}")
    if args.plan or args.since:
        print(f"Showing: {len(entries)} (filtered)")
    print()

    if not entries:
        print("No history entries found.")
        return 0

    headers = [
        "ID", "Date", "Plate", "Plan", "Mileage",
        "Target Date", "Target (km)", "Technician", "Notes",
    ]
    print(tabulate(make_history_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_delete_history(args):
    """Remove a PM history entry."""
    fleet = load_fleet(args.fleet_file)
    entry = fleet.delete_history_entry(args.entry_id)

    print(f"Removing {entry.id}: {entry.plan_name} for {entry.vehicle_license_plate} "
          f"on {format_date(entry.service_date)}")

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    delete_history_entry(args.fleet_file, entry.id)
    print("Entry removed.")
    return 0


def cmd_compliance(args):
    """Compare performed services to their due targets."""
    fleet = load_fleet(args.fleet_file)
    today = get_now(args).date()
    start = date.fromisoformat(args.start) if args.start else today.replace(day=1)
    end = (
        date.fromisoformat(args.end)
        if args.end
        else start + relativedelta(months=1, days=-1)
    )

    items = fleet.compliance(start, end, today, args.search)
    counts = summarize(items)

    print(f"PM compliance {start.isoformat()} .. {end.isoformat()}")
    print(", ".join(f"{status.value}: {count}" for status, count in counts.items()))
    print()

    if not items:
        print("No services in range.")
        return 0

    headers = [
        "Status", "Plate", "Plan", "Target Date", "Actual Date",
        "Diff (days)", "Target (km)", "Actual (km)", "Diff (km)",
    ]
    print(tabulate(make_compliance_table(items), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fleet preventive maintenance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fleets/depot.yaml status
  %(prog)s fleets/depot.yaml status --status overdue
  %(prog)s fleets/depot.yaml grid --year 2024
  %(prog)s fleets/depot.yaml set-month MP-1 2024 5 none
  %(prog)s fleets/depot.yaml set-month MP-1 2024 4 completed \\
      --date 2024-04-18 --mileage 130250 --by T-01
  %(prog)s fleets/depot.yaml log MP-1 --mileage 130250
  %(prog)s fleets/depot.yaml compliance --start 2024-04-01 --end 2024-04-30
""",
    )
    parser.add_argument("fleet_file", type=Path, help="Path to fleet YAML file")
    parser.add_argument(
        "--as-of",
        type=str,
        help="Evaluate status as of this date (YYYY-MM-DD, default: now)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log store writes"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    status_choices = [s.value for s in PlanStatus]

    # Status subcommand
    status_parser = subparsers.add_parser(
        "status", help="Show which PM plans are ok, due or overdue"
    )
    status_parser.add_argument("--status", choices=status_choices)
    status_parser.add_argument(
        "--search", type=str, default="", help="Filter by plate or plan name"
    )

    # Grid subcommand
    grid_parser = subparsers.add_parser("grid", help="Show the annual PM grid")
    grid_parser.add_argument("--year", type=int, help="Year (default: current)")
    grid_parser.add_argument("--status", choices=status_choices)
    grid_parser.add_argument(
        "--search", type=str, default="", help="Filter by plate or plan name"
    )

    # Set-month subcommand
    set_month_parser = subparsers.add_parser(
        "set-month", help="Set the status of one month of the annual grid"
    )
    set_month_parser.add_argument("plan_id", type=str, help="Maintenance plan id")
    set_month_parser.add_argument("year", type=int, help="Grid year")
    set_month_parser.add_argument(
        "month", type=int, choices=range(1, 13), metavar="MONTH", help="Month 1-12"
    )
    set_month_parser.add_argument(
        "status", choices=[s.value for s in MonthStatus], help="New month status"
    )
    set_month_parser.add_argument(
        "--date", type=str, help="Service date for completed months (default: today)"
    )
    set_month_parser.add_argument(
        "--mileage", type=float, help="Odometer at service (completed months)"
    )
    set_month_parser.add_argument("--by", type=str, help="Technician id")
    set_month_parser.add_argument("--notes", type=str, help="Notes about the service")
    set_month_parser.add_argument(
        "--dry-run", action="store_true", help="Show the change without saving"
    )

    # Log subcommand
    log_parser = subparsers.add_parser(
        "log", help="Log a performed service and advance the plan"
    )
    log_parser.add_argument("plan_id", type=str, help="Maintenance plan id")
    log_parser.add_argument(
        "--date", type=str, help="Service date in YYYY-MM-DD format (default: today)"
    )
    log_parser.add_argument(
        "--mileage", type=float, required=True, help="Odometer at service"
    )
    log_parser.add_argument("--by", type=str, help="Technician id")
    log_parser.add_argument("--notes", type=str, help="Notes about the service")
    log_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    # History subcommand
    history_parser = subparsers.add_parser("history", help="View PM service history")
    history_parser.add_argument(
        "--plan", type=str, help="Filter by plan id, plan name or plate"
    )
    history_parser.add_argument(
        "--since", type=str, help="Show only entries since date (YYYY-MM-DD)"
    )
    history_parser.add_argument(
        "--asc", action="store_true", help="Sort ascending instead of descending"
    )

    # Delete-history subcommand
    delete_parser = subparsers.add_parser(
        "delete-history", help="Remove a PM history entry"
    )
    delete_parser.add_argument("entry_id", type=str, help="History entry id")
    delete_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be removed"
    )

    # Compliance subcommand
    compliance_parser = subparsers.add_parser(
        "compliance", help="Compare performed services to their due targets"
    )
    compliance_parser.add_argument(
        "--start", type=str, help="Range start (default: first of current month)"
    )
    compliance_parser.add_argument(
        "--end", type=str, help="Range end (default: end of start month)"
    )
    compliance_parser.add_argument(
        "--search", type=str, default="", help="Filter by plate or plan name"
    )

    return parser


COMMANDS = {
    "status": cmd_status,
    "grid": cmd_grid,
    "set-month": cmd_set_month,
    "log": cmd_log,
    "history": cmd_history,
    "delete-history": cmd_delete_history,
    "compliance": cmd_compliance,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate fleet file exists
    if not args.fleet_file.exists():
        print(f"Error: File not found: {args.fleet_file}")
        return 1

    try:
        return COMMANDS[args.command](args)
    except (PlanConfigError, MonthEditError) as e:
        print(f"Error: {e}")
        return 1
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        return 1
    except ValueError as e:
        # Bad stored data, e.g. an unknown month status
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
