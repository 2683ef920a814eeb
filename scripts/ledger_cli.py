#!/usr/bin/env python3
"""
Ledger command line.

Creates the tables, bootstraps the chart of accounts and prints reports
against the database named by LEDGER_DATABASE_URL (or --db-url).

Usage:
    python3 scripts/ledger_cli.py init-db
    python3 scripts/ledger_cli.py bootstrap --actor-id <uuid> --role admin
    python3 scripts/ledger_cli.py trial-balance --as-of 2024-01-31
    python3 scripts/ledger_cli.py income-statement --period 2024-01
    python3 scripts/ledger_cli.py balance-sheet
    python3 scripts/ledger_cli.py liquidity
    python3 scripts/ledger_cli.py export-journal --period 2024-01 > jan.csv
    python3 scripts/ledger_cli.py close-period --period 2024-01 --actor-id <uuid> --role ceo
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from uuid import UUID, uuid4

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 72


def _period(label: str):
    from ledger_kernel.domain.periods import Period

    try:
        return Period.parse(label)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Microfinance ledger administration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--db-url", default=None, help="Database URL (default: LEDGER_DATABASE_URL).")
    parser.add_argument("--config", type=Path, default=None, help="Policy YAML (default: packaged defaults).")
    parser.add_argument("--echo", action="store_true", help="Echo SQL.")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all ledger tables.")

    def _with_actor(p: argparse.ArgumentParser, default_role: str) -> None:
        p.add_argument("--actor-id", type=UUID, default=None, help="Acting user id (default: random).")
        p.add_argument("--role", action="append", default=None, help=f"Role tag (repeatable, default: {default_role}).")
        p.set_defaults(default_role=default_role)

    _with_actor(sub.add_parser("bootstrap", help="Create the missing system accounts."), "admin")

    tb = sub.add_parser("trial-balance", help="Print the trial balance.")
    tb.add_argument("--as-of", type=date.fromisoformat, default=None, help="YYYY-MM-DD (default: today).")

    inc = sub.add_parser("income-statement", help="Print a monthly income statement.")
    inc.add_argument("--period", type=_period, required=True, help="YYYY-MM")

    bs = sub.add_parser("balance-sheet", help="Print the balance sheet.")
    bs.add_argument("--as-of", type=date.fromisoformat, default=None, help="YYYY-MM-DD (default: today).")

    sub.add_parser("liquidity", help="Print total cash, bank and mobile money.")

    exp = sub.add_parser("export-journal", help="Write the month's journal lines as CSV to stdout.")
    exp.add_argument("--period", type=_period, required=True, help="YYYY-MM")

    close = sub.add_parser("close-period", help="Close a month.")
    close.add_argument("--period", type=_period, required=True, help="YYYY-MM")
    _with_actor(close, "ceo")

    return parser.parse_args(argv)


def _actor(args):
    from ledger_kernel.domain.types import Actor

    roles = args.role or [args.default_role]
    return Actor.of(args.actor_id or uuid4(), *roles)


def _print_trial_balance(report) -> None:
    print("=" * W)
    print("  TRIAL BALANCE".center(W))
    print(f"  As of {report.metadata.as_of_date}".center(W))
    print("=" * W)
    print(f"  {'Code':<10} {'Account':<30} {'Debit':>13} {'Credit':>13}")
    print("  " + "-" * (W - 2))
    for line in report.lines:
        print(
            f"  {line.code.value:<10} {line.name[:30]:<30} "
            f"{line.debit_total:>13,.2f} {line.credit_total:>13,.2f}"
        )
    print("  " + "-" * (W - 2))
    print(f"  {'TOTALS':<41} {report.total_debits:>13,.2f} {report.total_credits:>13,.2f}")
    status = "BALANCED" if report.is_balanced else f"OUT OF BALANCE by {report.difference:,.2f}"
    print(f"  {status}")
    print()


def _print_income_statement(report) -> None:
    print("=" * W)
    print("  INCOME STATEMENT".center(W))
    print(f"  {report.period_label}".center(W))
    print("=" * W)
    print("  Revenue")
    for line in report.revenue:
        print(f"    {line.name[:44]:<44} {line.amount:>20,.2f}")
    print(f"  {'Total revenue':<46} {report.total_revenue:>20,.2f}")
    print("  Expenses")
    for line in report.expenses:
        print(f"    {line.name[:44]:<44} {line.amount:>20,.2f}")
    print(f"  {'Total expenses':<46} {report.total_expenses:>20,.2f}")
    print("  " + "-" * (W - 2))
    print(f"  {'NET PROFIT':<46} {report.net_profit:>20,.2f}")
    print()


def _print_balance_sheet(report) -> None:
    print("=" * W)
    print("  BALANCE SHEET".center(W))
    print(f"  As of {report.metadata.as_of_date}".center(W))
    print("=" * W)
    print(f"  {'Cash and bank':<46} {report.total_cash_and_bank:>20,.2f}")
    print(f"  {'Loan receivables (' + report.loan_figure_source.value + ')':<46} {report.loan_receivables:>20,.2f}")
    print(f"  {'Other assets':<46} {report.total_other_assets:>20,.2f}")
    print(f"  {'TOTAL ASSETS':<46} {report.total_assets:>20,.2f}")
    print("  " + "-" * (W - 2))
    print(f"  {'Liabilities':<46} {report.total_liabilities:>20,.2f}")
    for line in report.equity:
        print(f"  {line.name[:46]:<46} {line.amount:>20,.2f}")
    print(f"  {'Retained earnings (unclosed)':<46} {report.retained_earnings:>20,.2f}")
    print(f"  {'TOTAL LIABILITIES AND EQUITY':<46} {report.total_liabilities_and_equity:>20,.2f}")
    status = "BALANCED" if report.is_balanced else f"DIFFERENCE {report.difference:,.2f}"
    print(f"  {status}")
    print()


def main(argv=None) -> int:
    args = _parse_args(argv)

    from ledger_config import get_active_policy, get_database_url
    from ledger_kernel.db.engine import create_tables, init_engine_from_url, session_scope
    from ledger_kernel.domain.clock import SystemClock
    from ledger_kernel.db.immutability import register_immutability_listeners
    from ledger_kernel.exceptions import LedgerKernelError
    from ledger_kernel.reporting import ReportingService, export_journal_csv
    from ledger_kernel.services import ChartOfAccountsService, PeriodService

    policy = get_active_policy(args.config)
    engine = init_engine_from_url(args.db_url or get_database_url(), echo=args.echo)
    register_immutability_listeners()
    clock = SystemClock()

    if args.command == "init-db":
        create_tables(engine)
        print("  Tables created.")
        return 0

    try:
        with session_scope() as session:
            reports = ReportingService(session, clock=clock, policy=policy)

            if args.command == "bootstrap":
                created = ChartOfAccountsService(session, clock=clock, policy=policy) \
                    .initialize_chart_of_accounts(_actor(args))
                for account in created:
                    print(f"  Created {account.code.value:<10} {account.name}")
                print(f"  {len(created)} system account(s) created.")

            elif args.command == "trial-balance":
                _print_trial_balance(reports.trial_balance(args.as_of))

            elif args.command == "income-statement":
                _print_income_statement(reports.monthly_income_statement(args.period))

            elif args.command == "balance-sheet":
                _print_balance_sheet(reports.balance_sheet(args.as_of))

            elif args.command == "liquidity":
                print(f"  Total liquidity ({policy.currency}): {reports.total_liquidity():,.2f}")

            elif args.command == "export-journal":
                sys.stdout.write(export_journal_csv(session, args.period))

            elif args.command == "close-period":
                closed = PeriodService(session, clock=clock, policy=policy) \
                    .close_period(args.period, _actor(args))
                print(f"  Closed {closed.month}: net profit {closed.net_profit:,.2f}")

    except LedgerKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
