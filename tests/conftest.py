"""
Pytest fixtures for the ledger kernel test suite.

Provides:
- An in-memory SQLite engine and session per test
- A deterministic clock fixed at 2024-01-15 12:00 UTC
- Actors for every role
- Ledger services bound to the session and clock
- A bootstrapped chart of accounts
- Structured log capture
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from ledger_kernel.db.engine import build_engine, create_tables
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.types import AccountCategory, AccountCode, Actor, Role
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.reporting import ReportingService
from ledger_kernel.services import (
    ApprovalService,
    BudgetService,
    ChartOfAccountsService,
    LedgerService,
    PeriodService,
    ReconciliationService,
)

TODAY = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.post_entry(...)
            logs = captured_logs()
            assert any(r["message"] == "journal_entry_posted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def row_counts(session):
    """Return (entries, lines) currently visible in the session."""

    def _counts() -> tuple[int, int]:
        entries = session.execute(select(func.count(JournalEntry.id))).scalar_one()
        lines = session.execute(select(func.count(JournalLine.id))).scalar_one()
        return entries, lines

    return _counts


# =============================================================================
# Clock and actors
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(TODAY)


@pytest.fixture
def accountant():
    return Actor.of(uuid4(), Role.ACCOUNTANT)


@pytest.fixture
def admin():
    return Actor.of(uuid4(), Role.ADMIN)


@pytest.fixture
def ceo():
    return Actor.of(uuid4(), Role.CEO)


@pytest.fixture
def loan_officer():
    return Actor.of(uuid4(), Role.LOAN_OFFICER)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def ledger(session, clock):
    return LedgerService(session, clock=clock)


@pytest.fixture
def chart(session, clock):
    return ChartOfAccountsService(session, clock=clock)


@pytest.fixture
def periods(session, clock):
    return PeriodService(session, clock=clock)


@pytest.fixture
def approvals(session, clock):
    return ApprovalService(session, clock=clock)


@pytest.fixture
def reconciliation(session, clock):
    return ReconciliationService(session, clock=clock)


@pytest.fixture
def budgets(session, clock):
    return BudgetService(session, clock=clock)


@pytest.fixture
def reports(session, clock):
    return ReportingService(session, clock=clock)


# =============================================================================
# Chart of accounts
# =============================================================================


@pytest.fixture
def system_accounts(chart, accountant):
    """The five reserved accounts, keyed by code."""
    created = chart.initialize_chart_of_accounts(accountant)
    return {account.code: account for account in created}


@pytest.fixture
def bank(system_accounts):
    return system_accounts[AccountCode.BANK]


@pytest.fixture
def cash(system_accounts):
    return system_accounts[AccountCode.CASH]


@pytest.fixture
def capital(system_accounts):
    return system_accounts[AccountCode.CAPITAL]


@pytest.fixture
def retained_earnings(system_accounts):
    return system_accounts[AccountCode.EQUITY]


@pytest.fixture
def portfolio(system_accounts):
    return system_accounts[AccountCode.PORTFOLIO]


@pytest.fixture
def interest_income(chart, accountant, system_accounts):
    return chart.create_account(
        "Interest Income", AccountCategory.INCOME, AccountCode.INCOME, accountant
    )


@pytest.fixture
def salaries(chart, accountant, system_accounts):
    return chart.create_account(
        "Salaries", AccountCategory.EXPENSE, AccountCode.EXPENSE, accountant
    )


@pytest.fixture
def savings_deposits(chart, accountant, system_accounts):
    return chart.create_account(
        "Client Savings", AccountCategory.LIABILITY, AccountCode.LIABILITY, accountant
    )


@pytest.fixture
def account_balance(session):
    """Cached balance straight from the row."""

    def _balance(account_id):
        session.expire_all()
        return session.get(Account, account_id).balance

    return _balance
