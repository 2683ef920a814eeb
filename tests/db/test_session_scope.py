"""
Transactional scope around posting operations.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from ledger_kernel.db.engine import is_transient, session_scope
from ledger_kernel.domain.types import AccountCode, LineSpec, ReferenceType
from ledger_kernel.exceptions import UnbalancedEntryError
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.services import ChartOfAccountsService, LedgerService


def _entry_count(session_factory):
    with session_factory() as session:
        return session.execute(select(func.count(JournalEntry.id))).scalar_one()


@pytest.fixture
def committed_chart(session_factory, clock, admin):
    with session_scope(session_factory) as session:
        created = ChartOfAccountsService(session, clock=clock).initialize_chart_of_accounts(admin)
    return {account.code: account for account in created}


class TestSessionScope:
    def test_commits_on_success(self, session_factory, committed_chart, clock, accountant):
        bank = committed_chart[AccountCode.BANK]
        with session_scope(session_factory) as session:
            LedgerService(session, clock=clock).post_injection(
                bank.id, Decimal("10"), "Seed", accountant
            )

        assert _entry_count(session_factory) == 1

    def test_rolls_back_on_error(self, session_factory, committed_chart, clock, accountant):
        bank = committed_chart[AccountCode.BANK]
        capital = committed_chart[AccountCode.CAPITAL]

        with pytest.raises(UnbalancedEntryError):
            with session_scope(session_factory) as session:
                ledger = LedgerService(session, clock=clock)
                ledger.post_injection(bank.id, Decimal("10"), "Seed", accountant)
                ledger.post_entry(
                    ReferenceType.ADJUSTMENT,
                    None,
                    "Bad",
                    [LineSpec.debit_of(bank.id, 5), LineSpec.credit_of(capital.id, 4)],
                    accountant,
                )

        assert _entry_count(session_factory) == 0


class TestIsTransient:
    def test_operational_errors_are_transient(self):
        assert is_transient(OperationalError("SELECT 1", {}, Exception("server closed the connection")))

    def test_integrity_errors_are_not(self):
        assert not is_transient(IntegrityError("INSERT", {}, Exception("duplicate key")))

    def test_kernel_errors_are_not(self):
        assert not is_transient(UnbalancedEntryError("1.00", "2.00"))
