"""
Append-only journal.

Posted entries and lines cannot be updated or deleted through the ORM, and
an account's category is frozen once lines reference it.
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.types import AccountCategory
from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalLine


@pytest.fixture
def posted(ledger, session, bank, capital, accountant):
    record = ledger.post_injection(bank.id, Decimal("500"), "Seed", accountant)
    return session.get(JournalEntry, record.id)


class TestJournalEntryImmutability:
    def test_description_cannot_change(self, session, posted):
        posted.description = "Edited"
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "JournalEntry"

    def test_entry_cannot_be_deleted(self, session, posted):
        session.delete(posted)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestJournalLineImmutability:
    def test_amount_cannot_change(self, session, posted):
        line = session.get(JournalLine, posted.lines[0].id)
        line.debit = Decimal("1.00")
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "JournalLine"

    def test_line_cannot_be_deleted(self, session, posted):
        session.delete(posted.lines[0])
        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestAccountCategory:
    def test_category_frozen_once_referenced(self, session, posted, bank, captured_logs):
        account = session.get(Account, bank.id)
        account.category = AccountCategory.EXPENSE.value
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "Account"
        assert any(r["message"] == "immutability_violation_blocked" for r in captured_logs())

    def test_unused_account_can_be_recategorised(self, session, salaries):
        account = session.get(Account, salaries.id)
        account.category = AccountCategory.ASSET.value
        session.flush()
        session.expire_all()
        assert session.get(Account, salaries.id).category == AccountCategory.ASSET.value

    def test_name_can_change(self, session, posted, bank):
        account = session.get(Account, bank.id)
        account.name = "Standard Bank"
        session.flush()
