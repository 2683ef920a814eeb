"""
Chart of accounts bootstrap and account creation.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from ledger_kernel.domain.types import AccountCategory, AccountCode, ReferenceType
from ledger_kernel.exceptions import (
    AuthorizationError,
    InvalidAccountCategoryError,
    InvalidAmountError,
    SystemAccountNotFoundError,
)
from ledger_kernel.models.account import Account
from ledger_kernel.selectors import JournalSelector


def _system_count(session) -> int:
    return session.execute(
        select(func.count(Account.id)).where(Account.is_system_account.is_(True))
    ).scalar_one()


class TestInitializeChart:
    def test_creates_the_five_reserved_accounts(self, session, chart, accountant):
        created = chart.initialize_chart_of_accounts(accountant)

        assert {(a.code, a.name, a.category) for a in created} == {
            (AccountCode.CAPITAL, "Share Capital", AccountCategory.EQUITY),
            (AccountCode.BANK, "Main Bank Account", AccountCategory.ASSET),
            (AccountCode.CASH, "Petty Cash", AccountCategory.ASSET),
            (AccountCode.EQUITY, "Retained Earnings", AccountCategory.EQUITY),
            (AccountCode.PORTFOLIO, "Loan Portfolio", AccountCategory.ASSET),
        }
        assert all(a.is_system_account and a.balance == Decimal("0.00") for a in created)
        assert _system_count(session) == 5

    def test_second_run_creates_nothing(self, session, chart, accountant):
        chart.initialize_chart_of_accounts(accountant)
        assert chart.initialize_chart_of_accounts(accountant) == []
        assert _system_count(session) == 5

    def test_fills_in_only_missing_codes(self, session, chart, accountant):
        chart.initialize_chart_of_accounts(accountant)
        cash = session.execute(
            select(Account).where(Account.code == "CASH")
        ).scalar_one()
        session.delete(cash)
        session.flush()

        created = chart.initialize_chart_of_accounts(accountant)

        assert [a.code for a in created] == [AccountCode.CASH]
        assert _system_count(session) == 5

    def test_existing_account_with_reserved_code_counts_as_present(self, session, chart, accountant):
        chart.create_account("Operating Bank", AccountCategory.ASSET, AccountCode.BANK, accountant)

        created = chart.initialize_chart_of_accounts(accountant)

        assert AccountCode.BANK not in [a.code for a in created]
        assert len(created) == 4
        banks = session.execute(
            select(func.count(Account.id)).where(Account.code == "BANK")
        ).scalar_one()
        assert banks == 1
        assert chart.get_system_account(AccountCode.BANK).name == "Operating Bank"

    def test_requires_posting_role(self, chart, loan_officer):
        with pytest.raises(AuthorizationError):
            chart.initialize_chart_of_accounts(loan_officer)

    def test_logs_created_codes(self, chart, accountant, captured_logs):
        chart.initialize_chart_of_accounts(accountant)
        event = next(r for r in captured_logs() if r["message"] == "chart_initialized")
        assert sorted(event["created_codes"]) == ["BANK", "CAPITAL", "CASH", "EQUITY", "PORTFOLIO"]


class TestCreateAccount:
    def test_plain_account(self, chart, accountant):
        account = chart.create_account(
            "Airtel Money", AccountCategory.ASSET, AccountCode.MOBILE, accountant,
            account_number="0999123456",
        )
        assert account.balance == Decimal("0.00")
        assert not account.is_system_account
        assert account.account_number == "0999123456"

    def test_opening_balance_is_funded_from_capital(
        self, session, chart, capital, accountant, account_balance
    ):
        account = chart.create_account(
            "NBM Current", AccountCategory.ASSET, AccountCode.BANK, accountant,
            bank_name="National Bank", opening_balance=Decimal("5000"),
        )

        assert account.balance == Decimal("5000.00")
        assert account_balance(capital.id) == Decimal("5000.00")
        entries = JournalSelector(session).entries_for(account.id, ReferenceType.INJECTION)
        assert len(entries) == 1
        assert entries[0].description == "Initial balance for NBM Current"

    def test_opening_balance_without_capital_creates_nothing(self, session, chart, accountant):
        before = session.execute(select(func.count(Account.id))).scalar_one()

        with pytest.raises(SystemAccountNotFoundError):
            chart.create_account(
                "NBM Current", AccountCategory.ASSET, AccountCode.BANK, accountant,
                opening_balance=Decimal("5000"),
            )

        assert session.execute(select(func.count(Account.id))).scalar_one() == before

    def test_opening_balance_only_for_assets(self, chart, accountant, system_accounts):
        with pytest.raises(InvalidAccountCategoryError):
            chart.create_account(
                "Loan Payable", AccountCategory.LIABILITY, AccountCode.LIABILITY, accountant,
                opening_balance=Decimal("10"),
            )

    def test_negative_opening_balance(self, chart, accountant, system_accounts):
        with pytest.raises(InvalidAmountError):
            chart.create_account(
                "Till", AccountCategory.ASSET, AccountCode.CASH, accountant,
                opening_balance=Decimal("-1"),
            )

    def test_system_account_wins_over_shared_code(self, chart, bank, accountant):
        chart.create_account("Second Bank", AccountCategory.ASSET, AccountCode.BANK, accountant)
        assert chart.get_system_account(AccountCode.BANK).id == bank.id

    def test_list_accounts_by_category(self, chart, system_accounts, salaries):
        expenses = chart.list_accounts(AccountCategory.EXPENSE)
        assert [a.id for a in expenses] == [salaries.id]
        assert len(chart.list_accounts()) == 6
