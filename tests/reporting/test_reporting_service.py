"""
Reports generated from the journal: liquidity, trial balance, monthly
income statement, balance sheet, budget variance and CSV export.
"""

import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.types import AccountCategory, AccountCode, LineSpec, ReferenceType
from ledger_kernel.exceptions import BudgetNotFoundError
from ledger_kernel.reporting import (
    JOURNAL_CSV_COLUMNS,
    LoanFigureSource,
    ReportType,
    export_journal_csv,
)

JANUARY = Period.month(2024, 1)


@pytest.fixture
def books(ledger, chart, bank, cash, capital, portfolio, interest_income, salaries, accountant):
    """
    A small January:
        capital 100000 into BANK; 20000 BANK -> CASH; 30000 disbursed;
        1500 interest received; 600 salaries paid.
    """
    ledger.post_injection(bank.id, Decimal("100000"), "Seed capital", accountant, entry_date=date(2024, 1, 12))
    ledger.post_transfer(bank.id, cash.id, Decimal("20000"), "Branch float", accountant, entry_date=date(2024, 1, 12))
    ledger.post_disbursement(uuid4(), bank.id, Decimal("30000"), accountant, entry_date=date(2024, 1, 13))
    ledger.post_entry(
        ReferenceType.REPAYMENT,
        None,
        "Interest received",
        [LineSpec.debit_of(cash.id, 1500), LineSpec.credit_of(interest_income.id, 1500)],
        accountant,
        entry_date=date(2024, 1, 14),
    )
    ledger.post_entry(
        ReferenceType.EXPENSE,
        None,
        "January salaries",
        [LineSpec.debit_of(salaries.id, 600), LineSpec.credit_of(bank.id, 600)],
        accountant,
        entry_date=date(2024, 1, 15),
    )


class TestLiquidity:
    def test_cash_bank_and_mobile_count(self, chart, ledger, reports, books, accountant):
        mobile = chart.create_account(
            "Airtel Money", AccountCategory.ASSET, AccountCode.MOBILE, accountant,
            opening_balance=Decimal("400"),
        )
        assert mobile.balance == Decimal("400.00")
        # BANK 49400 + CASH 21500 + MOBILE 400; the loan portfolio is not liquid
        assert reports.total_liquidity() == Decimal("71300.00")

    def test_empty_ledger(self, reports, system_accounts):
        assert reports.total_liquidity() == Decimal("0.00")


class TestTrialBalance:
    def test_debits_equal_credits(self, reports, books):
        report = reports.trial_balance()

        assert report.is_balanced
        assert report.difference == Decimal("0.00")
        assert report.total_debits == report.total_credits
        assert report.metadata.report_type is ReportType.TRIAL_BALANCE
        assert report.metadata.as_of_date == date(2024, 1, 15)
        assert report.metadata.currency == "MWK"

    def test_as_of_cutoff_is_inclusive(self, reports, books, bank):
        report = reports.trial_balance(date(2024, 1, 12))
        bank_line = next(line for line in report.lines if line.account_id == bank.id)
        assert bank_line.debit_total == Decimal("100000.00")
        assert bank_line.credit_total == Decimal("20000.00")
        assert bank_line.net_balance == Decimal("80000.00")


class TestIncomeStatement:
    def test_revenue_expenses_and_net_profit(self, reports, books, interest_income, salaries):
        report = reports.monthly_income_statement(JANUARY)

        assert report.period_label == "2024-01"
        assert [(l.account_id, l.amount) for l in report.revenue] == [(interest_income.id, Decimal("1500.00"))]
        assert [(l.account_id, l.amount) for l in report.expenses] == [(salaries.id, Decimal("600.00"))]
        assert report.net_profit == Decimal("900.00")

    def test_month_without_lines_is_all_zero(self, reports, books):
        report = reports.monthly_income_statement(Period.month(2023, 12))
        assert report.revenue == ()
        assert report.expenses == ()
        assert report.total_revenue == report.total_expenses == report.net_profit == Decimal("0.00")

    def test_month_boundary_counts_once(
        self, ledger, reports, clock, bank, interest_income, accountant
    ):
        clock.set_time(datetime(2024, 2, 1, 8, 0, tzinfo=timezone.utc))
        for day in (date(2024, 1, 31), date(2024, 2, 1)):
            ledger.post_entry(
                ReferenceType.REPAYMENT,
                None,
                f"Interest {day}",
                [LineSpec.debit_of(bank.id, 100), LineSpec.credit_of(interest_income.id, 100)],
                accountant,
                entry_date=day,
            )

        assert reports.monthly_income_statement(JANUARY).total_revenue == Decimal("100.00")
        assert reports.monthly_income_statement(Period.month(2024, 2)).total_revenue == Decimal("100.00")


class TestBalanceSheet:
    def test_identity_holds_from_the_ledger(self, reports, books):
        sheet = reports.balance_sheet()

        assert sheet.total_cash_and_bank == Decimal("70900.00")
        assert sheet.loan_receivables == Decimal("30000.00")
        assert sheet.loan_figure_source is LoanFigureSource.LEDGER
        assert sheet.total_assets == Decimal("100900.00")
        assert sheet.retained_earnings == Decimal("900.00")
        assert sheet.total_equity == Decimal("100900.00")
        assert sheet.difference == Decimal("0.00")
        assert sheet.is_balanced

    def test_liabilities_are_reported(self, ledger, reports, books, bank, savings_deposits, accountant):
        ledger.post_entry(
            ReferenceType.ADJUSTMENT,
            None,
            "Client deposit",
            [LineSpec.debit_of(bank.id, 2000), LineSpec.credit_of(savings_deposits.id, 2000)],
            accountant,
        )
        sheet = reports.balance_sheet()
        assert sheet.total_liabilities == Decimal("2000.00")
        assert sheet.total_assets == sheet.total_liabilities_and_equity

    def test_external_loan_figure_exposes_difference(self, reports, books):
        sheet = reports.balance_sheet(loan_principal_outstanding=Decimal("29500"))

        assert sheet.loan_figure_source is LoanFigureSource.EXTERNAL
        assert sheet.loan_receivables == Decimal("29500.00")
        assert sheet.difference == Decimal("-500.00")
        assert not sheet.is_balanced

    def test_as_of_before_any_activity(self, reports, books):
        sheet = reports.balance_sheet(date(2024, 1, 1))
        assert sheet.total_assets == Decimal("0.00")
        assert sheet.is_balanced


class TestBudgetVariance:
    def test_expense_under_budget_is_favourable(self, reports, budgets, books, salaries, accountant):
        budgets.set_budget("Staff costs", salaries.id, JANUARY, Decimal("800"), accountant)

        report = reports.budget_variance("Staff costs", JANUARY)

        assert report.budgeted == Decimal("800.00")
        assert report.actual == Decimal("600.00")
        assert report.variance == Decimal("-200.00")
        assert report.variance_percent == Decimal("75.00")
        assert report.favourable

    def test_income_below_budget_is_unfavourable(
        self, reports, budgets, books, interest_income, accountant
    ):
        budgets.set_budget("Interest", interest_income.id, JANUARY, Decimal("2000"), accountant)

        report = reports.budget_variance("Interest", JANUARY)

        assert report.actual == Decimal("1500.00")
        assert report.variance == Decimal("-500.00")
        assert not report.favourable

    def test_zero_budget_has_no_percentage(self, reports, budgets, books, salaries, accountant):
        budgets.set_budget("Staff costs", salaries.id, JANUARY, Decimal("0"), accountant)

        report = reports.budget_variance("Staff costs", JANUARY)

        assert report.variance == Decimal("600.00")
        assert report.variance_percent is None

    def test_account_without_activity(self, reports, budgets, chart, system_accounts, accountant):
        rent = chart.create_account("Rent", AccountCategory.EXPENSE, AccountCode.EXPENSE, accountant)
        budgets.set_budget("Rent", rent.id, JANUARY, Decimal("300"), accountant)

        report = reports.budget_variance("Rent", JANUARY)

        assert report.actual == Decimal("0.00")
        assert report.variance == Decimal("-300.00")

    def test_missing_budget(self, reports, books):
        with pytest.raises(BudgetNotFoundError):
            reports.budget_variance("Marketing", JANUARY)


class TestJournalExport:
    def test_one_row_per_line(self, session, books, accountant):
        text = export_journal_csv(session, JANUARY)
        rows = list(csv.reader(io.StringIO(text)))

        assert tuple(rows[0]) == JOURNAL_CSV_COLUMNS
        body = rows[1:]
        assert len(body) == 10
        assert [r[0] for r in body] == sorted(r[0] for r in body)

        seed = [r for r in body if r[2] == "Seed capital"]
        assert {(r[1], r[3], r[4], r[5]) for r in seed} == {
            ("injection", "Main Bank Account", "100000.00", ""),
            ("injection", "Share Capital", "", "100000.00"),
        }
        assert all(r[0] == "2024-01-12" and r[6] == str(accountant.id) for r in seed)

    def test_other_months_are_excluded(self, session, books):
        text = export_journal_csv(session, Period.month(2024, 2))
        assert text.strip() == ",".join(JOURNAL_CSV_COLUMNS)
