"""
Pure statement builders: no database, synthetic account activity.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.domain.periods import Period
from ledger_kernel.domain.types import AccountCategory, AccountCode
from ledger_kernel.reporting.models import LoanFigureSource, ReportMetadata, ReportType
from ledger_kernel.reporting.statements import (
    build_balance_sheet,
    build_budget_variance,
    build_income_statement,
    build_trial_balance,
    variance_percent,
)
from ledger_kernel.selectors.ledger_selector import AccountActivity

LIQUIDITY = (AccountCode.CASH, AccountCode.BANK, AccountCode.MOBILE)
JUNE = Period.month(2024, 6)


def _row(category, code, debit="0", credit="0", name=None):
    return AccountActivity(
        account_id=uuid4(),
        name=name or code.value.title(),
        category=category,
        code=code,
        debit_total=Decimal(debit),
        credit_total=Decimal(credit),
    )


def _meta(report_type=ReportType.BALANCE_SHEET):
    return ReportMetadata(
        report_type=report_type,
        currency="MWK",
        generated_at="2024-06-30T12:00:00+00:00",
        as_of_date=date(2024, 6, 30),
    )


@pytest.fixture
def rows():
    """Capital 5000; 3000 lent out; 400 interest; 150 rent; 1000 deposits."""
    return [
        _row(AccountCategory.ASSET, AccountCode.BANK, debit="6400.00", credit="3150.00"),
        _row(AccountCategory.ASSET, AccountCode.PORTFOLIO, debit="3000.00"),
        _row(AccountCategory.ASSET, AccountCode.OTHER, debit="0.00", name="Prepaid rent"),
        _row(AccountCategory.LIABILITY, AccountCode.LIABILITY, credit="1000.00"),
        _row(AccountCategory.EQUITY, AccountCode.CAPITAL, credit="5000.00"),
        _row(AccountCategory.INCOME, AccountCode.INCOME, credit="400.00"),
        _row(AccountCategory.EXPENSE, AccountCode.EXPENSE, debit="150.00"),
    ]


class TestTrialBalance:
    def test_totals(self, rows):
        report = build_trial_balance(rows, _meta(ReportType.TRIAL_BALANCE))
        assert report.total_debits == Decimal("9550.00")
        assert report.total_credits == Decimal("9550.00")
        assert report.is_balanced
        assert len(report.lines) == len(rows)

    def test_imbalance_is_reported_not_raised(self):
        rows = [_row(AccountCategory.ASSET, AccountCode.BANK, debit="10.00")]
        report = build_trial_balance(rows, _meta(ReportType.TRIAL_BALANCE))
        assert not report.is_balanced
        assert report.difference == Decimal("10.00")


class TestIncomeStatement:
    def test_balance_sheet_rows_are_ignored(self, rows):
        report = build_income_statement(rows, JUNE, _meta(ReportType.INCOME_STATEMENT))
        assert report.total_revenue == Decimal("400.00")
        assert report.total_expenses == Decimal("150.00")
        assert report.net_profit == Decimal("250.00")
        assert report.period_label == "2024-06"

    def test_loss(self):
        rows = [_row(AccountCategory.EXPENSE, AccountCode.EXPENSE, debit="75.00")]
        report = build_income_statement(rows, JUNE, _meta(ReportType.INCOME_STATEMENT))
        assert report.net_profit == Decimal("-75.00")


class TestBalanceSheet:
    def test_classification(self, rows):
        sheet = build_balance_sheet(rows, LIQUIDITY, _meta())

        assert sheet.total_cash_and_bank == Decimal("3250.00")
        assert sheet.loan_receivables == Decimal("3000.00")
        assert [line.name for line in sheet.other_assets] == ["Prepaid rent"]
        assert sheet.total_assets == Decimal("6250.00")
        assert sheet.total_liabilities == Decimal("1000.00")
        assert sheet.retained_earnings == Decimal("250.00")
        assert sheet.total_equity == Decimal("5250.00")
        assert sheet.is_balanced

    def test_liquidity_codes_are_configurable(self, rows):
        sheet = build_balance_sheet(rows, (AccountCode.CASH,), _meta())
        assert sheet.total_cash_and_bank == Decimal("0.00")
        assert sheet.total_other_assets == Decimal("3250.00")
        assert sheet.is_balanced

    def test_external_loan_figure(self, rows):
        sheet = build_balance_sheet(
            rows, LIQUIDITY, _meta(), loan_principal_outstanding=Decimal("3100.00")
        )
        assert sheet.loan_figure_source is LoanFigureSource.EXTERNAL
        assert sheet.difference == Decimal("100.00")
        assert not sheet.is_balanced

    def test_no_rows(self):
        sheet = build_balance_sheet([], LIQUIDITY, _meta())
        assert sheet.total_assets == Decimal("0.00")
        assert sheet.loan_figure_source is LoanFigureSource.LEDGER
        assert sheet.is_balanced


class TestBudgetVariance:
    def test_variance_percent(self):
        assert variance_percent(Decimal("50.00"), Decimal("200.00")) == Decimal("25.00")
        assert variance_percent(Decimal("1.00"), Decimal("3.00")) == Decimal("33.33")
        assert variance_percent(Decimal("5.00"), Decimal("0.00")) is None

    @pytest.mark.parametrize(
        "category, actual, favourable",
        [
            (AccountCategory.INCOME, "120.00", True),
            (AccountCategory.INCOME, "80.00", False),
            (AccountCategory.EXPENSE, "80.00", True),
            (AccountCategory.EXPENSE, "120.00", False),
            (AccountCategory.EXPENSE, "100.00", True),
        ],
    )
    def test_favourable_direction(self, category, actual, favourable):
        report = build_budget_variance(
            category="Ops",
            period=JUNE,
            account_id=uuid4(),
            account_category=category,
            budgeted=Decimal("100.00"),
            actual=Decimal(actual),
            metadata=_meta(ReportType.BUDGET_VARIANCE),
        )
        assert report.favourable is favourable
        assert report.variance == Decimal(actual) - Decimal("100.00")

    def test_balance_sheet_category_is_refused(self):
        with pytest.raises(ValueError):
            build_budget_variance(
                category="Cash",
                period=JUNE,
                account_id=uuid4(),
                account_category=AccountCategory.ASSET,
                budgeted=Decimal("1.00"),
                actual=Decimal("1.00"),
                metadata=_meta(ReportType.BUDGET_VARIANCE),
            )
