"""
Line validation and the balance sign convention.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.domain.balances import (
    balance_deltas,
    is_balance_sheet_category,
    normal_side,
    signed_delta,
)
from ledger_kernel.domain.types import AccountCategory, LineSpec, NormalSide
from ledger_kernel.domain.validation import validate_lines
from ledger_kernel.exceptions import (
    InvalidLineError,
    TooFewLinesError,
    UnbalancedEntryError,
    ValidationError,
)

A = uuid4()
B = uuid4()
C = uuid4()


class TestValidateLines:
    def test_balanced_entry(self):
        validated = validate_lines(
            [LineSpec.debit_of(A, "70"), LineSpec.debit_of(B, "30"), LineSpec.credit_of(C, "100")]
        )
        assert validated.total == Decimal("100.00")
        assert validated.account_ids == frozenset({A, B, C})

    def test_single_line(self):
        with pytest.raises(TooFewLinesError) as exc_info:
            validate_lines([LineSpec.debit_of(A, 1)])
        assert exc_info.value.line_count == 1

    def test_unbalanced(self):
        with pytest.raises(UnbalancedEntryError) as exc_info:
            validate_lines([LineSpec.debit_of(A, 100), LineSpec.credit_of(B, 90)])
        assert exc_info.value.debits == "100.00"
        assert exc_info.value.credits == "90.00"

    @pytest.mark.parametrize(
        "bad_line",
        [
            LineSpec(account_id=B, debit=Decimal("5"), credit=Decimal("5")),
            LineSpec(account_id=B),
            LineSpec(account_id=B, debit=Decimal("-5")),
        ],
    )
    def test_line_shape(self, bad_line):
        with pytest.raises(InvalidLineError) as exc_info:
            validate_lines([LineSpec.credit_of(A, 5), bad_line])
        assert exc_info.value.line_no == 2

    def test_shape_errors_are_validation_errors(self):
        with pytest.raises(ValidationError):
            validate_lines([])


class TestSignConvention:
    @pytest.mark.parametrize(
        "category, side",
        [
            (AccountCategory.ASSET, NormalSide.DEBIT),
            (AccountCategory.EXPENSE, NormalSide.DEBIT),
            (AccountCategory.LIABILITY, NormalSide.CREDIT),
            (AccountCategory.EQUITY, NormalSide.CREDIT),
            (AccountCategory.INCOME, NormalSide.CREDIT),
        ],
    )
    def test_normal_side(self, category, side):
        assert normal_side(category) is side

    def test_signed_delta(self):
        assert signed_delta(AccountCategory.ASSET, Decimal("10"), Decimal("0")) == Decimal("10")
        assert signed_delta(AccountCategory.INCOME, Decimal("10"), Decimal("0")) == Decimal("-10")

    def test_deltas_net_per_account(self):
        lines = [
            LineSpec.debit_of(A, 50),
            LineSpec.credit_of(A, 20),
            LineSpec.credit_of(B, 30),
        ]
        deltas = balance_deltas(lines, {A: AccountCategory.ASSET, B: AccountCategory.EQUITY})
        assert deltas == {A: Decimal("30.00"), B: Decimal("30.00")}

    def test_category_strings_are_accepted(self):
        assert normal_side("liability") is NormalSide.CREDIT
        assert is_balance_sheet_category("equity")
        assert not is_balance_sheet_category(AccountCategory.EXPENSE)
