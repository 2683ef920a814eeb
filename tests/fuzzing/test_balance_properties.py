"""
Property-based checks of the ledger invariants.

Random sequences of postings are applied to a fresh in-memory ledger and
afterwards:
- every cached balance equals the balance recomputed from its lines
- Σdebit == Σcredit over the whole journal
- Assets == Liabilities + Equity (income less expense counted as equity)
- reversing everything returns every balance to zero
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from sqlalchemy.orm import sessionmaker

from ledger_kernel.db.engine import build_engine, create_tables
from ledger_kernel.domain.amounts import ZERO
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.types import (
    AccountCategory,
    AccountCode,
    Actor,
    LineSpec,
    ReferenceType,
    Role,
)
from ledger_kernel.reporting import ReportingService
from ledger_kernel.selectors import LedgerSelector
from ledger_kernel.services import ChartOfAccountsService, LedgerService, ReconciliationService

NOW = datetime(2024, 6, 14, 9, 30, tzinfo=timezone.utc)

amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("9999999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

operations = st.lists(
    st.one_of(
        st.tuples(st.just("inject"), st.sampled_from(["BANK", "CASH"]), amounts),
        st.tuples(st.just("transfer"), st.sampled_from(["BANK", "CASH"]), amounts),
        st.tuples(st.just("disburse"), st.sampled_from(["BANK", "CASH"]), amounts),
        st.tuples(st.just("income"), st.sampled_from(["BANK", "CASH"]), amounts),
        st.tuples(st.just("expense"), st.sampled_from(["BANK", "CASH"]), amounts),
        st.tuples(st.just("deposit"), st.sampled_from(["BANK", "CASH"]), amounts),
    ),
    min_size=1,
    max_size=12,
)


def _fresh_ledger():
    engine = build_engine("sqlite://")
    create_tables(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    clock = DeterministicClock(NOW)
    actor = Actor.of(uuid4(), Role.ADMIN)

    chart = ChartOfAccountsService(session, clock=clock)
    accounts = {a.code.value: a for a in chart.initialize_chart_of_accounts(actor)}
    accounts["INCOME"] = chart.create_account("Fees", AccountCategory.INCOME, AccountCode.INCOME, actor)
    accounts["EXPENSE"] = chart.create_account("Rent", AccountCategory.EXPENSE, AccountCode.EXPENSE, actor)
    accounts["LIABILITY"] = chart.create_account(
        "Savings", AccountCategory.LIABILITY, AccountCode.LIABILITY, actor
    )
    return engine, session, clock, actor, accounts


def _apply(ledger, actor, accounts, op):
    kind, liquid, amount = op
    target = accounts[liquid].id
    other = accounts["CASH" if liquid == "BANK" else "BANK"].id
    match kind:
        case "inject":
            return ledger.post_injection(target, amount, "Capital", actor)
        case "transfer":
            return ledger.post_transfer(target, other, amount, "Move", actor)
        case "disburse":
            return ledger.post_disbursement(uuid4(), target, amount, actor)
        case "income":
            account = accounts["INCOME"].id
            lines = [LineSpec.debit_of(target, amount), LineSpec.credit_of(account, amount)]
            return ledger.post_entry(ReferenceType.ADJUSTMENT, None, "Fee", lines, actor)
        case "expense":
            account = accounts["EXPENSE"].id
            lines = [LineSpec.debit_of(account, amount), LineSpec.credit_of(target, amount)]
            return ledger.post_entry(ReferenceType.EXPENSE, None, "Rent", lines, actor)
        case "deposit":
            account = accounts["LIABILITY"].id
            lines = [LineSpec.debit_of(target, amount), LineSpec.credit_of(account, amount)]
            return ledger.post_entry(ReferenceType.ADJUSTMENT, None, "Deposit", lines, actor)


class TestBalanceProperties:
    @settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(ops=operations)
    def test_cached_balances_match_history(self, ops):
        engine, session, clock, actor, accounts = _fresh_ledger()
        try:
            ledger = LedgerService(session, clock=clock)
            for op in ops:
                _apply(ledger, actor, accounts, op)

            assert ReconciliationService(session, clock=clock).find_drift() == []

            trial = LedgerSelector(session).trial_balance()
            assert trial.is_balanced
            assert trial.total_debits == sum((op[2] for op in ops), ZERO)
        finally:
            session.close()
            engine.dispose()

    @settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(ops=operations)
    def test_accounting_equation(self, ops):
        engine, session, clock, actor, accounts = _fresh_ledger()
        try:
            ledger = LedgerService(session, clock=clock)
            for op in ops:
                _apply(ledger, actor, accounts, op)

            sheet = ReportingService(session, clock=clock).balance_sheet()
            assert sheet.difference == ZERO
            assert sheet.total_assets == sheet.total_liabilities + sheet.total_equity
        finally:
            session.close()
            engine.dispose()

    @settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(ops=operations)
    def test_reversing_everything_zeroes_balances(self, ops):
        engine, session, clock, actor, accounts = _fresh_ledger()
        try:
            ledger = LedgerService(session, clock=clock)
            posted = [_apply(ledger, actor, accounts, op) for op in ops]
            for entry in posted:
                ledger.reverse_entry(entry.id, actor)

            selector = LedgerSelector(session)
            for account in accounts.values():
                assert selector.recompute_balance(account.id) == ZERO
                assert selector.account_balance(account.id) == ZERO
        finally:
            session.close()
            engine.dispose()
