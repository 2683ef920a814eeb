"""
Closed enumerations and small value types shared across the kernel.

Account categories, account codes, entry reference types and roles are
closed ``str`` enums.  Code that branches on them uses ``match`` with an
``assert_never`` fallthrough, so adding a member forces every branch site
to be revisited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_kernel.domain.amounts import AmountLike, ZERO, to_amount


class AccountCategory(str, Enum):
    """Financial statement placement of an account."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class AccountCode(str, Enum):
    """Symbolic tag used for display grouping and system-account lookup."""

    CASH = "CASH"
    BANK = "BANK"
    MOBILE = "MOBILE"
    CAPITAL = "CAPITAL"
    EQUITY = "EQUITY"
    PORTFOLIO = "PORTFOLIO"
    LIABILITY = "LIABILITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    OTHER = "OTHER"


class ReferenceType(str, Enum):
    """What kind of economic event a journal entry records."""

    INJECTION = "injection"
    TRANSFER = "transfer"
    DISBURSEMENT = "disbursement"
    REPAYMENT = "repayment"
    EXPENSE = "expense"
    ADJUSTMENT = "adjustment"
    REVERSAL = "reversal"
    WRITE_OFF = "write_off"
    CLOSING = "closing"


class Role(str, Enum):
    """Role tags issued by the identity provider."""

    ADMIN = "admin"
    CEO = "ceo"
    ACCOUNTANT = "accountant"
    LOAN_OFFICER = "loan_officer"
    HR = "hr"


class NormalSide(str, Enum):
    """Side on which an account's balance increases."""

    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class Actor:
    """Acting user: identity plus role tags."""

    id: UUID
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, actor_id: UUID, *roles: Role | str) -> Actor:
        return cls(
            id=actor_id,
            roles=frozenset(r.value if isinstance(r, Role) else r for r in roles),
        )

    def has_any_role(self, roles) -> bool:
        wanted = {r.value if isinstance(r, Role) else r for r in roles}
        return not self.roles.isdisjoint(wanted)


@dataclass(frozen=True)
class LineSpec:
    """
    One proposed account-level effect.

    Amounts are normalized to minor units on construction; shape rules
    (exactly one positive side) are checked by ``validate_lines`` so that
    the error can name the offending line number.
    """

    account_id: UUID
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "debit", to_amount(self.debit))
        object.__setattr__(self, "credit", to_amount(self.credit))

    @classmethod
    def debit_of(cls, account_id: UUID, amount: AmountLike) -> LineSpec:
        return cls(account_id=account_id, debit=to_amount(amount))

    @classmethod
    def credit_of(cls, account_id: UUID, amount: AmountLike) -> LineSpec:
        return cls(account_id=account_id, credit=to_amount(amount))

    def reversed(self) -> LineSpec:
        return LineSpec(account_id=self.account_id, debit=self.credit, credit=self.debit)

    def to_dict(self) -> dict[str, str]:
        return {
            "account_id": str(self.account_id),
            "debit": str(self.debit),
            "credit": str(self.credit),
        }

    @classmethod
    def from_dict(cls, data: dict) -> LineSpec:
        return cls(
            account_id=UUID(str(data["account_id"])),
            debit=data.get("debit", ZERO),
            credit=data.get("credit", ZERO),
        )
