"""
LedgerPolicy -- the kernel-side view of configuration.

The kernel never reads files or environment variables.  ``ledger_config``
builds a ``LedgerPolicy`` from YAML and hands it to services; services
that are given nothing use ``DEFAULT_POLICY``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ledger_kernel.domain.amounts import MINOR_UNITS
from ledger_kernel.domain.types import AccountCategory, AccountCode, Role


@dataclass(frozen=True)
class SystemAccountDef:
    """A reserved account the bootstrap guarantees."""

    code: AccountCode
    name: str
    category: AccountCategory


DEFAULT_SYSTEM_ACCOUNTS: tuple[SystemAccountDef, ...] = (
    SystemAccountDef(AccountCode.CAPITAL, "Share Capital", AccountCategory.EQUITY),
    SystemAccountDef(AccountCode.BANK, "Main Bank Account", AccountCategory.ASSET),
    SystemAccountDef(AccountCode.CASH, "Petty Cash", AccountCategory.ASSET),
    SystemAccountDef(AccountCode.EQUITY, "Retained Earnings", AccountCategory.EQUITY),
    SystemAccountDef(AccountCode.PORTFOLIO, "Loan Portfolio", AccountCategory.ASSET),
)


@dataclass(frozen=True)
class LedgerPolicy:
    """
    Tunable ledger rules.

    Guarantees:
        - Immutable; safe to share between services and sessions.
        - Role tuples hold plain role strings.
    """

    currency: str = "MWK"
    minor_units: int = MINOR_UNITS
    max_backdate_days: int = 3
    liquidity_codes: frozenset[AccountCode] = frozenset(
        {AccountCode.CASH, AccountCode.BANK, AccountCode.MOBILE}
    )
    posting_roles: tuple[str, ...] = (Role.ACCOUNTANT.value, Role.ADMIN.value)
    close_roles: tuple[str, ...] = (Role.CEO.value, Role.ADMIN.value)
    approval_roles: tuple[str, ...] = (Role.CEO.value, Role.ADMIN.value)
    admin_roles: tuple[str, ...] = (Role.ADMIN.value,)
    system_accounts: tuple[SystemAccountDef, ...] = field(
        default=DEFAULT_SYSTEM_ACCOUNTS
    )

    def __post_init__(self) -> None:
        if self.minor_units != MINOR_UNITS:
            raise ValueError(
                f"minor_units must be {MINOR_UNITS}; amounts are stored as Numeric(18, {MINOR_UNITS})"
            )
        if self.max_backdate_days < 0:
            raise ValueError("max_backdate_days cannot be negative")
        codes = [d.code for d in self.system_accounts]
        if len(codes) != len(set(codes)):
            raise ValueError("system account codes must be unique")

    def system_account(self, code: AccountCode) -> SystemAccountDef | None:
        for definition in self.system_accounts:
            if definition.code == code:
                return definition
        return None


DEFAULT_POLICY = LedgerPolicy()
