"""
ReconciliationService -- compare cached balances with line history.

Responsibility:
    Finds accounts whose cached balance disagrees with the balance
    recomputed from their journal lines and, on request, overwrites the
    cached value with the recomputed one.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - repair() is the only balance writer besides the posting engine.
    - Journal lines are never touched; the line history is authoritative.

Failure modes:
    - AuthorizationError when the actor lacks an admin role.
    - OptimisticLockError when an account is posted to between the drift
      scan and its repair.
"""

from ledger_kernel.domain.authorization import require_role
from ledger_kernel.domain.dtos import BalanceDrift
from ledger_kernel.domain.types import Actor
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.account_repository import AccountRepository
from ledger_kernel.services.base import BaseService

logger = get_logger("services.reconciliation")


class ReconciliationService(BaseService[Account]):

    def __init__(self, session, clock=None, policy=None):
        super().__init__(session, clock, policy)
        self._accounts = AccountRepository(session, self._clock, self._policy)
        self._ledger = LedgerSelector(session)

    def find_drift(self) -> list[BalanceDrift]:
        """Accounts whose cached balance differs from their line history."""
        drift: list[BalanceDrift] = []
        for account in self._accounts.list_all():
            recomputed = self._ledger.recompute_balance(account.id)
            if recomputed != account.balance:
                drift.append(
                    BalanceDrift(
                        account_id=account.id,
                        cached=account.balance,
                        recomputed=recomputed,
                        version=account.version,
                    )
                )
        if drift:
            logger.warning(
                "balance_drift_detected",
                extra={"account_ids": [str(d.account_id) for d in drift]},
            )
        return drift

    def repair(self, actor: Actor) -> list[BalanceDrift]:
        """
        Overwrite drifted cached balances with recomputed ones.

        Returns:
            The drift that was corrected.
        """
        require_role(actor, self._policy.admin_roles, "repair account balances")
        drift = self.find_drift()
        for item in drift:
            self._accounts.upsert_balance(
                item.account_id, item.recomputed, expected_version=item.version
            )
        logger.info(
            "balances_repaired",
            extra={"repaired": len(drift), "actor_id": str(actor.id)},
        )
        return drift
