"""Role checks at the engine boundary."""

from __future__ import annotations

from typing import Iterable

from ledger_kernel.domain.types import Actor
from ledger_kernel.exceptions import AuthorizationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("domain.authorization")


def require_role(actor: Actor, allowed: Iterable[str], operation: str) -> None:
    """
    Raise AuthorizationError unless ``actor`` holds one of ``allowed``.

    Every state-changing kernel operation calls this first, so the check
    holds for any caller, not just the UI.
    """
    allowed = tuple(allowed)
    if actor.has_any_role(allowed):
        return
    logger.warning(
        "authorization_denied",
        extra={
            "actor_id": str(actor.id),
            "operation": operation,
            "required_roles": list(allowed),
            "actor_roles": sorted(actor.roles),
        },
    )
    raise AuthorizationError(str(actor.id), operation, allowed)
