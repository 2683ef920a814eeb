"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_policy()`` and ``get_database_url()``.  No other
    component reads configuration files or environment variables.  The
    kernel MUST NEVER import from ``ledger_config``; services receive the
    resulting ``LedgerPolicy`` through their constructors.

Environment overrides:
    LEDGER_MAX_BACKDATE_DAYS -- replaces ``max_backdate_days``.
    LEDGER_DATABASE_URL      -- returned by ``get_database_url()``.

Audit relevance:
    Every successful ``get_active_policy()`` call emits a
    ``LEDGER_CONFIG_TRACE`` log entry with the source path and the
    checksum of the loaded document.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from ledger_config.loader import compute_checksum, load_yaml_file, parse_policy
from ledger_kernel.domain.policy import LedgerPolicy

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_POLICY_PATH = Path(__file__).parent / "defaults.yaml"
DEFAULT_DATABASE_URL = "sqlite:///ledger.db"

BACKDATE_ENV = "LEDGER_MAX_BACKDATE_DAYS"
DATABASE_URL_ENV = "LEDGER_DATABASE_URL"

_last_checksum: str | None = None


def get_active_policy(path: Path | str | None = None) -> LedgerPolicy:
    """
    Load the ledger policy.

    Args:
        path: YAML file to read.  Defaults to the packaged defaults.yaml.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        ValueError: The document or an environment override is invalid.
    """
    global _last_checksum

    source = Path(path) if path is not None else DEFAULT_POLICY_PATH
    data = load_yaml_file(source)
    policy = parse_policy(data)

    override = os.environ.get(BACKDATE_ENV)
    if override:
        try:
            days = int(override)
        except ValueError:
            raise ValueError(f"{BACKDATE_ENV} must be an integer, got {override!r}") from None
        policy = replace(policy, max_backdate_days=days)

    _last_checksum = compute_checksum(data)
    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "source": str(source),
            "checksum": _last_checksum,
            "currency": policy.currency,
            "max_backdate_days": policy.max_backdate_days,
            "system_account_count": len(policy.system_accounts),
        },
    )
    return policy


def get_policy_checksum() -> str | None:
    """Checksum of the document behind the last ``get_active_policy()`` call."""
    return _last_checksum


def get_database_url() -> str:
    return os.environ.get(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)


__all__ = [
    "BACKDATE_ENV",
    "DATABASE_URL_ENV",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_POLICY_PATH",
    "compute_checksum",
    "get_active_policy",
    "get_database_url",
    "get_policy_checksum",
    "parse_policy",
]
