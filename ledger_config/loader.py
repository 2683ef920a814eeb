"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Reads a YAML policy document and parses it into the kernel's frozen
``LedgerPolicy``.  Callers go through ``ledger_config.get_active_policy()``.

Invariants enforced
-------------------
* Every key is optional; a missing key keeps the ``LedgerPolicy`` default.
* Unknown account codes, categories or roles raise ``ValueError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* A document that is not a mapping  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from ledger_kernel.domain.policy import LedgerPolicy, SystemAccountDef
from ledger_kernel.domain.types import AccountCategory, AccountCode, Role

_ROLE_KEYS = {
    "posting": "posting_roles",
    "close": "close_roles",
    "approval": "approval_roles",
    "admin": "admin_roles",
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from ``path``; an empty file yields ``{}``."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _parse_roles(key: str, values: Any) -> tuple[str, ...]:
    if not isinstance(values, list) or not values:
        raise ValueError(f"roles.{key} must be a non-empty list")
    return tuple(Role(str(v)).value for v in values)


def parse_system_account(data: dict[str, Any]) -> SystemAccountDef:
    return SystemAccountDef(
        code=AccountCode(data["code"]),
        name=str(data["name"]),
        category=AccountCategory(data["category"]),
    )


def parse_policy(data: dict[str, Any]) -> LedgerPolicy:
    """Build a ``LedgerPolicy`` from a parsed YAML mapping."""
    kwargs: dict[str, Any] = {}

    if "currency" in data:
        kwargs["currency"] = str(data["currency"])
    if "minor_units" in data:
        kwargs["minor_units"] = int(data["minor_units"])
    if "max_backdate_days" in data:
        kwargs["max_backdate_days"] = int(data["max_backdate_days"])
    if "liquidity_codes" in data:
        kwargs["liquidity_codes"] = frozenset(
            AccountCode(c) for c in data["liquidity_codes"]
        )

    roles = data.get("roles") or {}
    for key, values in roles.items():
        if key not in _ROLE_KEYS:
            raise ValueError(f"Unknown role group: {key}")
        kwargs[_ROLE_KEYS[key]] = _parse_roles(key, values)

    if "system_accounts" in data:
        kwargs["system_accounts"] = tuple(
            parse_system_account(a) for a in data["system_accounts"]
        )

    return LedgerPolicy(**kwargs)
