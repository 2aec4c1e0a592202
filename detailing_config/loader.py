"""
Configuration Loader (``detailing_config.loader``).

Responsibility
--------------
Loads a payroll rules YAML file and parses it into a typed
``PayrollConfig`` (incentive rules plus posting settings).  The single
public entry point for runtime config is
``detailing_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- sits above ``detailing_engines`` (whose
``IncentiveRules`` it builds) and ``detailing_modules`` (whose
``PayrollConfig`` it returns).  The kernel never imports from here.

Invariants enforced
-------------------
* Amounts and rates are parsed through ``Decimal(str(value))`` so YAML
  floats never leak into the engines.
* Unknown keys are rejected; missing keys fall back to defaults.
* ``compute_checksum`` is deterministic for equal configurations.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError``.

Audit relevance
---------------
``compute_checksum`` ties every payroll run back to the exact rules that
produced it.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from detailing_engines.rules import AmountTier, IncentiveRules, ShiftBonusStep
from detailing_kernel.domain.dtos import StaffRole
from detailing_modules.payroll.config import PayrollConfig

_METADATA_KEYS = frozenset({"config_id", "version", "description"})
_SECTION_KEYS = frozenset({"rules", "posting"})
_POSTING_KEYS = frozenset({"labor_expense_category", "payment_method", "currency"})

_INT_RULES = frozenset({
    "normal_start_hour",
    "evening_start_hour",
    "daily_car_threshold",
    "daily_bike_threshold",
})
_DECIMAL_RULES = frozenset({
    "daily_car_rate",
    "daily_bike_rate",
    "evening_car_rate",
    "evening_bike_rate",
    "profit_margin",
    "profit_share_rate",
    "referral_rate",
    "washer_share",
    "detailer_share",
})
_STR_RULES = frozenset({"polish_keyword", "polish_sku_marker", "washing_category"})
_ROLE_RULES = frozenset({"washer_role", "detailer_role"})
_TIER_RULES = frozenset({"ceramic_tiers", "polish_tiers"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a YAML scalar into a Decimal without going through float."""
    if isinstance(value, bool):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name}: expected a number, got {value!r}") from exc


def _reject_unknown(data: dict[str, Any], allowed: frozenset[str], where: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown keys in {where}: {', '.join(unknown)}")


def _parse_tiers(value: Any, name: str) -> tuple[AmountTier, ...]:
    if not isinstance(value, list):
        raise ValueError(f"{name}: expected a list of tiers")
    return tuple(
        AmountTier(
            min_total=parse_decimal(t["min_total"], f"{name}.min_total"),
            bonus=parse_decimal(t["bonus"], f"{name}.bonus"),
        )
        for t in value
    )


def parse_rules(data: dict[str, Any]) -> IncentiveRules:
    """Build IncentiveRules from the ``rules`` section."""
    allowed = frozenset(f.name for f in fields(IncentiveRules))
    _reject_unknown(data, allowed, "rules")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key in _INT_RULES:
            kwargs[key] = int(value)
        elif key in _DECIMAL_RULES:
            kwargs[key] = parse_decimal(value, key)
        elif key in _STR_RULES:
            kwargs[key] = str(value).lower() if key == "polish_keyword" else str(value)
        elif key in _ROLE_RULES:
            kwargs[key] = StaffRole(value)
        elif key in _TIER_RULES:
            kwargs[key] = _parse_tiers(value, key)
        elif key == "shift_bonus_steps":
            kwargs[key] = tuple(
                ShiftBonusStep(
                    min_days=int(s["min_days"]),
                    bonus=parse_decimal(s["bonus"], "shift_bonus_steps.bonus"),
                )
                for s in value
            )
        elif key == "ceramic_keywords":
            kwargs[key] = tuple(str(k).lower() for k in value)
        elif key == "two_wheeler_classes":
            kwargs[key] = frozenset(str(v) for v in value)
        elif key == "lenient_time_parsing":
            kwargs[key] = bool(value)
    return IncentiveRules(**kwargs)


def parse_payroll_config(data: dict[str, Any]) -> PayrollConfig:
    """
    Convert a loaded YAML document into a PayrollConfig.

    Raises:
        ValueError: unknown keys or invalid values.
    """
    _reject_unknown(data, _METADATA_KEYS | _SECTION_KEYS, "payroll config")
    posting = data.get("posting") or {}
    _reject_unknown(posting, _POSTING_KEYS, "posting")
    return PayrollConfig(
        rules=parse_rules(data.get("rules") or {}),
        **{k: str(v) for k, v in posting.items()},
    )


def config_to_dict(config: PayrollConfig) -> dict[str, Any]:
    """Canonical plain-data form of a config, amounts as strings."""
    rules = config.rules
    return {
        "posting": {
            "labor_expense_category": config.labor_expense_category,
            "payment_method": config.payment_method,
            "currency": config.currency,
        },
        "rules": {
            **{k: getattr(rules, k) for k in sorted(_INT_RULES)},
            **{k: str(getattr(rules, k)) for k in sorted(_DECIMAL_RULES)},
            **{k: getattr(rules, k) for k in sorted(_STR_RULES)},
            **{k: getattr(rules, k).value for k in sorted(_ROLE_RULES)},
            **{
                k: [
                    {"min_total": str(t.min_total), "bonus": str(t.bonus)}
                    for t in getattr(rules, k)
                ]
                for k in sorted(_TIER_RULES)
            },
            "shift_bonus_steps": [
                {"min_days": s.min_days, "bonus": str(s.bonus)}
                for s in rules.shift_bonus_steps
            ],
            "ceramic_keywords": list(rules.ceramic_keywords),
            "two_wheeler_classes": sorted(rules.two_wheeler_classes),
            "lenient_time_parsing": rules.lenient_time_parsing,
        },
    }


def compute_checksum(config: PayrollConfig) -> str:
    """SHA-256 of the canonical JSON serialization of ``config``."""
    canonical = json.dumps(config_to_dict(config), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
