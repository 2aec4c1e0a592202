"""
Module: detailing_engines.rules
Responsibility:
    Parameter object holding every constant the incentive engines use:
    hour windows, daily thresholds, piece rates, the profit proxy, premium
    tiers, shift-bonus steps and the washing-pool split.

Architecture position:
    Engines -- pure data, zero I/O.  Built by ``detailing_config`` from YAML
    or used with its defaults; passed explicitly into every engine call.

Invariants enforced:
    - Rates and shares are Decimal and non-negative; shares lie in [0, 1].
    - Premium and shift-bonus tiers are ordered from highest threshold
      down so the first matching tier wins.
    - The last premium tier starts at 0 and is the floor: it pays for any
      total the tiers above it do not reach, negative totals included.

Failure modes:
    - ValueError from ``__post_init__`` on any invalid parameter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from detailing_kernel.domain.dtos import StaffRole
from detailing_kernel.logging_config import get_logger

logger = get_logger("engines.rules")


@dataclass(frozen=True)
class AmountTier:
    """Bonus paid when a job total is at or above ``min_total``."""

    min_total: Decimal
    bonus: Decimal


@dataclass(frozen=True)
class ShiftBonusStep:
    """Bonus paid when a staff member worked at least ``min_days`` evening days."""

    min_days: int
    bonus: Decimal


def _default_ceramic_tiers() -> tuple[AmountTier, ...]:
    return (
        AmountTier(Decimal("30000"), Decimal("6000")),
        AmountTier(Decimal("0"), Decimal("4000")),
    )


def _default_polish_tiers() -> tuple[AmountTier, ...]:
    # 2000-2499 has no tier of its own and pays the lowest bonus.
    return (
        AmountTier(Decimal("6000"), Decimal("600")),
        AmountTier(Decimal("2500"), Decimal("400")),
        AmountTier(Decimal("0"), Decimal("200")),
    )


def _default_shift_steps() -> tuple[ShiftBonusStep, ...]:
    return (
        ShiftBonusStep(20, Decimal("2000")),
        ShiftBonusStep(15, Decimal("1500")),
    )


@dataclass(frozen=True)
class IncentiveRules:
    """
    Incentive scheme parameters.

    Defaults reproduce the shop's current policy.  Override per deployment:

        rules = IncentiveRules(daily_car_threshold=12)
    """

    # Hour windows (time-in hour, 24h clock)
    normal_start_hour: int = 9
    evening_start_hour: int = 18

    # Daily volume bonus (normal hours)
    daily_car_threshold: int = 10
    daily_bike_threshold: int = 10
    daily_car_rate: Decimal = Decimal("25")
    daily_bike_rate: Decimal = Decimal("10")

    # Evening piece rate
    evening_car_rate: Decimal = Decimal("25")
    evening_bike_rate: Decimal = Decimal("10")

    # Profit proxy and pool share used by evening, Sunday and washing pools
    profit_margin: Decimal = Decimal("0.40")
    profit_share_rate: Decimal = Decimal("0.10")

    referral_rate: Decimal = Decimal("0.10")

    # Premium services
    ceramic_keywords: tuple[str, ...] = ("ceramic", "graphene")
    polish_keyword: str = "polish"
    polish_sku_marker: str = "POL"
    ceramic_tiers: tuple[AmountTier, ...] = field(default_factory=_default_ceramic_tiers)
    polish_tiers: tuple[AmountTier, ...] = field(default_factory=_default_polish_tiers)

    shift_bonus_steps: tuple[ShiftBonusStep, ...] = field(default_factory=_default_shift_steps)

    # Washing pool
    washing_category: str = "WASHING"
    washer_role: StaffRole = StaffRole.WASHER
    detailer_role: StaffRole = StaffRole.DETAILER
    washer_share: Decimal = Decimal("0.60")
    detailer_share: Decimal = Decimal("0.40")

    two_wheeler_classes: frozenset[str] = frozenset({"BIKE", "SCOOTY", "BULLET"})

    # Malformed time-in falls back to hour 0 unless this is False.
    lenient_time_parsing: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.normal_start_hour < self.evening_start_hour <= 24:
            raise ValueError(
                "hour windows must satisfy 0 <= normal_start_hour < evening_start_hour <= 24"
            )
        if self.daily_car_threshold < 0 or self.daily_bike_threshold < 0:
            raise ValueError("daily thresholds cannot be negative")

        for name in (
            "daily_car_rate",
            "daily_bike_rate",
            "evening_car_rate",
            "evening_bike_rate",
            "referral_rate",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

        for name in ("profit_margin", "profit_share_rate", "washer_share", "detailer_share"):
            value = getattr(self, name)
            if not Decimal("0") <= value <= Decimal("1"):
                raise ValueError(f"{name} must be between 0 and 1, got {value}")

        for name in ("ceramic_tiers", "polish_tiers"):
            tiers = getattr(self, name)
            if not tiers:
                raise ValueError(f"{name} must define at least one tier")
            thresholds = [t.min_total for t in tiers]
            if thresholds != sorted(thresholds, reverse=True):
                raise ValueError(f"{name} must be ordered by descending min_total")
            if tiers[-1].min_total != Decimal("0"):
                raise ValueError(f"{name} must end with a min_total 0 floor tier")

        days = [s.min_days for s in self.shift_bonus_steps]
        if days != sorted(days, reverse=True):
            raise ValueError("shift_bonus_steps must be ordered by descending min_days")

        logger.debug(
            "incentive_rules_initialized",
            extra={
                "daily_car_threshold": self.daily_car_threshold,
                "daily_bike_threshold": self.daily_bike_threshold,
                "profit_margin": str(self.profit_margin),
                "profit_share_rate": str(self.profit_share_rate),
                "lenient_time_parsing": self.lenient_time_parsing,
            },
        )

    @property
    def profit_pool_rate(self) -> Decimal:
        """Share of billed revenue that becomes a profit-share pool."""
        return self.profit_margin * self.profit_share_rate


DEFAULT_RULES = IncentiveRules()
