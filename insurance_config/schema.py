"""
Underwriting rules schema.

Defines the human-authored, reviewable rule set that prices and pays out
contracts: minimum annual premiums, coverage ratios and the total-loss
threshold. YAML rule sets are parsed into these types by the loader.

All ratios are ``Decimal`` so threshold comparisons are exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class UnderwritingRules:
    """
    Pricing and payout parameters for a registry.

    Attributes:
        name: Rule set identifier (file stem under ``sets/``).
        version: Rule set version, carried into log traces.
        vehicle_min_annual_rate: Minimum annual premium as a share of the
            vehicle's original value.
        vehicle_coverage_ratio: Coverage as a share of the vehicle's
            original value.
        travel_min_annual_per_person: Minimum annual premium per insured
            person on a travel contract.
        travel_coverage_per_person: Coverage per insured person on a
            travel contract.
        total_loss_ratio: Share of the vehicle's original value at which
            expected damages count as a total loss.
    """

    name: str = "default"
    version: int = 1
    vehicle_min_annual_rate: Decimal = Decimal("0.02")
    vehicle_coverage_ratio: Decimal = Decimal("0.5")
    travel_min_annual_per_person: int = 5
    travel_coverage_per_person: int = 10
    total_loss_ratio: Decimal = Decimal("0.7")

    def __post_init__(self) -> None:
        for attr in ("vehicle_min_annual_rate", "vehicle_coverage_ratio", "total_loss_ratio"):
            val = getattr(self, attr)
            if not isinstance(val, Decimal):
                raise ValueError(f"{attr} must be a Decimal, got {type(val).__name__}")
            if val < 0:
                raise ValueError(f"{attr} must be non-negative")
        if self.vehicle_coverage_ratio > 1:
            raise ValueError("vehicle_coverage_ratio must not exceed 1")
        if not Decimal("0") < self.total_loss_ratio <= Decimal("1"):
            raise ValueError("total_loss_ratio must be in (0, 1]")
        if self.travel_min_annual_per_person < 0:
            raise ValueError("travel_min_annual_per_person must be non-negative")
        if self.travel_coverage_per_person < 0:
            raise ValueError("travel_coverage_per_person must be non-negative")

    def vehicle_minimum_annual_premium(self, original_value: int) -> Decimal:
        return self.vehicle_min_annual_rate * original_value

    def vehicle_coverage(self, original_value: int) -> int:
        return int(self.vehicle_coverage_ratio * original_value)

    def travel_minimum_annual_premium(self, insured_count: int) -> int:
        return self.travel_min_annual_per_person * insured_count

    def travel_coverage(self, insured_count: int) -> int:
        return self.travel_coverage_per_person * insured_count

    def is_total_loss(self, expected_damages: int, original_value: int) -> bool:
        return expected_damages >= self.total_loss_ratio * original_value
