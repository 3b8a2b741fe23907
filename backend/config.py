"""
Planner Configuration

Centralizes every constant the extraction planner depends on: the tier
catalog, per-property cost rates, labor and onboarding limits, heartbeat
maintenance rates and the tokenomics emission parameters.

All sections are frozen so a single configuration object can be handed to
several independent engines without cross-contamination.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class Tier:
    """One availability tier of the property universe."""
    tier_id: int
    label: str
    properties: int  # Total properties in the tier
    counties: int  # Total counties in the tier
    training_weeks: float  # Per-county training phase
    production_weeks: float  # Per-county production phase

    @property
    def properties_per_county(self) -> float:
        return self.properties / self.counties


def _default_tiers() -> Tuple[Tier, ...]:
    return (
        Tier(1, "Tier 1 - Digitised", 30_000_000, 450, training_weeks=5.0, production_weeks=1.0),
        Tier(2, "Tier 2 - Partially digitised", 70_000_000, 1_250, training_weeks=3.0, production_weeks=1.5),
        Tier(3, "Tier 3 - Manual records", 50_000_000, 950, training_weeks=2.0, production_weeks=0.5),
    )


@dataclass(frozen=True)
class DataGroup:
    """A selectable data group and its share of the token supply."""
    key: str
    label: str
    token_share: float


def _default_data_groups() -> Dict[str, DataGroup]:
    groups = (
        DataGroup("county", "County", 1.0),
        DataGroup("school", "School", 0.5),
        DataGroup("zoning", "Zoning", 0.35),
        DataGroup("permits", "Permits", 0.25),
    )
    return {group.key: group for group in groups}


@dataclass(frozen=True)
class TimeConfig:
    """Time-related constants."""
    ticks_per_week: int = 6  # Sub-week resolution for half-week phases
    max_ticks: int = 6 * 52 * 50  # Safety cap (50 years)


@dataclass(frozen=True)
class CostConfig:
    """Flat per-property costs (USD)."""
    storage_per_property: float = 1200 / 10_000_000  # $0.00012
    compute_per_property: float = 0.0003
    chain_gas_per_property: float = 0.0013

    @property
    def total_per_property(self) -> float:
        return self.storage_per_property + self.compute_per_property + self.chain_gas_per_property


@dataclass(frozen=True)
class LaborConfig:
    """Extraction workforce parameters."""
    cost_per_person_per_week: float = 2500.0
    max_new_hires_per_week: int = 5  # Onboarding rate
    county_epsilon: float = 1e-9  # Absorbs float noise before ceiling


@dataclass(frozen=True)
class HeartbeatConfig:
    """Post-extraction maintenance parameters."""
    properties_per_maintainer: int = 5_000_000
    weekly_compute_per_property: float = 0.0003
    weekly_chain_gas_per_property: float = 0.0013


@dataclass(frozen=True)
class TokenomicsConfig:
    """Emission curve parameters."""
    total_token_supply: float = 100_000_000.0
    min_last_reward: float = 0.02  # Reward of the very last property

    # Decay-rate solver
    decay_rate_low: float = 1e-16
    decay_rate_high: float = 1e-5
    decay_rate_iterations: int = 200

    # Allocation solver
    allocation_tolerance: float = 1e-6
    allocation_iterations: int = 120


@dataclass(frozen=True)
class PlannerConfig:
    """Master configuration for the extraction planner."""

    # Sub-configurations
    time: TimeConfig = field(default_factory=TimeConfig)
    costs: CostConfig = field(default_factory=CostConfig)
    labor: LaborConfig = field(default_factory=LaborConfig)
    heartbeat: HeartbeatConfig = field(default_factory=HeartbeatConfig)
    tokenomics: TokenomicsConfig = field(default_factory=TokenomicsConfig)

    # Universe
    total_properties: int = 150_000_000
    tiers: Tuple[Tier, ...] = field(default_factory=_default_tiers)
    data_groups: Dict[str, DataGroup] = field(default_factory=_default_data_groups)
    default_data_group: str = "county"

    def __post_init__(self):
        """Validation of catalog and rate invariants."""
        if self.time.ticks_per_week <= 0:
            raise ValueError("ticks_per_week must be positive")
        if self.labor.max_new_hires_per_week <= 0:
            raise ValueError("max_new_hires_per_week must be positive")
        if self.heartbeat.properties_per_maintainer <= 0:
            raise ValueError("properties_per_maintainer must be positive")

        if not self.tiers:
            raise ValueError("at least one tier is required")
        for tier in self.tiers:
            if tier.properties <= 0 or tier.counties <= 0:
                raise ValueError(f"tier {tier.tier_id} must have positive properties and counties")
            if tier.training_weeks < 0 or tier.production_weeks <= 0:
                raise ValueError(f"tier {tier.tier_id} has invalid phase lengths")
        if sum(tier.properties for tier in self.tiers) != self.total_properties:
            raise ValueError("tier properties must sum to total_properties")

        if self.default_data_group not in self.data_groups:
            raise ValueError(f"unknown default data group: {self.default_data_group}")
        for group in self.data_groups.values():
            if group.token_share <= 0:
                raise ValueError(f"data group {group.key} must have a positive token share")

    @property
    def total_counties(self) -> int:
        return sum(tier.counties for tier in self.tiers)

    def tier_offsets(self) -> Tuple[int, ...]:
        """First universe index of each tier, in catalog order."""
        offsets = []
        start = 0
        for tier in self.tiers:
            offsets.append(start)
            start += tier.properties
        return tuple(offsets)


# Global configuration instance
CONFIG = PlannerConfig()
