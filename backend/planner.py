"""
Extraction Planning Engine

Orchestrates a single plan: clamps the requested quantity to what remains
of the property universe, splits it across tiers, runs the workforce
simulator and the heartbeat model, and assembles the immutable result
record consumed by the report layer.

Token and USD budgets are first resolved to a property count - token
budgets by inverting the emission curve, USD budgets by bisecting the
property count against the full plan cost.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from config import CONFIG, PlannerConfig
from heartbeat import HeartbeatEstimate, estimate_heartbeat
from options import PlanOptions
from tokenomics import TokenomicsCurve
from workforce import TierProgress, WorkforceSimulator, build_workloads

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostBreakdown:
    storage: float = 0.0
    compute: float = 0.0
    chain_gas: float = 0.0
    labor: float = 0.0
    heartbeat_labor: float = 0.0
    heartbeat_compute: float = 0.0
    heartbeat_chain_gas: float = 0.0
    total: float = 0.0

    @property
    def flat_total(self) -> float:
        return self.storage + self.compute + self.chain_gas


@dataclass(frozen=True)
class Timeline:
    county_fraction: float = 0.0
    counties_needed: int = 0
    weeks: int = 0
    weekly_active_workers: Tuple[float, ...] = ()
    weekly_heartbeat: Tuple[int, ...] = ()
    weekly_counties_completed: Tuple[int, ...] = ()
    tiers: Tuple[TierProgress, ...] = ()
    total_hired: int = 0
    stalled: bool = False


@dataclass(frozen=True)
class Distribution:
    """Where the plan sits in the ranked property universe."""
    start_index: float = 0.0
    end_index: float = 0.0
    start_rank: int = 0  # 1-based
    end_rank: int = 0
    remaining_capacity: float = 0.0


@dataclass(frozen=True)
class TokenSummary:
    tokens: float = 0.0
    first_property_reward: float = 0.0
    last_property_reward: float = 0.0
    cost_per_token: float = 0.0


@dataclass(frozen=True)
class PlanResult:
    """Immutable snapshot of one plan."""
    mode: str
    data_group: str
    requested: float
    properties: float
    cost: CostBreakdown
    timeline: Timeline
    heartbeat: HeartbeatEstimate
    distribution: Distribution
    tokens: TokenSummary


class PlanningEngine:
    """
    Builds extraction plans against one immutable configuration.

    Emission curves for every data group are solved once at construction.
    """

    def __init__(self, config: Optional[PlannerConfig] = None):
        self.config = config or CONFIG
        self.curves: Dict[str, TokenomicsCurve] = {
            key: TokenomicsCurve.for_data_group(key, self.config)
            for key in self.config.data_groups
        }

    def _resolve_group(self, data_group: Optional[str]) -> str:
        return (data_group or self.config.default_data_group).lower()

    def _clamp_offset(self, extracted: float) -> float:
        return min(max(0.0, extracted), self.config.total_properties)

    def remaining_capacity(self, extracted: float = 0) -> float:
        return self.config.total_properties - self._clamp_offset(extracted)

    def plan(
        self,
        properties: float,
        extracted: float = 0,
        data_group: Optional[str] = None,
        max_total_workers: Optional[int] = None,
        max_new_hires_per_week: Optional[int] = None,
        mode: str = "properties",
        requested: Optional[float] = None
    ) -> PlanResult:
        """Plan ``properties`` starting after ``extracted`` already-processed properties."""
        cfg = self.config
        group = self._resolve_group(data_group)
        start_index = self._clamp_offset(extracted)
        remaining = self.remaining_capacity(start_index)
        planned = min(max(0.0, properties), remaining)
        if planned < properties:
            logger.info(f"Clamped {properties:,.2f} requested properties to remaining capacity {remaining:,.0f}")

        workloads = build_workloads(planned, start_index, cfg)
        simulator = WorkforceSimulator(
            cfg,
            max_total_workers=max_total_workers,
            max_new_hires_per_week=max_new_hires_per_week
        )
        simulation = simulator.run(workloads)
        heartbeat = estimate_heartbeat(planned, cfg)

        storage = planned * cfg.costs.storage_per_property
        compute = planned * cfg.costs.compute_per_property
        chain_gas = planned * cfg.costs.chain_gas_per_property
        # First week of heartbeat is capitalised into the plan
        total = (
            storage + compute + chain_gas + simulation.labor_cost
            + heartbeat.weekly_labor + heartbeat.weekly_compute + heartbeat.weekly_chain_gas
        )
        cost = CostBreakdown(
            storage=storage,
            compute=compute,
            chain_gas=chain_gas,
            labor=simulation.labor_cost,
            heartbeat_labor=heartbeat.weekly_labor,
            heartbeat_compute=heartbeat.weekly_compute,
            heartbeat_chain_gas=heartbeat.weekly_chain_gas,
            total=total
        )

        timeline = Timeline(
            county_fraction=simulation.county_fraction,
            counties_needed=simulation.counties_needed,
            weeks=simulation.weeks,
            weekly_active_workers=simulation.weekly_active_workers,
            weekly_heartbeat=simulation.weekly_heartbeat,
            weekly_counties_completed=simulation.weekly_counties_completed,
            tiers=simulation.tiers,
            total_hired=simulation.total_hired,
            stalled=simulation.stalled
        )

        end_index = start_index + planned
        distribution = Distribution(
            start_index=start_index,
            end_index=end_index,
            start_rank=int(start_index) + 1,
            end_rank=int(start_index) + math.ceil(planned),
            remaining_capacity=cfg.total_properties - end_index
        )

        curve = self.curves[group]
        tokens = curve.cumulative_reward(start_index, planned)
        first_reward, last_reward = curve.reward_bounds(start_index, planned)
        token_summary = TokenSummary(
            tokens=tokens,
            first_property_reward=first_reward,
            last_property_reward=last_reward,
            cost_per_token=total / tokens if tokens > 0 else 0.0
        )

        logger.info(f"Planned {planned:,.2f} {group} properties: {timeline.weeks} weeks, ${total:,.2f}")
        return PlanResult(
            mode=mode,
            data_group=group,
            requested=properties if requested is None else requested,
            properties=planned,
            cost=cost,
            timeline=timeline,
            heartbeat=heartbeat,
            distribution=distribution,
            tokens=token_summary
        )

    def plan_for_properties(self, properties: int, extracted: float = 0, **kwargs) -> PlanResult:
        return self.plan(properties, extracted, mode="properties", **kwargs)

    def plan_for_tokens(
        self,
        token_budget: float,
        extracted: float = 0,
        data_group: Optional[str] = None,
        **kwargs
    ) -> PlanResult:
        """Plan the property range whose emission matches ``token_budget``."""
        group = self._resolve_group(data_group)
        start_index = self._clamp_offset(extracted)
        properties = self.curves[group].properties_for_tokens(token_budget, start_index)
        logger.debug(f"{token_budget:,.2f} tokens buy {properties:,.4f} properties from index {start_index:,.0f}")
        return self.plan(
            properties,
            start_index,
            data_group=group,
            mode="tokens",
            requested=token_budget,
            **kwargs
        )

    def plan_for_usd(self, usd_budget: float, extracted: float = 0, **kwargs) -> PlanResult:
        """
        Plan the largest whole property count whose total cost fits ``usd_budget``.

        Total plan cost is non-decreasing in the property count, so an
        integer bisection over the remaining capacity finds the boundary.
        """
        start_index = self._clamp_offset(extracted)
        sim_kwargs = {k: v for k, v in kwargs.items() if k in ("max_total_workers", "max_new_hires_per_week")}

        def total_cost(count: int) -> float:
            return self.plan(count, start_index, **sim_kwargs).cost.total

        low = 0
        high = int(self.remaining_capacity(start_index))
        if usd_budget <= 0 or high == 0:
            high = 0
        elif total_cost(high) <= usd_budget:
            low = high
        else:
            while high - low > 1:
                mid = (low + high) // 2
                if total_cost(mid) <= usd_budget:
                    low = mid
                else:
                    high = mid

        logger.debug(f"${usd_budget:,.2f} covers {low:,} properties")
        return self.plan(low, start_index, mode="usd", requested=usd_budget, **kwargs)

    def plan_from_options(self, options: PlanOptions) -> PlanResult:
        """Dispatch a validated options record to the matching planning mode."""
        kwargs = dict(
            data_group=options.data_group,
            max_total_workers=options.max_total_workers,
            max_new_hires_per_week=options.max_new_hires_per_week
        )
        if options.tokens is not None:
            return self.plan_for_tokens(options.tokens, options.extracted_properties, **kwargs)
        if options.usd is not None:
            return self.plan_for_usd(options.usd, options.extracted_properties, **kwargs)
        return self.plan_for_properties(options.properties, options.extracted_properties, **kwargs)
