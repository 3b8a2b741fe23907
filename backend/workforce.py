"""
Workforce Pipeline Simulator

Discrete-time scheduler for the extraction workforce. Every worker runs a
two-phase cycle per county (train, then produce); the cycle is tracked as a
shift register of stage buckets so the cost of a tick does not depend on
the headcount.

Tiers are worked strictly in catalog order: a tier's pipeline must drain
completely before the next tier starts. Workers who finish a cycle are
first diverted to heartbeat maintenance as the completed property count
requires, then restarted on the same tier while counties remain, and
otherwise parked as idle for a later tier.

All behavior is deterministic - no randomness, I/O, or side effects.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from config import CONFIG, PlannerConfig, Tier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workload:
    """Properties assigned to one tier for a single plan."""
    tier: Tier
    properties: float
    county_fraction: float
    counties_needed: int


def build_workloads(
    quantity: float,
    extracted: float = 0,
    config: Optional[PlannerConfig] = None
) -> List[Workload]:
    """
    Partition a property quantity across tiers in catalog order.

    Each tier contributes only what remains of it after the extraction
    offset; the quantity is expected to be clamped to remaining capacity
    already, anything beyond the universe is dropped.
    """
    cfg = config or CONFIG
    epsilon = cfg.labor.county_epsilon
    remaining = max(0.0, quantity)
    workloads = []

    for tier, offset in zip(cfg.tiers, cfg.tier_offsets()):
        tier_extracted = min(max(extracted - offset, 0), tier.properties)
        assigned = min(tier.properties - tier_extracted, remaining)
        remaining -= assigned

        county_fraction = assigned / tier.properties_per_county
        counties_needed = max(0, math.ceil(county_fraction - epsilon))
        workloads.append(Workload(tier, assigned, county_fraction, counties_needed))

    return workloads


class PipelineState:
    """
    Stage buckets for the tier currently being worked.

    Bucket ``i`` holds the workers who are ``i`` ticks into their cycle.
    Buckets below ``training_ticks`` are in training; the rest produce.
    """

    def __init__(self, workload: Workload, ticks_per_week: int):
        self.workload = workload
        self.training_ticks = int(round(workload.tier.training_weeks * ticks_per_week))
        self.production_ticks = max(1, int(round(workload.tier.production_weeks * ticks_per_week)))
        self.stages = np.zeros(self.training_ticks + self.production_ticks, dtype=np.int64)

        self.counties_started = 0
        self.counties_completed = 0
        self.properties_completed = 0.0

    @property
    def unfilled_slots(self) -> int:
        return self.workload.counties_needed - self.counties_started

    @property
    def occupancy(self) -> int:
        return int(self.stages.sum())

    @property
    def producing(self) -> int:
        return int(self.stages[self.training_ticks:].sum())

    @property
    def is_drained(self) -> bool:
        return self.counties_completed >= self.workload.counties_needed and self.occupancy == 0

    def start(self, count: int):
        if count <= 0:
            return
        self.stages[0] += count
        self.counties_started += count

    def advance(self) -> int:
        """Shift every bucket forward one tick and return the completers."""
        completers = int(self.stages[-1])
        self.stages = np.roll(self.stages, 1)
        self.stages[0] = 0

        if completers:
            needed = self.workload.counties_needed
            self.counties_completed = min(needed, self.counties_completed + completers)
            if self.counties_completed == needed:
                # Last county is usually partial
                self.properties_completed = self.workload.properties
            else:
                self.properties_completed = min(
                    self.workload.properties,
                    self.counties_completed * self.workload.tier.properties_per_county
                )
        return completers


@dataclass(slots=True)
class WorkerPool:
    """Process-wide worker accounting for one simulation."""
    max_new_hires_per_week: int
    max_total_workers: Optional[int] = None
    idle: int = 0
    total_hired: int = 0
    hired_this_week: int = 0
    heartbeat: int = 0

    def hire_capacity(self) -> int:
        capacity = self.max_new_hires_per_week - self.hired_this_week
        if self.max_total_workers is not None:
            capacity = min(capacity, self.max_total_workers - self.total_hired)
        return max(0, capacity)

    def can_ever_hire(self) -> bool:
        return self.max_total_workers is None or self.total_hired < self.max_total_workers

    def take_idle(self, wanted: int) -> int:
        taken = min(self.idle, max(0, wanted))
        self.idle -= taken
        return taken

    def hire(self, wanted: int) -> int:
        hired = min(self.hire_capacity(), max(0, wanted))
        self.total_hired += hired
        self.hired_this_week += hired
        return hired


@dataclass(frozen=True)
class TierProgress:
    """Where a tier landed on the simulated timeline."""
    tier_id: int
    label: str
    properties: float
    county_fraction: float
    counties_needed: int
    start_week: int
    end_week: int


@dataclass(frozen=True)
class SimulationResult:
    """Output of one simulator run."""
    labor_cost: float = 0.0
    county_fraction: float = 0.0
    counties_needed: int = 0
    counties_completed: int = 0
    properties_completed: float = 0.0
    weekly_active_workers: Tuple[float, ...] = ()
    weekly_heartbeat: Tuple[int, ...] = ()
    weekly_counties_completed: Tuple[int, ...] = ()
    tiers: Tuple[TierProgress, ...] = ()
    total_hired: int = 0
    heartbeat_workers: int = 0
    idle_workers: int = 0
    ticks: int = 0
    stalled: bool = False

    @property
    def weeks(self) -> int:
        return len(self.weekly_active_workers)


@dataclass
class _WeeklySeries:
    active: List[float] = field(default_factory=list)
    heartbeat: List[int] = field(default_factory=list)
    counties: List[int] = field(default_factory=list)
    tick_active: List[int] = field(default_factory=list)

    def flush(self, heartbeat: int, counties: int):
        if not self.tick_active:
            return
        self.active.append(float(np.mean(self.tick_active)))
        self.heartbeat.append(heartbeat)
        self.counties.append(counties)
        self.tick_active = []


class WorkforceSimulator:
    """
    Tick-based scheduler for the tiered extraction workforce.

    Each tick runs allocate → accrue → advance → dispose → transition →
    weekly flush for the active tier.
    """

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        max_total_workers: Optional[int] = None,
        max_new_hires_per_week: Optional[int] = None
    ):
        self.config = config or CONFIG
        self.max_total_workers = max_total_workers
        self.max_new_hires_per_week = max_new_hires_per_week or self.config.labor.max_new_hires_per_week

    def _heartbeat_shortfall(self, pool: WorkerPool, cumulative_properties: float) -> int:
        required = math.ceil(cumulative_properties / self.config.heartbeat.properties_per_maintainer)
        return max(0, required - pool.heartbeat)

    def run(self, workloads: Sequence[Workload]) -> SimulationResult:
        ticks_per_week = self.config.time.ticks_per_week
        max_ticks = self.config.time.max_ticks
        cost_per_tick = self.config.labor.cost_per_person_per_week / ticks_per_week

        queue = [w for w in workloads if w.counties_needed > 0]
        county_fraction = sum(w.county_fraction for w in workloads)
        counties_needed = sum(w.counties_needed for w in queue)

        pool = WorkerPool(
            max_new_hires_per_week=self.max_new_hires_per_week,
            max_total_workers=self.max_total_workers
        )
        series = _WeeklySeries()
        tiers: List[TierProgress] = []

        labor_cost = 0.0
        finished_properties = 0.0
        finished_counties = 0
        tick = 0
        tier_start_week = 0
        stalled = False

        tier_index = 0
        state = PipelineState(queue[0], ticks_per_week) if queue else None

        while state is not None:
            if tick >= max_ticks:
                logger.warning(f"Simulation stopped at tick cap ({max_ticks}) with work remaining")
                stalled = True
                break

            # 1. Allocate: returning workers before new hires
            slots = state.unfilled_slots
            if slots > 0:
                from_idle = pool.take_idle(slots)
                hired = pool.hire(slots - from_idle)
                state.start(from_idle + hired)
            series.tick_active.append(state.occupancy)

            # 2. Accrue labor for the production phase only
            labor_cost += state.producing * cost_per_tick

            # 3. Advance
            completers = state.advance()

            # 4. Dispose of completers: heartbeat, then restart, then idle
            if completers:
                cumulative = finished_properties + state.properties_completed
                diverted = min(self._heartbeat_shortfall(pool, cumulative), completers)
                pool.heartbeat += diverted
                available = completers - diverted
                restarted = min(available, max(0, state.unfilled_slots))
                state.start(restarted)
                pool.idle += available - restarted

            tick += 1
            counties_done = finished_counties + state.counties_completed

            # 5. Tier transition
            if state.is_drained:
                finished_properties += state.properties_completed
                finished_counties += state.counties_completed
                end_week = math.ceil(tick / ticks_per_week)
                tier = state.workload.tier
                tiers.append(TierProgress(
                    tier_id=tier.tier_id,
                    label=tier.label,
                    properties=state.workload.properties,
                    county_fraction=state.workload.county_fraction,
                    counties_needed=state.workload.counties_needed,
                    start_week=tier_start_week + 1,
                    end_week=end_week
                ))
                logger.debug(f"{tier.label} drained at tick {tick} (week {end_week})")

                tier_index += 1
                tier_start_week = tick // ticks_per_week
                state = PipelineState(queue[tier_index], ticks_per_week) if tier_index < len(queue) else None
            elif state.occupancy == 0 and state.unfilled_slots <= 0:
                # Nothing in flight and nothing left to start, yet not drained
                logger.error(f"{state.workload.tier.label} has no work in flight but is not drained")
                stalled = True
                break
            elif state.occupancy == 0 and pool.idle == 0 and not pool.can_ever_hire():
                logger.warning(
                    f"Worker cap of {pool.max_total_workers} exhausted with "
                    f"{state.unfilled_slots} counties unstarted in {state.workload.tier.label}"
                )
                stalled = True
                break

            if state is None:
                # Settle any maintenance shortfall from the idle bench
                topped_up = pool.take_idle(self._heartbeat_shortfall(pool, finished_properties))
                pool.heartbeat += topped_up

            # 6. Weekly flush
            if tick % ticks_per_week == 0:
                series.flush(pool.heartbeat, counties_done)
                pool.hired_this_week = 0

        # Final partial week
        series.flush(pool.heartbeat, finished_counties + (state.counties_completed if state else 0))

        result = SimulationResult(
            labor_cost=labor_cost,
            county_fraction=county_fraction,
            counties_needed=counties_needed,
            counties_completed=finished_counties + (state.counties_completed if state else 0),
            properties_completed=finished_properties + (state.properties_completed if state else 0.0),
            weekly_active_workers=tuple(series.active),
            weekly_heartbeat=tuple(series.heartbeat),
            weekly_counties_completed=tuple(series.counties),
            tiers=tuple(tiers),
            total_hired=pool.total_hired,
            heartbeat_workers=pool.heartbeat,
            idle_workers=pool.idle,
            ticks=tick,
            stalled=stalled
        )
        logger.debug(
            f"Simulated {counties_needed:,} counties over {result.weeks} weeks: "
            f"{pool.total_hired:,} hired, {pool.heartbeat} on heartbeat, labor ${labor_cost:,.2f}"
        )
        return result
