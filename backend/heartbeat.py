"""
Heartbeat maintenance cost model.

Once properties are extracted they need a standing crew to keep them fresh.
The crew scales with the extracted property count; compute and chain gas
scale per property per week.
"""

import math
from dataclasses import dataclass
from typing import Optional

from config import CONFIG, PlannerConfig


@dataclass(frozen=True)
class HeartbeatEstimate:
    """Steady-state weekly run-rate of the maintenance crew."""
    people_needed: int = 0
    weekly_labor: float = 0.0
    weekly_compute: float = 0.0
    weekly_chain_gas: float = 0.0

    @property
    def weekly_total_cost(self) -> float:
        return self.weekly_labor + self.weekly_compute + self.weekly_chain_gas


def heartbeat_headcount(properties: float, config: Optional[PlannerConfig] = None) -> int:
    """Maintainers needed for ``properties``; at least one when anything is extracted."""
    if properties <= 0:
        return 0
    cfg = config or CONFIG
    return max(1, math.ceil(properties / cfg.heartbeat.properties_per_maintainer))


def estimate_heartbeat(properties: float, config: Optional[PlannerConfig] = None) -> HeartbeatEstimate:
    cfg = config or CONFIG
    properties = max(0.0, properties)
    people = heartbeat_headcount(properties, cfg)
    return HeartbeatEstimate(
        people_needed=people,
        weekly_labor=people * cfg.labor.cost_per_person_per_week,
        weekly_compute=properties * cfg.heartbeat.weekly_compute_per_property,
        weekly_chain_gas=properties * cfg.heartbeat.weekly_chain_gas_per_property
    )
