"""
Tokenomics Emission Curve

Rewards decay geometrically with the property index: the property at index
``i`` earns ``a0 * exp(-decay_rate * i)`` tokens, with ``a0`` chosen so the
rewards over the whole universe sum to the data group's token supply.

The decay rate is solved once per curve by bisection so the last property
of the universe earns exactly the configured minimum reward. The allocation
solver inverts the cumulative reward to find how many properties a token
budget buys from a given start index.

Both bisections run under a fixed iteration cap and return their best
bracket estimate when the cap is reached instead of raising.
"""

import logging
import math
from typing import Optional, Tuple

from config import CONFIG, PlannerConfig

logger = logging.getLogger(__name__)


def _leading_reward(decay_rate: float, total_supply: float, total_properties: int) -> float:
    """Reward of index 0 so that the finite geometric series sums to the supply."""
    # (1 - e^-l) / (1 - e^-lP), via expm1 to keep precision for tiny rates
    return total_supply * (-math.expm1(-decay_rate)) / (-math.expm1(-decay_rate * total_properties))


def solve_decay_rate(
    total_supply: float,
    total_properties: int,
    min_last_reward: float,
    low: float = 1e-16,
    high: float = 1e-5,
    iterations: int = 200
) -> float:
    """
    Solve the decay rate for which the last property earns ``min_last_reward``.

    The last-property reward is strictly decreasing in the decay rate, so
    plain bisection over ``[low, high]`` converges. Targets outside the
    bracket clamp to the nearest bound.
    """
    last_index = total_properties - 1
    for _ in range(iterations):
        mid = 0.5 * (low + high)
        last_reward = _leading_reward(mid, total_supply, total_properties) * math.exp(-mid * last_index)
        if last_reward > min_last_reward:
            low = mid  # Curve too flat
        else:
            high = mid
    decay_rate = 0.5 * (low + high)
    logger.debug(f"Solved decay rate {decay_rate:.6e} for supply {total_supply:,.0f}")
    return decay_rate


class TokenomicsCurve:
    """
    Geometric emission curve over the property universe.

    Construction solves the decay rate; every query afterwards is O(1).
    """

    def __init__(
        self,
        total_supply: float,
        total_properties: int,
        min_last_reward: float,
        config: Optional[PlannerConfig] = None
    ):
        cfg = (config or CONFIG).tokenomics
        self.total_supply = total_supply
        self.total_properties = total_properties
        self.min_last_reward = min_last_reward
        self.tolerance = cfg.allocation_tolerance
        self.max_iterations = cfg.allocation_iterations

        self.decay_rate = solve_decay_rate(
            total_supply,
            total_properties,
            min_last_reward,
            low=cfg.decay_rate_low,
            high=cfg.decay_rate_high,
            iterations=cfg.decay_rate_iterations
        )
        self.leading_reward = _leading_reward(self.decay_rate, total_supply, total_properties)
        # Denominator shared by every range sum
        self._one_minus_ratio = -math.expm1(-self.decay_rate)

    @classmethod
    def for_data_group(cls, data_group: str, config: Optional[PlannerConfig] = None) -> "TokenomicsCurve":
        """Curve for a data group, scaled by its token share."""
        cfg = config or CONFIG
        group = cfg.data_groups[data_group]
        return cls(
            total_supply=cfg.tokenomics.total_token_supply * group.token_share,
            total_properties=cfg.total_properties,
            min_last_reward=cfg.tokenomics.min_last_reward,
            config=cfg
        )

    def remaining_capacity(self, start_index: float) -> float:
        return max(0.0, self.total_properties - max(0.0, start_index))

    def reward_at(self, index: float) -> float:
        """Token reward for the property at ``index``."""
        return self.leading_reward * math.exp(-self.decay_rate * index)

    def cumulative_reward(self, start_index: float, count: float) -> float:
        """Total reward for ``count`` consecutive properties from ``start_index``."""
        if count <= 0:
            return 0.0
        return (
            self.leading_reward
            * math.exp(-self.decay_rate * start_index)
            * (-math.expm1(-self.decay_rate * count))
            / self._one_minus_ratio
        )

    def reward_bounds(self, start_index: float, count: float) -> Tuple[float, float]:
        """Per-property reward of the first and last property in a range."""
        if count <= 0:
            return (0.0, 0.0)
        last_index = start_index + math.ceil(count) - 1
        return (self.reward_at(start_index), self.reward_at(last_index))

    def properties_for_tokens(self, token_budget: float, start_index: float = 0) -> float:
        """
        Number of properties from ``start_index`` whose cumulative reward
        matches ``token_budget``.

        Budgets at or above the reward of the full remaining range return
        the full remaining range. Otherwise the count is bisected until the
        reward lands within ``tolerance`` of the budget; if the iteration cap
        is hit first, the current upper bound is returned.
        """
        start_index = max(0.0, start_index)
        remaining = self.remaining_capacity(start_index)
        if remaining <= 0 or token_budget <= 0:
            return 0.0

        if token_budget >= self.cumulative_reward(start_index, remaining):
            return remaining

        low, high = 0.0, remaining
        for _ in range(self.max_iterations):
            mid = 0.5 * (low + high)
            reward = self.cumulative_reward(start_index, mid)
            if abs(reward - token_budget) <= self.tolerance:
                return mid
            if reward < token_budget:
                low = mid
            else:
                high = mid

        logger.debug(f"Allocation solver hit iteration cap for budget {token_budget:,.6f}")
        return high
