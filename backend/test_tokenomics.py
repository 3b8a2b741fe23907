"""
Unit tests for the tokenomics emission curve

Tests cover:
- Decay-rate solve (normalisation and last-property reward)
- Range sums and reward bounds
- Token budget inversion, saturation and clamping
"""

import pytest

from config import CONFIG
from tokenomics import TokenomicsCurve, solve_decay_rate


@pytest.fixture(scope="module")
def curve():
    return TokenomicsCurve.for_data_group("county")


class TestDecayRate:
    """Solving the decay rate from the minimum last reward"""

    def test_decay_rate_inside_bracket(self, curve):
        assert CONFIG.tokenomics.decay_rate_low < curve.decay_rate < CONFIG.tokenomics.decay_rate_high

    def test_last_property_earns_minimum_reward(self, curve):
        last = curve.reward_at(CONFIG.total_properties - 1)
        assert last == pytest.approx(CONFIG.tokenomics.min_last_reward, rel=1e-9)

    def test_universe_sums_to_supply(self, curve):
        total = curve.cumulative_reward(0, CONFIG.total_properties)
        assert total == pytest.approx(CONFIG.tokenomics.total_token_supply, rel=1e-9)

    def test_steeper_target_gives_larger_rate(self):
        """A smaller last reward needs a faster decay"""
        shallow = solve_decay_rate(1_000_000.0, 1_000_000, 0.5)
        steep = solve_decay_rate(1_000_000.0, 1_000_000, 0.1)
        assert steep > shallow

    def test_data_group_share_scales_supply(self):
        school = TokenomicsCurve.for_data_group("school")
        share = CONFIG.data_groups["school"].token_share
        total = school.cumulative_reward(0, CONFIG.total_properties)
        assert total == pytest.approx(CONFIG.tokenomics.total_token_supply * share, rel=1e-9)


class TestCurveQueries:
    """Pointwise and range rewards"""

    def test_rewards_decay_with_index(self, curve):
        assert curve.reward_at(0) > curve.reward_at(1_000_000) > curve.reward_at(100_000_000)

    def test_range_sums_are_additive(self, curve):
        whole = curve.cumulative_reward(1_000, 5_000)
        split = curve.cumulative_reward(1_000, 2_000) + curve.cumulative_reward(3_000, 3_000)
        assert whole == pytest.approx(split, rel=1e-12)

    def test_empty_range_is_zero(self, curve):
        assert curve.cumulative_reward(10, 0) == 0.0
        assert curve.reward_bounds(10, 0) == (0.0, 0.0)

    def test_reward_bounds_cover_first_and_last(self, curve):
        first, last = curve.reward_bounds(100, 50)
        assert first == curve.reward_at(100)
        assert last == curve.reward_at(149)
        assert first > last


class TestPropertiesForTokens:
    """Inverting the cumulative reward"""

    @pytest.mark.parametrize("budget", [1.0, 12_345.678, 1_000_000.0])
    @pytest.mark.parametrize("start", [0, 50_000_000])
    def test_round_trip_within_tolerance(self, curve, budget, start):
        count = curve.properties_for_tokens(budget, start)
        assert 0 < count < curve.remaining_capacity(start)
        assert abs(curve.cumulative_reward(start, count) - budget) <= CONFIG.tokenomics.allocation_tolerance

    def test_later_start_needs_more_properties(self, curve):
        """Rewards shrink along the curve, so the same budget buys more"""
        early = curve.properties_for_tokens(10_000.0, 0)
        late = curve.properties_for_tokens(10_000.0, 100_000_000)
        assert late > early

    def test_budget_above_maximum_saturates(self, curve):
        start = CONFIG.total_properties - 10
        maximum = curve.cumulative_reward(start, 10)
        assert curve.properties_for_tokens(maximum, start) == 10
        assert curve.properties_for_tokens(maximum * 100, start) == 10

    def test_no_remaining_capacity_returns_zero(self, curve):
        assert curve.properties_for_tokens(1_000.0, CONFIG.total_properties) == 0.0
        assert curve.properties_for_tokens(1_000.0, CONFIG.total_properties + 5) == 0.0

    def test_non_positive_budget_returns_zero(self, curve):
        assert curve.properties_for_tokens(0.0, 0) == 0.0
        assert curve.properties_for_tokens(-5.0, 0) == 0.0

    def test_negative_start_clamps_to_zero(self, curve):
        assert curve.properties_for_tokens(500.0, -100) == curve.properties_for_tokens(500.0, 0)
