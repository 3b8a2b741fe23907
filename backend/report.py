"""
Console and JSON rendering of a plan result.
"""

import json
from dataclasses import asdict
from typing import List

from planner import PlanResult

RULE = "=" * 55
THIN_RULE = "-" * 55
SCHEDULE_HEAD = 3
SCHEDULE_TAIL = 3


def _usd(value: float) -> str:
    return f"${value:,.2f}"


def _people(count: float) -> str:
    rounded = int(round(count))
    return f"{rounded} {'person' if rounded == 1 else 'people'}"


def _schedule_lines(result: PlanResult) -> List[str]:
    active = result.timeline.weekly_active_workers
    heartbeat = result.timeline.weekly_heartbeat
    weeks = len(active)

    def line(week: int) -> str:
        return f"    Week {week + 1}: {_people(active[week])} (+{heartbeat[week]} heartbeat)"

    if weeks <= SCHEDULE_HEAD + SCHEDULE_TAIL + 2:
        return [line(w) for w in range(weeks)]

    lines = [line(w) for w in range(SCHEDULE_HEAD)]
    lines.append(f"    ... ({weeks - SCHEDULE_HEAD - SCHEDULE_TAIL} more weeks) ...")
    lines.extend(line(w) for w in range(weeks - SCHEDULE_TAIL, weeks))
    return lines


def format_result(result: PlanResult) -> str:
    """Render a plan as a plain-text report."""
    cost = result.cost
    timeline = result.timeline
    heartbeat = result.heartbeat
    distribution = result.distribution
    tokens = result.tokens

    lines = ["", RULE]
    if result.mode == "tokens":
        lines.append(f"  Tokens Input:   {result.requested:,.2f} tokens")
        lines.append(f"  USD Required:   {_usd(cost.total)}")
    elif result.mode == "usd":
        lines.append(f"  USD Input:      {_usd(result.requested)}")
        lines.append(f"  Tokens Earned:  {tokens.tokens:,.2f} tokens")
    else:
        lines.append(f"  Properties Input: {result.requested:,.0f}")
        lines.append(f"  USD Required:     {_usd(cost.total)}")
        lines.append(f"  Tokens Earned:    {tokens.tokens:,.2f} tokens")
    lines.append(f"  Data Group:     {result.data_group}")

    lines.append(RULE)
    lines.append(f"  Properties:     {result.properties:,.2f}")
    lines.append(f"  Ranks:          {distribution.start_rank:,} - {distribution.end_rank:,}")
    lines.append(f"  Remaining:      {distribution.remaining_capacity:,.0f}")
    if tokens.tokens > 0:
        lines.append(
            f"  Reward/property: {tokens.first_property_reward:.6f} -> {tokens.last_property_reward:.6f}"
        )

    lines.append(RULE)
    lines.append("  Cost Breakdown:")
    lines.append(f"    Storage:             {_usd(cost.storage)}")
    lines.append(f"    Compute:             {_usd(cost.compute)}")
    lines.append(f"    Blockchain Gas:      {_usd(cost.chain_gas)}")
    lines.append(f"    Labor:               {_usd(cost.labor)}")
    lines.append(f"    Heartbeat Labor:     {_usd(cost.heartbeat_labor)}")
    lines.append(f"    Heartbeat Compute:   {_usd(cost.heartbeat_compute)}")
    lines.append(f"    Heartbeat Gas:       {_usd(cost.heartbeat_chain_gas)}")
    lines.append("  " + THIN_RULE)
    lines.append(f"    Total:               {_usd(cost.total)}")

    lines.append(RULE)
    lines.append("  Timeline:")
    lines.append(f"    Counties:       {timeline.county_fraction:,.2f} ({timeline.counties_needed:,} to work)")
    lines.append(f"    Weeks:          {timeline.weeks}")
    lines.append(f"    People hired:   {timeline.total_hired:,}")
    for tier in timeline.tiers:
        lines.append(f"    {tier.label}: weeks {tier.start_week}-{tier.end_week}")
    if timeline.stalled:
        lines.append("    WARNING: simulation stopped before all counties were completed")
    if timeline.weeks:
        lines.append("    Schedule:")
        lines.extend(_schedule_lines(result))

    lines.append(RULE)
    lines.append("  Heartbeat (weekly run-rate):")
    lines.append(f"    People:         {heartbeat.people_needed}")
    lines.append(f"    Total:          {_usd(heartbeat.weekly_total_cost)}")
    lines.append(RULE)
    lines.append("")
    return "\n".join(lines)


def result_to_json(result: PlanResult) -> str:
    payload = asdict(result)
    payload["heartbeat"]["weekly_total_cost"] = result.heartbeat.weekly_total_cost
    return json.dumps(payload, indent=2)
