"""
plans.py — Plan/entitlement table.
Static mapping from plan tier to feature limits. Only max_goals and max_habits
are enforced server-side; the remaining flags are surfaced to clients.
"""

import math
from dataclasses import dataclass, asdict

PLANS = ("free", "pro", "lifetime")


@dataclass(frozen=True)
class PlanLimits:
    max_habits: float
    max_goals: float
    max_stacks: float
    history_days: float
    has_ai: bool
    has_advanced_analytics: bool
    has_data_export: bool
    has_pomodoro: bool
    has_identity_system: bool
    has_habit_stacking: bool

    def to_dict(self) -> dict:
        # JSON has no infinity; unlimited is reported as null
        return {k: (None if v == math.inf else v) for k, v in asdict(self).items()}


PLAN_LIMITS = {
    "free": PlanLimits(
        max_habits=5,
        max_goals=1,
        max_stacks=0,
        history_days=7,
        has_ai=False,
        has_advanced_analytics=False,
        has_data_export=False,
        has_pomodoro=False,
        has_identity_system=False,
        has_habit_stacking=False,
    ),
    "pro": PlanLimits(
        max_habits=math.inf,
        max_goals=math.inf,
        max_stacks=10,
        history_days=365,
        has_ai=True,
        has_advanced_analytics=True,
        has_data_export=True,
        has_pomodoro=True,
        has_identity_system=True,
        has_habit_stacking=True,
    ),
    "lifetime": PlanLimits(
        max_habits=math.inf,
        max_goals=math.inf,
        max_stacks=math.inf,
        history_days=math.inf,
        has_ai=True,
        has_advanced_analytics=True,
        has_data_export=True,
        has_pomodoro=True,
        has_identity_system=True,
        has_habit_stacking=True,
    ),
}


def get_limits(plan: str | None) -> PlanLimits:
    """Limits for a plan key; unknown or missing plans get the free tier."""
    return PLAN_LIMITS.get(plan or "free", PLAN_LIMITS["free"])


def plan_from_billing_identifier(identifier: str | None) -> str:
    """Map a billing provider plan identifier (e.g. 'pro_yearly') to a plan key."""
    if not identifier:
        return "free"
    normalized = identifier.lower()
    if "lifetime" in normalized:
        return "lifetime"
    if any(word in normalized for word in ("pro", "premium", "yearly", "monthly")):
        return "pro"
    return "free"
