"""
Snapshot retention planning for Ark.

Usage:
    from ark.retention import RetentionPlanner

    planner = RetentionPlanner()
    keep = planner.plan(date.today(), existing_years={2023, 2024})
"""

from ark.retention.policy import (
    DEFAULT_POLICY,
    RetentionPlanner,
    RetentionPolicy,
    RetentionTier,
    plan,
)

__all__ = [
    "DEFAULT_POLICY",
    "RetentionPlanner",
    "RetentionPolicy",
    "RetentionTier",
    "plan",
]
