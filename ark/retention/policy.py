"""
Retention planner for Ark snapshots.

Given today's date and the years that existing snapshots cover, computes
the exact set of calendar dates whose snapshots must survive the current
run. The computation is pure: no I/O, no persisted state, so the same
inputs always produce the same keep-set.

Tiers:
- daily: today and the six preceding days
- weekly: Sundays of the current month older than the daily window
- monthly: last day of each elapsed month of the current year
- yearly: December 31 of each year from the oldest snapshot's year up to
  last year
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

from loguru import logger

from ark.dates import (
    add_days,
    end_of_month,
    end_of_year,
    format_key,
    next_or_same_sunday,
    same_month,
    start_of_month,
)


class RetentionTier(Enum):
    """Retention tiers, finest first."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Planner constants.

    Attributes:
        daily_days: Consecutive days kept, today included
        weekly_max_steps: Upper bound on weekly iterations
    """

    daily_days: int = 7
    weekly_max_steps: int = 10

    def __post_init__(self) -> None:
        if self.daily_days < 1:
            raise ValueError("daily_days must be at least 1")
        if self.weekly_max_steps < 0:
            raise ValueError("weekly_max_steps must be non-negative")


DEFAULT_POLICY = RetentionPolicy()


class RetentionPlanner:
    """
    Computes which snapshot dates to keep.

    Usage:
        planner = RetentionPlanner()
        keep = planner.plan(date(2024, 3, 15), {2024})
    """

    def __init__(self, policy: RetentionPolicy | None = None):
        self.policy = policy or DEFAULT_POLICY

    def daily(self, now: date) -> set[date]:
        return {add_days(now, -i) for i in range(self.policy.daily_days)}

    def weekly(self, now: date) -> set[date]:
        """
        Sundays of the current month, walking back from the first Sunday
        on or after ``now - 7``.

        Stops when the candidate leaves the month or after
        ``weekly_max_steps`` iterations.
        """
        kept = set()
        month_start = start_of_month(now)
        candidate = next_or_same_sunday(add_days(now, -7))
        steps = 0
        while (
            same_month(candidate, now)
            and candidate >= month_start
            and steps < self.policy.weekly_max_steps
        ):
            kept.add(candidate)
            candidate = next_or_same_sunday(add_days(candidate, -7))
            steps += 1
        return kept

    def monthly(self, now: date) -> set[date]:
        return {end_of_month(date(now.year, m, 1)) for m in range(1, now.month)}

    def yearly(self, now: date, existing_years: Iterable[int]) -> set[date]:
        years = set(existing_years)
        if not years:
            return set()
        return {end_of_year(y) for y in range(min(years), now.year)}

    def plan_tiers(
        self,
        now: date,
        existing_years: Iterable[int],
    ) -> dict[RetentionTier, set[date]]:
        """
        Compute the keep-set for each tier separately.

        Args:
            now: Reference date of the run
            existing_years: Years covered by snapshots currently on disk

        Returns:
            Mapping of tier to the dates that tier keeps
        """
        return {
            RetentionTier.DAILY: self.daily(now),
            RetentionTier.WEEKLY: self.weekly(now),
            RetentionTier.MONTHLY: self.monthly(now),
            RetentionTier.YEARLY: self.yearly(now, existing_years),
        }

    def plan(self, now: date, existing_years: Iterable[int]) -> set[date]:
        """Return the union of all tiers: every date whose snapshot is kept."""
        tiers = self.plan_tiers(now, existing_years)
        for tier, dates in tiers.items():
            logger.debug(
                f"{tier.value} tier keeps {len(dates)}: "
                f"{', '.join(format_key(d) for d in sorted(dates)) or '-'}"
            )

        keep: set[date] = set()
        for dates in tiers.values():
            keep |= dates
        return keep

    def explain(
        self,
        now: date,
        existing_years: Iterable[int],
        day: date,
    ) -> list[RetentionTier]:
        """List the tiers that keep ``day``; empty means it will be deleted."""
        tiers = self.plan_tiers(now, existing_years)
        return [tier for tier, dates in tiers.items() if day in dates]

    def plan_deletions(self, now: date, snapshot_dates: Iterable[date]) -> set[date]:
        """
        Dates among ``snapshot_dates`` that fall outside the keep-set.

        ``existing_years`` is derived from the given dates plus ``now``.
        """
        existing = set(snapshot_dates)
        years = {d.year for d in existing} | {now.year}
        return existing - self.plan(now, years)


def plan(
    now: date,
    existing_years: Iterable[int],
    policy: RetentionPolicy | None = None,
) -> set[date]:
    """Convenience wrapper around ``RetentionPlanner(policy).plan``."""
    return RetentionPlanner(policy).plan(now, existing_years)
