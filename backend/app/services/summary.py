"""Composite health summary across the four Oura daily collections.

The four fetches run concurrently and each settles on its own: a failed or
timed-out category degrades to a "No data available" line while the others
are still reported.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models import DailyActivity, DailyReadiness, DailySleep, DailyStress
from .formatting import format_count, round_half_up
from .oura_client import (
    ACTIVITY_ENDPOINT,
    READINESS_ENDPOINT,
    SLEEP_ENDPOINT,
    STRESS_ENDPOINT,
    OuraAPIError,
    OuraClient,
    OuraErrorKind,
)
from .periods import DateRange

logger = logging.getLogger(__name__)

NO_DATA = "No data available"
NO_SCORES = "Data available but no scores calculated"
NO_STRESS_TIMES = "Data available but no stress times calculated"

INSIGHT_PARTIAL_FAILURE = (
    "Some data types may not be available for your account or ring model"
)
INSIGHT_NO_DATA = (
    "No data found - make sure to sync your Oura ring with the mobile app"
)
INSIGHT_LIMITED_DATA = (
    "Limited data available - consider syncing your ring more regularly"
)
INSIGHT_GOOD_COVERAGE = "Good data coverage - keep up the consistent tracking!"

GOOD_COVERAGE_MIN_RECORDS = 3


@dataclass
class FetchOutcome:
    records: list[Any] = field(default_factory=list)
    error: Optional[OuraAPIError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, records: list[Any]) -> FetchOutcome:
        return cls(records=list(records))

    @classmethod
    def failure(cls, error: OuraAPIError) -> FetchOutcome:
        return cls(error=error)


@dataclass
class SummaryOutcomes:
    sleep: FetchOutcome
    activity: FetchOutcome
    stress: FetchOutcome
    readiness: FetchOutcome

    def all(self) -> list[FetchOutcome]:
        return [self.sleep, self.activity, self.stress, self.readiness]


@dataclass
class CategorySummary:
    name: str
    heading: str
    text: str
    record_count: int = 0
    average_score: Optional[int] = None
    average_steps: Optional[int] = None
    average_stress_minutes: Optional[int] = None
    most_common_day_summary: Optional[str] = None

    @property
    def line(self) -> str:
        return f"{self.heading}: {self.text}"

    def to_dict(self) -> dict:
        payload = {
            "record_count": self.record_count,
            "average_score": self.average_score,
            "text": self.text,
        }
        if self.name == "activity":
            payload["average_steps"] = self.average_steps
        if self.name == "stress":
            payload["average_stress_minutes"] = self.average_stress_minutes
            payload["most_common_day_summary"] = self.most_common_day_summary
        return payload


@dataclass
class HealthSummary:
    date_range: DateRange
    categories: list[CategorySummary]
    insights: list[str]

    def category(self, name: str) -> CategorySummary:
        for summary in self.categories:
            if summary.name == name:
                return summary
        raise KeyError(name)

    def to_text(self) -> str:
        lines = [
            "📊 **Comprehensive Health Summary**",
            "",
            f"📅 **Period**: {self.date_range.start_date} "
            f"to {self.date_range.end_date}",
            "",
        ]
        lines.extend(summary.line for summary in self.categories)
        lines.append("")
        lines.append("💡 **Key Insights**:")
        lines.extend(f"• {insight}" for insight in self.insights)
        return "\n".join(lines) + "\n"


def _records(outcome: FetchOutcome) -> list[Any]:
    return outcome.records if outcome.ok else []


def _average_score(records: list[Any]) -> Optional[int]:
    scores = [record.score for record in records if record.score is not None]
    if not scores:
        return None
    return round_half_up(sum(scores) / len(scores))


def most_common_day_summary(records: list[DailyStress]) -> Optional[str]:
    summaries = [record.day_summary for record in records if record.day_summary]
    if not summaries:
        return None
    # Stable ascending sort by frequency; among tied labels the last one wins.
    return sorted(summaries, key=summaries.count)[-1]


def _scored_summary(
    name: str, heading: str, outcome: FetchOutcome
) -> CategorySummary:
    records = _records(outcome)
    summary = CategorySummary(name, heading, NO_DATA, record_count=len(records))
    if not records:
        return summary

    summary.average_score = _average_score(records)
    if summary.average_score is None:
        summary.text = NO_SCORES
    else:
        summary.text = (
            f"Average score {summary.average_score}/100 ({len(records)} days)"
        )
    return summary


def summarize_sleep(outcome: FetchOutcome) -> CategorySummary:
    return _scored_summary("sleep", "😴 **Sleep**", outcome)


def summarize_readiness(outcome: FetchOutcome) -> CategorySummary:
    return _scored_summary("readiness", "⚡ **Readiness**", outcome)


def summarize_activity(outcome: FetchOutcome) -> CategorySummary:
    records: list[DailyActivity] = _records(outcome)
    summary = CategorySummary(
        "activity", "🏃 **Activity**", NO_DATA, record_count=len(records)
    )
    if not records:
        return summary

    total_steps = sum(record.steps or 0 for record in records)
    summary.average_steps = round_half_up(total_steps / len(records))
    steps_text = f"{format_count(summary.average_steps)} avg steps/day"
    summary.average_score = _average_score(records)
    if summary.average_score is None:
        summary.text = f"{steps_text} (no scores available)"
    else:
        summary.text = f"Average score {summary.average_score}/100, {steps_text}"
    return summary


def summarize_stress(outcome: FetchOutcome) -> CategorySummary:
    records: list[DailyStress] = _records(outcome)
    summary = CategorySummary(
        "stress", "😰 **Stress**", NO_DATA, record_count=len(records)
    )
    if not records:
        return summary

    stress_times = [r.stress_high for r in records if r.stress_high is not None]
    if not stress_times:
        summary.text = NO_STRESS_TIMES
        return summary

    average_seconds = sum(stress_times) / len(stress_times)
    summary.average_stress_minutes = round_half_up(average_seconds / 60)
    summary.most_common_day_summary = most_common_day_summary(records)
    summary.text = (
        f"{summary.average_stress_minutes} avg minutes/day, "
        f"mostly {summary.most_common_day_summary or 'N/A'}"
    )
    return summary


def _insights(outcomes: SummaryOutcomes) -> list[str]:
    insights = []
    if any(not outcome.ok for outcome in outcomes.all()):
        insights.append(INSIGHT_PARTIAL_FAILURE)

    # Stress days are not counted towards coverage.
    total_records = sum(
        len(_records(outcome))
        for outcome in (outcomes.sleep, outcomes.activity, outcomes.readiness)
    )
    if total_records == 0:
        insights.append(INSIGHT_NO_DATA)
    elif total_records < GOOD_COVERAGE_MIN_RECORDS:
        insights.append(INSIGHT_LIMITED_DATA)
    else:
        insights.append(INSIGHT_GOOD_COVERAGE)
    return insights


def build_health_summary(
    outcomes: SummaryOutcomes, date_range: DateRange
) -> HealthSummary:
    return HealthSummary(
        date_range=date_range,
        categories=[
            summarize_sleep(outcomes.sleep),
            summarize_activity(outcomes.activity),
            summarize_stress(outcomes.stress),
            summarize_readiness(outcomes.readiness),
        ],
        insights=_insights(outcomes),
    )


def aggregate(outcomes: SummaryOutcomes, date_range: DateRange) -> str:
    return build_health_summary(outcomes, date_range).to_text()


async def _settle(
    category: str, fetch: Awaitable[list[Any]], timeout_seconds: float
) -> FetchOutcome:
    try:
        records = await asyncio.wait_for(fetch, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("%s fetch timed out after %.1fs", category, timeout_seconds)
        return FetchOutcome.failure(
            OuraAPIError.timed_out(category, f"no response after {timeout_seconds}s")
        )
    except OuraAPIError as exc:
        logger.warning("%s fetch failed (%s): %s", category, exc.kind.value, exc)
        return FetchOutcome.failure(exc)
    except Exception as exc:
        logger.exception("Unexpected error fetching %s data", category)
        return FetchOutcome.failure(
            OuraAPIError(
                OuraErrorKind.upstream_error,
                f"{category} fetch failed: {exc}",
                f"❌ **Error**: Unable to fetch {category} data.",
            )
        )
    return FetchOutcome.success(records)


async def fetch_summary_outcomes(
    client: OuraClient, date_range: DateRange, *, timeout_seconds: float = 8.0
) -> SummaryOutcomes:
    sleep, activity, stress, readiness = await asyncio.gather(
        _settle(
            "sleep",
            client.get_collection(SLEEP_ENDPOINT, DailySleep, date_range),
            timeout_seconds,
        ),
        _settle(
            "activity",
            client.get_collection(ACTIVITY_ENDPOINT, DailyActivity, date_range),
            timeout_seconds,
        ),
        _settle(
            "stress",
            client.get_collection(STRESS_ENDPOINT, DailyStress, date_range),
            timeout_seconds,
        ),
        _settle(
            "readiness",
            client.get_collection(READINESS_ENDPOINT, DailyReadiness, date_range),
            timeout_seconds,
        ),
    )
    return SummaryOutcomes(
        sleep=sleep, activity=activity, stress=stress, readiness=readiness
    )
