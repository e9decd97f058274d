import asyncio

import httpx

from app.models import DailyActivity, DailyReadiness, DailySleep, DailyStress
from app.services.oura_client import OuraAPIError, OuraClient, OuraErrorKind
from app.services.periods import DateRange
from app.services.summary import (
    INSIGHT_GOOD_COVERAGE,
    INSIGHT_LIMITED_DATA,
    INSIGHT_NO_DATA,
    INSIGHT_PARTIAL_FAILURE,
    FetchOutcome,
    SummaryOutcomes,
    aggregate,
    build_health_summary,
    fetch_summary_outcomes,
    most_common_day_summary,
)

RANGE = DateRange("2026-03-06", "2026-03-12")


def _failure(kind=OuraErrorKind.upstream_error) -> FetchOutcome:
    return FetchOutcome.failure(OuraAPIError(kind, "boom", "user message"))


def _outcomes(sleep=None, activity=None, stress=None, readiness=None):
    return SummaryOutcomes(
        sleep=FetchOutcome.success(sleep or []),
        activity=FetchOutcome.success(activity or []),
        stress=FetchOutcome.success(stress or []),
        readiness=FetchOutcome.success(readiness or []),
    )


def test_sleep_average_ignores_missing_scores_but_counts_all_days():
    outcomes = _outcomes(
        sleep=[
            DailySleep(day="2026-03-10", score=80),
            DailySleep(day="2026-03-11", score=90),
            DailySleep(day="2026-03-12", score=None),
        ]
    )
    summary = build_health_summary(outcomes, RANGE)
    sleep = summary.category("sleep")
    assert sleep.average_score == 85
    assert sleep.record_count == 3
    assert sleep.line == "😴 **Sleep**: Average score 85/100 (3 days)"


def test_activity_without_scores_reports_steps_and_no_scores_variant():
    outcomes = _outcomes(
        activity=[
            DailyActivity(day="2026-03-11", steps=1000),
            DailyActivity(day="2026-03-12", steps=3000),
        ]
    )
    activity = build_health_summary(outcomes, RANGE).category("activity")
    assert activity.average_steps == 2000
    assert activity.average_score is None
    assert activity.text == "2,000 avg steps/day (no scores available)"


def test_activity_steps_average_uses_every_record():
    outcomes = _outcomes(
        activity=[
            DailyActivity(day="2026-03-10", score=70, steps=8001),
            DailyActivity(day="2026-03-11", score=None, steps=4000),
            DailyActivity(day="2026-03-12", score=75, steps=None),
        ]
    )
    activity = build_health_summary(outcomes, RANGE).category("activity")
    # 12001 / 3 = 4000.33; (70 + 75) / 2 = 72.5 rounds half up.
    assert activity.average_steps == 4000
    assert activity.average_score == 73
    assert activity.text == "Average score 73/100, 4,000 avg steps/day"


def test_records_without_scores_report_no_scores_calculated():
    outcomes = _outcomes(
        sleep=[DailySleep(day="2026-03-12")],
        readiness=[DailyReadiness(day="2026-03-12")],
    )
    summary = build_health_summary(outcomes, RANGE)
    assert summary.category("sleep").text == "Data available but no scores calculated"
    assert (
        summary.category("readiness").text
        == "Data available but no scores calculated"
    )


def test_stress_reports_minutes_and_most_common_label():
    outcomes = _outcomes(
        stress=[
            DailyStress(day="2026-03-10", stress_high=3600, day_summary="normal"),
            DailyStress(day="2026-03-11", stress_high=1800, day_summary="normal"),
            DailyStress(day="2026-03-12", stress_high=None, day_summary="stressful"),
        ]
    )
    stress = build_health_summary(outcomes, RANGE).category("stress")
    assert stress.average_stress_minutes == 45
    assert stress.most_common_day_summary == "normal"
    assert stress.text == "45 avg minutes/day, mostly normal"


def test_stress_without_durations_reports_no_stress_times():
    outcomes = _outcomes(stress=[DailyStress(day="2026-03-12", day_summary="normal")])
    stress = build_health_summary(outcomes, RANGE).category("stress")
    assert stress.text == "Data available but no stress times calculated"


def test_stress_without_labels_reports_not_available():
    outcomes = _outcomes(stress=[DailyStress(day="2026-03-12", stress_high=600)])
    assert (
        build_health_summary(outcomes, RANGE).category("stress").text
        == "10 avg minutes/day, mostly N/A"
    )


def test_most_common_day_summary_tie_resolves_to_last_tied_label():
    def records(labels):
        return [DailyStress(day="2026-03-12", day_summary=label) for label in labels]

    assert most_common_day_summary(records(["normal", "normal", "stressful"])) == (
        "normal"
    )
    assert most_common_day_summary(records(["normal", "stressful"])) == "stressful"
    assert most_common_day_summary(records(["stressful", "normal"])) == "normal"
    assert (
        most_common_day_summary(
            records(["restored", "stressful", None, "stressful", "restored"])
        )
        == "restored"
    )
    assert most_common_day_summary(records([None, None])) is None


def test_all_failures_still_produce_a_full_report():
    outcomes = SummaryOutcomes(
        sleep=_failure(OuraErrorKind.authentication_failed),
        activity=_failure(OuraErrorKind.authorization_failed),
        stress=_failure(OuraErrorKind.rate_limited),
        readiness=_failure(OuraErrorKind.timeout),
    )
    text = aggregate(outcomes, RANGE)
    assert text.count("No data available") == 4
    assert f"• {INSIGHT_PARTIAL_FAILURE}" in text
    assert f"• {INSIGHT_NO_DATA}" in text
    assert "📅 **Period**: 2026-03-06 to 2026-03-12" in text


def test_report_lines_keep_fixed_category_order():
    text = aggregate(_outcomes(), RANGE)
    positions = [
        text.index(heading)
        for heading in ("**Sleep**", "**Activity**", "**Stress**", "**Readiness**")
    ]
    assert positions == sorted(positions)


def test_coverage_boundary_at_three_records():
    two = _outcomes(
        sleep=[DailySleep(day="2026-03-12", score=80)],
        readiness=[DailyReadiness(day="2026-03-12", score=70)],
    )
    assert build_health_summary(two, RANGE).insights == [INSIGHT_LIMITED_DATA]

    three = _outcomes(
        sleep=[DailySleep(day="2026-03-12", score=80)],
        activity=[DailyActivity(day="2026-03-12", steps=500)],
        readiness=[DailyReadiness(day="2026-03-12", score=70)],
    )
    assert build_health_summary(three, RANGE).insights == [INSIGHT_GOOD_COVERAGE]


def test_stress_records_do_not_count_towards_coverage():
    outcomes = _outcomes(
        stress=[
            DailyStress(day=f"2026-03-1{i}", stress_high=600, day_summary="normal")
            for i in range(5)
        ]
    )
    assert build_health_summary(outcomes, RANGE).insights == [INSIGHT_NO_DATA]


def test_single_failure_adds_partial_failure_insight():
    outcomes = _outcomes(
        sleep=[DailySleep(day="2026-03-12", score=80)] * 3,
    )
    outcomes.stress = _failure()
    assert build_health_summary(outcomes, RANGE).insights == [
        INSIGHT_PARTIAL_FAILURE,
        INSIGHT_GOOD_COVERAGE,
    ]


def test_aggregate_is_deterministic():
    outcomes = _outcomes(
        sleep=[DailySleep(day="2026-03-12", score=81)],
        stress=[
            DailyStress(day="2026-03-11", stress_high=900, day_summary="restored"),
            DailyStress(day="2026-03-12", stress_high=300, day_summary="normal"),
        ],
    )
    assert aggregate(outcomes, RANGE) == aggregate(outcomes, RANGE)


def _run_fetch(handler, timeout_seconds=2.0):
    async def run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as http:
            client = OuraClient(
                http, token="token", api_base="https://api.ouraring.com"
            )
            return await fetch_summary_outcomes(
                client, RANGE, timeout_seconds=timeout_seconds
            )

    return asyncio.run(run())


def test_fetch_summary_outcomes_settles_each_category_independently():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["start_date"] == "2026-03-06"
        assert request.url.params["end_date"] == "2026-03-12"
        endpoint = request.url.path.rsplit("/", 1)[-1]
        if endpoint == "daily_stress":
            return httpx.Response(status_code=429, json={"detail": "slow down"})
        if endpoint == "daily_readiness":
            return httpx.Response(status_code=500, text="oops")
        if endpoint == "daily_sleep":
            return httpx.Response(
                status_code=200, json={"data": [{"day": "2026-03-12", "score": 77}]}
            )
        return httpx.Response(
            status_code=200, json={"data": [{"day": "2026-03-12", "steps": 4200}]}
        )

    outcomes = _run_fetch(handler)
    assert outcomes.sleep.ok
    assert outcomes.sleep.records == [DailySleep(day="2026-03-12", score=77)]
    assert outcomes.activity.ok
    assert outcomes.activity.records[0].steps == 4200
    assert outcomes.stress.error.kind == OuraErrorKind.rate_limited
    assert outcomes.readiness.error.kind == OuraErrorKind.upstream_error

    text = aggregate(outcomes, RANGE)
    assert "😴 **Sleep**: Average score 77/100 (1 days)" in text
    assert "😰 **Stress**: No data available" in text
    assert "⚡ **Readiness**: No data available" in text
    assert INSIGHT_PARTIAL_FAILURE in text
    assert INSIGHT_LIMITED_DATA in text


def test_fetch_summary_outcomes_times_out_slow_category():
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("daily_stress"):
            await asyncio.sleep(1)
        return httpx.Response(status_code=200, json={"data": []})

    outcomes = _run_fetch(handler, timeout_seconds=0.05)
    assert outcomes.sleep.ok
    assert outcomes.activity.ok
    assert outcomes.readiness.ok
    assert not outcomes.stress.ok
    assert outcomes.stress.error.kind == OuraErrorKind.timeout


def test_fetch_summary_outcomes_settles_unexpected_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("daily_activity"):
            raise RuntimeError("transport bug")
        return httpx.Response(status_code=200, json={"data": []})

    outcomes = _run_fetch(handler)
    assert outcomes.sleep.ok
    assert outcomes.stress.ok
    assert outcomes.activity.error.kind == OuraErrorKind.upstream_error


def test_fetch_summary_outcomes_keeps_stress_with_unrecognised_label():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("daily_stress"):
            return httpx.Response(
                status_code=200,
                json={
                    "data": [
                        {
                            "day": "2026-03-11",
                            "stress_high": 600,
                            "day_summary": "normal",
                        },
                        {
                            "day": "2026-03-12",
                            "stress_high": 1200,
                            "day_summary": "calm",
                        },
                    ]
                },
            )
        return httpx.Response(status_code=200, json={"data": []})

    outcomes = _run_fetch(handler)
    assert outcomes.stress.ok
    text = aggregate(outcomes, RANGE)
    assert "😰 **Stress**: 15 avg minutes/day, mostly calm" in text
    assert INSIGHT_PARTIAL_FAILURE not in text
