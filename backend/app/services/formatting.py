from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel

from ..models import (
    DailyActivity,
    DailyReadiness,
    DailySleep,
    DailyStress,
    PersonalInfo,
)

SLEEP_CONTRIBUTOR_LABELS = {
    "total_sleep": "Total Sleep",
    "efficiency": "Efficiency",
    "restfulness": "Restfulness",
    "rem_sleep": "REM Sleep",
    "deep_sleep": "Deep Sleep",
    "latency": "Sleep Latency",
    "timing": "Timing",
}

ACTIVITY_CONTRIBUTOR_LABELS = {
    "meet_daily_targets": "Daily Targets",
    "stay_active": "Stay Active",
    "move_every_hour": "Move Every Hour",
    "training_frequency": "Training Frequency",
    "training_volume": "Training Volume",
    "recovery_time": "Recovery Time",
}

READINESS_CONTRIBUTOR_LABELS = {
    "previous_night": "Previous Night",
    "sleep_balance": "Sleep Balance",
    "previous_day_activity": "Previous Day Activity",
    "activity_balance": "Activity Balance",
    "resting_heart_rate": "Resting HR",
    "hrv_balance": "HRV Balance",
    "recovery_index": "Recovery Index",
    "body_temperature": "Body Temperature",
}


def round_half_up(value: float) -> int:
    """Round .5 towards positive infinity rather than to the nearest even."""
    return math.floor(value + 0.5)


def format_count(value: int) -> str:
    return f"{value:,}"


def _score_text(score: Optional[int]) -> str:
    return f"{score}/100" if score else "N/A"


def _minutes_text(seconds: Optional[int]) -> str:
    return f"{round_half_up(seconds / 60)} minutes" if seconds else "N/A"


def _contributors_line(
    contributors: Optional[BaseModel], labels: dict[str, str]
) -> Optional[str]:
    if contributors is None:
        return None
    items = [
        f"{label}: {getattr(contributors, field)}"
        for field, label in labels.items()
        if getattr(contributors, field)
    ]
    if not items:
        return None
    return f"• **Contributors**: {', '.join(items)}"


def _no_data_message(emoji: str, category: str, causes: list[str]) -> str:
    lines = [
        f"{emoji} **No {category} data found** for the specified period.",
        "",
        "This might happen if:",
    ]
    lines.extend(f"• {cause}" for cause in causes)
    return "\n".join(lines)


def _render(title: str, blocks: list[list[str]]) -> str:
    body = "\n\n".join("\n".join(block) for block in blocks)
    return f"{title}\n\n{body}".strip()


def format_sleep(records: list[DailySleep]) -> str:
    if not records:
        return _no_data_message(
            "😴",
            "sleep",
            [
                "You haven't synced your Oura ring recently",
                "You haven't worn your ring during sleep",
                "The data is still being processed",
            ],
        )

    blocks = []
    for sleep in records:
        block = [f"📅 **{sleep.day}**", f"• **Score**: {_score_text(sleep.score)}"]
        contributors = _contributors_line(
            sleep.contributors, SLEEP_CONTRIBUTOR_LABELS
        )
        if contributors:
            block.append(contributors)
        blocks.append(block)
    return _render("😴 **Sleep Summary**", blocks)


def format_activity(records: list[DailyActivity]) -> str:
    if not records:
        return _no_data_message(
            "🏃",
            "activity",
            [
                "You haven't synced your Oura ring recently",
                "You haven't worn your ring during the day",
                "The data is still being processed",
            ],
        )

    blocks = []
    for activity in records:
        block = [
            f"📅 **{activity.day}**",
            f"• **Score**: {_score_text(activity.score)}",
            f"• **Steps**: {format_count(activity.steps or 0)}",
            f"• **Total Calories**: {activity.total_calories or 0} kcal",
            f"• **Active Calories**: {activity.active_calories or 0} kcal",
        ]
        contributors = _contributors_line(
            activity.contributors, ACTIVITY_CONTRIBUTOR_LABELS
        )
        if contributors:
            block.append(contributors)
        blocks.append(block)
    return _render("🏃 **Activity Summary**", blocks)


def format_stress(records: list[DailyStress]) -> str:
    if not records:
        return _no_data_message(
            "😰",
            "stress",
            [
                "You haven't synced your Oura ring recently",
                "Stress tracking is not available on your ring model",
                "The data is still being processed",
            ],
        )

    blocks = [
        [
            f"📅 **{stress.day}**",
            f"• **Day Summary**: {stress.day_summary or 'N/A'}",
            f"• **High Stress Time**: {_minutes_text(stress.stress_high)}",
            f"• **High Recovery Time**: {_minutes_text(stress.recovery_high)}",
        ]
        for stress in records
    ]
    return _render("😰 **Stress Summary**", blocks)


def format_readiness(records: list[DailyReadiness]) -> str:
    if not records:
        return _no_data_message(
            "⚡",
            "readiness",
            [
                "You haven't synced your Oura ring recently",
                "You need sleep data to generate readiness scores",
                "The data is still being processed",
            ],
        )

    blocks = []
    for readiness in records:
        deviation = readiness.temperature_deviation
        block = [
            f"📅 **{readiness.day}**",
            f"• **Score**: {_score_text(readiness.score)}",
            "• **Temperature Deviation**: "
            + (f"{deviation:.1f}°C" if deviation else "N/A"),
        ]
        contributors = _contributors_line(
            readiness.contributors, READINESS_CONTRIBUTOR_LABELS
        )
        if contributors:
            block.append(contributors)
        blocks.append(block)
    return _render("⚡ **Readiness Summary**", blocks)


def format_setup_status(info: PersonalInfo) -> str:
    lines = ["✅ **Oura API Setup Complete!**", "", f"👤 **Account ID**: {info.id}"]
    if info.email:
        lines.append(f"✉️ **Email**: {info.email}")
    if info.age:
        lines.append(f"🎂 **Age**: {info.age}")
    if info.biological_sex:
        lines.append(f"⚕️ **Biological Sex**: {info.biological_sex}")
    lines.extend(
        [
            "",
            "📊 **What you can do now:**",
            '• Ask me about your sleep data: "Show me my sleep from this week"',
            '• Check your activity: "How active was I yesterday?"',
            "• View stress levels: \"What's my stress like this month?\"",
            '• Get readiness scores: "Am I ready for today?"',
            '• See a full summary: "Give me my health summary for the past week"',
        ]
    )
    return "\n".join(lines) + "\n"
