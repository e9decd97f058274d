from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Optional

from ..models import DailyActivity, DailyReadiness, DailySleep, DailyStress
from .formatting import (
    format_activity,
    format_readiness,
    format_setup_status,
    format_sleep,
    format_stress,
)
from .oura_client import (
    ACTIVITY_ENDPOINT,
    READINESS_ENDPOINT,
    SETUP_REQUIRED_MESSAGE,
    SLEEP_ENDPOINT,
    STRESS_ENDPOINT,
    TOKEN_URL,
    OuraAPIError,
    OuraClient,
)
from .periods import DEFAULT_PERIOD, DateRange, resolve_date_range
from .summary import (
    HealthSummary,
    build_health_summary,
    fetch_summary_outcomes,
)

logger = logging.getLogger(__name__)

SETUP_CHECK_MISSING_TOKEN = (
    "🔑 **Setup Required**: No Oura API token found.\n\n"
    "**Next steps:**\n"
    f"1. Get your personal access token from [Oura Cloud]({TOKEN_URL})\n"
    "2. Set it as the `OURA_API_TOKEN` environment variable\n"
    "3. Restart the application\n\n"
    "*This is required to access your Oura Ring data.*"
)

SETUP_CHECK_FAILED = (
    "❌ **Setup Check Failed**: Unable to verify your Oura API connection.\n\n"
    "This might be a temporary issue. Please try again in a few moments.\n\n"
    "If the problem persists, check your API token and internet connection."
)


class AgentTool(str, Enum):
    get_sleep = "get_sleep"
    get_activity = "get_activity"
    get_stress = "get_stress"
    get_readiness = "get_readiness"
    get_health_summary = "get_health_summary"
    check_setup = "check_setup"


@dataclass(frozen=True)
class CategoryTool:
    category: str
    endpoint: str
    model: type
    formatter: Callable[[list[Any]], str]
    description: str


CATEGORY_TOOLS = {
    AgentTool.get_sleep: CategoryTool(
        "sleep",
        SLEEP_ENDPOINT,
        DailySleep,
        format_sleep,
        "Get sleep data from your Oura ring for a specified time period",
    ),
    AgentTool.get_activity: CategoryTool(
        "activity",
        ACTIVITY_ENDPOINT,
        DailyActivity,
        format_activity,
        "Get daily activity data from your Oura ring including steps, calories, "
        "and activity score",
    ),
    AgentTool.get_stress: CategoryTool(
        "stress",
        STRESS_ENDPOINT,
        DailyStress,
        format_stress,
        "Get daily stress levels from your Oura ring showing stress and recovery "
        "periods",
    ),
    AgentTool.get_readiness: CategoryTool(
        "readiness",
        READINESS_ENDPOINT,
        DailyReadiness,
        format_readiness,
        "Get daily readiness scores from your Oura ring showing how ready you "
        "are for the day",
    ),
}

TOOL_DESCRIPTIONS = {
    **{tool: spec.description for tool, spec in CATEGORY_TOOLS.items()},
    AgentTool.get_health_summary: (
        "Get a comprehensive health summary including sleep, activity, stress, "
        "and readiness data"
    ),
    AgentTool.check_setup: (
        "Check if the Oura API is properly configured and can connect to your "
        "account"
    ),
}

PERIOD_PARAMETERS = {
    "type": "object",
    "properties": {
        "period": {
            "type": "string",
            "description": "Time period: 'today', 'yesterday', 'week', 'month', "
            "or custom period",
        },
        "start_date": {
            "type": "string",
            "format": "date",
            "description": "Start date in YYYY-MM-DD format (optional if period "
            "is specified)",
        },
        "end_date": {
            "type": "string",
            "format": "date",
            "description": "End date in YYYY-MM-DD format (optional if period "
            "is specified)",
        },
    },
    "required": ["period"],
}


def tool_catalogue() -> list[dict]:
    return [
        {
            "name": tool.value,
            "description": TOOL_DESCRIPTIONS[tool],
            "parameters": (
                {"type": "object", "properties": {}}
                if tool == AgentTool.check_setup
                else PERIOD_PARAMETERS
            ),
        }
        for tool in AgentTool
    ]


async def category_report(
    tool: AgentTool, client: OuraClient, date_range: DateRange
) -> str:
    spec = CATEGORY_TOOLS[tool]
    try:
        records = await client.get_collection(spec.endpoint, spec.model, date_range)
    except OuraAPIError as exc:
        logger.warning(
            "%s request failed (%s): %s", spec.category, exc.kind.value, exc
        )
        return exc.user_message
    except Exception:
        logger.exception("Error fetching %s data", spec.category)
        return (
            f"❌ **Error**: Unable to fetch {spec.category} data. "
            "Please try again later."
        )
    return spec.formatter(records)


async def health_summary(
    client: OuraClient, date_range: DateRange, *, timeout_seconds: float
) -> HealthSummary:
    outcomes = await fetch_summary_outcomes(
        client, date_range, timeout_seconds=timeout_seconds
    )
    return build_health_summary(outcomes, date_range)


async def check_setup(client: OuraClient) -> str:
    if not client.configured:
        return SETUP_CHECK_MISSING_TOKEN
    try:
        info = await client.get_personal_info()
    except OuraAPIError as exc:
        logger.warning("Setup check failed (%s): %s", exc.kind.value, exc)
        return exc.user_message
    except Exception:
        logger.exception("Error checking Oura setup")
        return SETUP_CHECK_FAILED
    return format_setup_status(info)


async def run_tool(
    tool: AgentTool,
    client: OuraClient,
    *,
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date | str] = None,
    end_date: Optional[date | str] = None,
    fetch_timeout_seconds: float = 8.0,
) -> str:
    if tool == AgentTool.check_setup:
        return await check_setup(client)
    if not client.configured:
        return SETUP_REQUIRED_MESSAGE

    date_range = resolve_date_range(period, start_date, end_date)
    if tool == AgentTool.get_health_summary:
        summary = await health_summary(
            client, date_range, timeout_seconds=fetch_timeout_seconds
        )
        return summary.to_text()
    return await category_report(tool, client, date_range)
