from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from ..clients import get_config, get_oura_client
from ..config import OuraConfig
from ..services.oura_client import SETUP_REQUIRED_MESSAGE, OuraClient
from ..services.periods import DEFAULT_PERIOD, resolve_date_range
from ..services.tools import (
    AgentTool,
    category_report,
    check_setup,
    health_summary,
)

router = APIRouter()


async def _category_response(
    tool: AgentTool,
    client: OuraClient,
    period: str,
    start_date: Optional[date],
    end_date: Optional[date],
) -> dict:
    date_range = resolve_date_range(period, start_date, end_date)
    if not client.configured:
        text = SETUP_REQUIRED_MESSAGE
    else:
        text = await category_report(tool, client, date_range)
    return {
        "start_date": date_range.start_date,
        "end_date": date_range.end_date,
        "summary_text": text,
    }


@router.get("/sleep")
async def get_sleep(
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client: OuraClient = Depends(get_oura_client),
):
    return await _category_response(
        AgentTool.get_sleep, client, period, start_date, end_date
    )


@router.get("/activity")
async def get_activity(
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client: OuraClient = Depends(get_oura_client),
):
    return await _category_response(
        AgentTool.get_activity, client, period, start_date, end_date
    )


@router.get("/stress")
async def get_stress(
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client: OuraClient = Depends(get_oura_client),
):
    return await _category_response(
        AgentTool.get_stress, client, period, start_date, end_date
    )


@router.get("/readiness")
async def get_readiness(
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client: OuraClient = Depends(get_oura_client),
):
    return await _category_response(
        AgentTool.get_readiness, client, period, start_date, end_date
    )


@router.get("/summary")
async def get_summary(
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client: OuraClient = Depends(get_oura_client),
    config: OuraConfig = Depends(get_config),
):
    date_range = resolve_date_range(period, start_date, end_date)
    if not client.configured:
        return {
            "start_date": date_range.start_date,
            "end_date": date_range.end_date,
            "summary_text": SETUP_REQUIRED_MESSAGE,
            "categories": {},
            "insights": [],
        }

    summary = await health_summary(
        client, date_range, timeout_seconds=config.fetch_timeout_seconds
    )
    return {
        "start_date": date_range.start_date,
        "end_date": date_range.end_date,
        "summary_text": summary.to_text(),
        "categories": {
            category.name: category.to_dict() for category in summary.categories
        },
        "insights": summary.insights,
    }


@router.get("/setup")
async def get_setup(client: OuraClient = Depends(get_oura_client)):
    return {
        "configured": client.configured,
        "summary_text": await check_setup(client),
    }
