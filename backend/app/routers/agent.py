from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from ..clients import get_config, get_oura_client
from ..config import OuraConfig
from ..services.oura_client import OuraClient
from ..services.periods import DEFAULT_PERIOD
from ..services.tools import AgentTool, run_tool, tool_catalogue

router = APIRouter()


@router.get("/tools")
def list_tools():
    return {"tools": tool_catalogue()}


@router.get("/query")
async def query(
    tool: AgentTool,
    period: str = DEFAULT_PERIOD,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    client: OuraClient = Depends(get_oura_client),
    config: OuraConfig = Depends(get_config),
):
    text = await run_tool(
        tool,
        client,
        period=period,
        start_date=start_date,
        end_date=end_date,
        fetch_timeout_seconds=config.fetch_timeout_seconds,
    )
    return {"tool": tool.value, "text": text}
