#!/usr/bin/env python3

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import OuraConfig, load_config
from app.logging_config import configure_logging
from app.services.oura_client import OuraClient
from app.services.periods import DEFAULT_PERIOD, PERIOD_CHOICES
from app.services.tools import AgentTool, run_tool

logger = logging.getLogger("oura_report")


@dataclass
class ReportRequest:
    tool: AgentTool
    period: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print Oura Ring health data as chat-ready markdown."
    )
    parser.add_argument(
        "--tool",
        choices=[tool.value for tool in AgentTool],
        default=AgentTool.get_health_summary.value,
        help="Which report to print. Defaults to the composite health summary.",
    )
    parser.add_argument(
        "--period",
        default=DEFAULT_PERIOD,
        help=f"Relative window: {', '.join(PERIOD_CHOICES)}. Defaults to week.",
    )
    parser.add_argument("--start-date", help="Start date (YYYY-MM-DD).")
    parser.add_argument("--end-date", help="End date (YYYY-MM-DD).")
    return parser.parse_args(argv)


def resolve_request(args: argparse.Namespace) -> ReportRequest:
    if bool(args.start_date) != bool(args.end_date):
        raise ValueError(
            "Both --start-date and --end-date must be provided together."
        )
    return ReportRequest(
        tool=AgentTool(args.tool),
        period=args.period,
        start_date=args.start_date,
        end_date=args.end_date,
    )


async def run_report(
    request: ReportRequest, config: OuraConfig, *, http: httpx.AsyncClient
) -> str:
    client = OuraClient(
        http, token=config.oura_api_token, api_base=config.oura_api_base
    )
    return await run_tool(
        request.tool,
        client,
        period=request.period,
        start_date=request.start_date,
        end_date=request.end_date,
        fetch_timeout_seconds=config.fetch_timeout_seconds,
    )


async def _main(request: ReportRequest, config: OuraConfig) -> str:
    async with httpx.AsyncClient(timeout=config.http_timeout_seconds) as http:
        return await run_report(request, config, http=http)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args = parse_args(argv)
        config = load_config()
        configure_logging(config.log_level)
        request = resolve_request(args)
        print(asyncio.run(_main(request, config)))
        return 0
    except (ValueError, httpx.HTTPError) as exc:
        logger.error("oura_report failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
