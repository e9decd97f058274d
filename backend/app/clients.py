from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends

from .config import OuraConfig, load_config
from .services.oura_client import OuraClient


def get_config() -> OuraConfig:
    return load_config()


async def get_oura_client(
    config: OuraConfig = Depends(get_config),
) -> AsyncGenerator[OuraClient, None]:
    # One HTTP client per request; the token is handed to the Oura client here.
    async with httpx.AsyncClient(timeout=config.http_timeout_seconds) as http:
        yield OuraClient(
            http, token=config.oura_api_token, api_base=config.oura_api_base
        )
