import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .clients import get_config
from .config import OuraConfig, load_config
from .logging_config import configure_logging
from .routers import agent, oura

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()
    configure_logging(config.log_level)
    if not config.configured:
        logger.warning(
            "OURA_API_TOKEN is not set; every Oura tool will answer with setup "
            "instructions until it is configured."
        )
    yield


app = FastAPI(
    title="Oura Chat API",
    version="0.1.0",
    description="Oura Ring health data rendered for a chat assistant",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(oura.router, prefix="/api/v1/oura", tags=["oura"])
app.include_router(agent.router, prefix="/api/v1/agent", tags=["agent"])


@app.get("/health")
def health_check(config: OuraConfig = Depends(get_config)):
    configured = config.configured
    return {
        "status": "ok",
        "service": "oura-chat",
        "oura": configured,
        "ready": configured,
    }
