"""
FastAPI Main Application
Market dashboard data + profile document manager
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator
import logging

from macrodesk.config import settings
from macrodesk.core.logging import setup_logging
from macrodesk.domain.services.change_calculator import ChangeCalculator
from macrodesk.domain.services.config_engine import ConfigEngine
from macrodesk.domain.services.horizons import DEFAULT_HORIZONS
from macrodesk.domain.services.quote_aggregator import QuoteAggregator
from macrodesk.infrastructure.documents.pdf_compiler import DocumentCompiler
from macrodesk.infrastructure.market_data.provider_factory import get_history_providers
from macrodesk.infrastructure.storage.profile_repository import ProfileRepository

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _resolve(path_setting: str) -> Path:
    path = Path(path_setting)
    return path if path.is_absolute() else PROJECT_ROOT / path


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Loads configuration and wires services into app.state
    """
    logger.info("Starting macrodesk")

    # 1. Instrument catalog
    config_engine = ConfigEngine(_resolve(settings.INSTRUMENTS_CONFIG))
    config_engine.load_all()
    app.state.catalog = config_engine.catalog
    logger.info(
        f"Instrument catalog loaded: {len(config_engine.catalog.instruments)} instruments "
        f"in groups {', '.join(config_engine.catalog.groups)}"
    )

    # 2. Market data
    app.state.quote_aggregator = QuoteAggregator(
        providers=get_history_providers(settings),
        calculator=ChangeCalculator(DEFAULT_HORIZONS),
        lookback_days=settings.HISTORY_LOOKBACK_DAYS,
        fail_fast=settings.QUOTE_FAIL_FAST,
    )
    if not (settings.FRED_API_KEY or "").strip():
        logger.warning("FRED_API_KEY not set; bond series will report failures")

    # 3. Profile storage
    repository = ProfileRepository(_resolve(settings.PROFILES_DIR))
    repository.ensure_dir()
    app.state.profile_repository = repository
    app.state.document_compiler = DocumentCompiler()
    logger.info(f"Profiles stored in {repository.profiles_dir}")

    logger.info(f"API Server: http://{settings.API_HOST}:{settings.API_PORT} (docs at /docs)")

    yield

    logger.info("macrodesk shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="macrodesk",
    description="Macro dashboard data (commodities, FX, bonds) and profile document compiler",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Import and include routers
from macrodesk.api.routes import health, markets, profiles

app.include_router(health.router, tags=["Health"])
app.include_router(markets.router, prefix="/api", tags=["Market Data"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("macrodesk.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
