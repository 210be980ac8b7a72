from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from macrodesk.api.routes import health, markets, profiles
from macrodesk.domain.exceptions import ProviderError
from macrodesk.domain.models import HistoryPoint, ProviderName
from macrodesk.domain.services.config_engine import ConfigEngine
from macrodesk.domain.services.quote_aggregator import QuoteAggregator
from macrodesk.infrastructure.documents.pdf_compiler import DocumentCompiler
from macrodesk.infrastructure.storage.profile_repository import ProfileRepository

PROJECT_ROOT = Path(__file__).resolve().parents[1]
REFERENCE_INSTANT = datetime(2024, 6, 15, 14, 30, tzinfo=timezone.utc)
FAKE_PDF = b"%PDF-1.4\n% fake\n"


def days_ago(n: int, reference: datetime = REFERENCE_INSTANT) -> date:
    return reference.date() - timedelta(days=n)


def series(*pairs: Tuple[int, Optional[float]]) -> List[HistoryPoint]:
    """History from (days_ago, value) pairs."""
    return [
        HistoryPoint(date=days_ago(n), value=None if v is None else Decimal(str(v)))
        for n, v in pairs
    ]


class FakeProvider:
    """In-memory history provider keyed by symbol."""

    def __init__(
        self,
        name: str,
        data: Optional[Dict[str, Tuple[float, List[HistoryPoint]]]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        default: Optional[Tuple[float, List[HistoryPoint]]] = None,
    ):
        self.name = name
        self.data = data or {}
        self.failures = failures or {}
        self.default = default
        self.history_calls: List[Tuple[str, date, date]] = []

    def _lookup(self, symbol: str) -> Tuple[float, List[HistoryPoint]]:
        if symbol in self.failures:
            raise self.failures[symbol]
        if symbol in self.data:
            return self.data[symbol]
        if self.default is not None:
            return self.default
        raise ProviderError(self.name, symbol, "unknown symbol")

    async def get_latest(self, symbol: str) -> Decimal:
        latest, _ = self._lookup(symbol)
        return Decimal(str(latest))

    async def get_history(self, symbol: str, start: date, end: date) -> List[HistoryPoint]:
        self.history_calls.append((symbol, start, end))
        _, history = self._lookup(symbol)
        return list(history)


class FakePdfCompiler(DocumentCompiler):
    @staticmethod
    def _html_to_pdf(document_html: str) -> bytes:
        return FAKE_PDF


@pytest.fixture
def reference_instant() -> datetime:
    return REFERENCE_INSTANT


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def make_series():
    return series


@pytest.fixture
def catalog():
    engine = ConfigEngine(PROJECT_ROOT / "config" / "instruments.yml")
    engine.load_all()
    return engine.catalog


@pytest.fixture
def yahoo_provider() -> FakeProvider:
    return FakeProvider(
        "yahoo",
        data={"GC=F": (110.0, series((40, 100.0), (2, 108.0)))},
        default=(50.0, series((400, 40.0), (10, 48.0), (1, 49.0))),
    )


@pytest.fixture
def fred_provider() -> FakeProvider:
    return FakeProvider(
        "fred",
        default=(4.25, series((35, 4.0), (8, 4.2), (1, 4.3))),
    )


@pytest.fixture
def providers(yahoo_provider, fred_provider):
    return {ProviderName.YAHOO: yahoo_provider, ProviderName.FRED: fred_provider}


@pytest.fixture
def aggregator(providers) -> QuoteAggregator:
    return QuoteAggregator(providers=providers, clock=lambda: REFERENCE_INSTANT)


@pytest.fixture
def profile_repository(tmp_path) -> ProfileRepository:
    repository = ProfileRepository(tmp_path / "profiles")
    repository.ensure_dir()
    return repository


@pytest.fixture
def app(catalog, aggregator, profile_repository) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(markets.router, prefix="/api", tags=["Market Data"])
    app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])

    app.state.catalog = catalog
    app.state.quote_aggregator = aggregator
    app.state.profile_repository = profile_repository
    app.state.document_compiler = FakePdfCompiler()
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
