"""
Market Data API Routes
Commodities, FX, indices and bond series with trailing changes
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List, Optional
import logging

from macrodesk.domain.exceptions import QuoteBatchError
from macrodesk.domain.models import InstrumentQuote, QuoteBatch, QuoteFailure
from macrodesk.domain.schemas.markets import (
    InstrumentInfo,
    InstrumentQuoteResponse,
    MacroBatchResponse,
    MacroItemResponse,
    QuoteBatchResponse,
    QuoteFailureResponse,
)
from macrodesk.domain.services.config_engine import InstrumentCatalog
from macrodesk.domain.services.quote_aggregator import QuoteAggregator, dashboard_category
from macrodesk.utils.time import to_utc_iso

logger = logging.getLogger(__name__)
router = APIRouter()

USD_EUR_KEY = "usd_eur"


def get_catalog(request: Request) -> InstrumentCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=500, detail="Configuration not loaded")
    return catalog


def get_aggregator(request: Request) -> QuoteAggregator:
    aggregator = getattr(request.app.state, "quote_aggregator", None)
    if aggregator is None:
        raise HTTPException(status_code=500, detail="Market data not initialized")
    return aggregator


def _optional_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _quote_payload(quote: InstrumentQuote) -> dict:
    instrument = quote.instrument
    payload = {
        "key": instrument.key,
        "name": instrument.name,
        "symbol": instrument.symbol,
        "value": float(quote.value),
        "type": instrument.type,
        "spotPrice": instrument.spot_price,
    }
    payload.update({k: _optional_float(v) for k, v in quote.changes.items()})
    return payload


def _failure_response(failure: QuoteFailure) -> QuoteFailureResponse:
    return QuoteFailureResponse(
        key=failure.instrument.key,
        name=failure.instrument.name,
        symbol=failure.instrument.symbol,
        reason=failure.reason,
    )


async def _run_batch(aggregator: QuoteAggregator, instruments: list) -> QuoteBatch:
    try:
        batch = await aggregator.aggregate(instruments)
    except QuoteBatchError as e:
        raise HTTPException(status_code=502, detail=f"Upstream data unavailable: {e.reason}")

    if instruments and not batch.items:
        reasons = "; ".join(f"{f.instrument.key}: {f.reason}" for f in batch.failures)
        logger.error(f"All {len(instruments)} instruments failed: {reasons}")
        raise HTTPException(status_code=502, detail=f"Upstream data unavailable: {reasons}")
    return batch


async def _group_response(group: str, catalog: InstrumentCatalog, aggregator: QuoteAggregator) -> QuoteBatchResponse:
    batch = await _run_batch(aggregator, catalog.get_group(group))
    return QuoteBatchResponse(
        items=[InstrumentQuoteResponse(**_quote_payload(q)) for q in batch.items],
        failures=[_failure_response(f) for f in batch.failures],
        asOf=to_utc_iso(batch.as_of),
    )


@router.get("/instruments", response_model=List[InstrumentInfo])
async def get_instruments(catalog: InstrumentCatalog = Depends(get_catalog)):
    """
    Configured instrument catalog
    """
    return [
        InstrumentInfo(
            key=i.key,
            name=i.name,
            symbol=i.symbol,
            provider=i.provider.value,
            type=i.type,
            spotPrice=i.spot_price,
            group=i.group,
        )
        for i in catalog.instruments
    ]


@router.get("/commodities", response_model=QuoteBatchResponse)
async def get_commodities(
    catalog: InstrumentCatalog = Depends(get_catalog),
    aggregator: QuoteAggregator = Depends(get_aggregator),
):
    """
    Metals, energy and agriculture futures with trailing changes
    """
    return await _group_response("commodities", catalog, aggregator)


@router.get("/bonds", response_model=QuoteBatchResponse)
async def get_bonds(
    catalog: InstrumentCatalog = Depends(get_catalog),
    aggregator: QuoteAggregator = Depends(get_aggregator),
):
    """
    Treasury yields, spreads and breakevens (FRED)
    """
    return await _group_response("bonds", catalog, aggregator)


@router.get("/markets", response_model=QuoteBatchResponse)
async def get_markets(
    catalog: InstrumentCatalog = Depends(get_catalog),
    aggregator: QuoteAggregator = Depends(get_aggregator),
):
    return await _group_response("markets", catalog, aggregator)


@router.get("/fx", response_model=QuoteBatchResponse)
async def get_fx(
    catalog: InstrumentCatalog = Depends(get_catalog),
    aggregator: QuoteAggregator = Depends(get_aggregator),
):
    return await _group_response("fx", catalog, aggregator)


@router.get("/usd-eur", response_model=InstrumentQuoteResponse)
async def get_usd_eur(
    catalog: InstrumentCatalog = Depends(get_catalog),
    aggregator: QuoteAggregator = Depends(get_aggregator),
):
    """
    Single USD/EUR quote
    """
    try:
        instrument = catalog.get(USD_EUR_KEY)
    except ValueError:
        raise HTTPException(status_code=404, detail="USD/EUR instrument not configured")

    batch = await _run_batch(aggregator, [instrument])
    return InstrumentQuoteResponse(**_quote_payload(batch.items[0]))


@router.get("/macro", response_model=MacroBatchResponse)
async def get_macro_snapshot(
    catalog: InstrumentCatalog = Depends(get_catalog),
    aggregator: QuoteAggregator = Depends(get_aggregator),
):
    """
    Every configured instrument, tagged with its dashboard category
    """
    batch = await _run_batch(aggregator, list(catalog.instruments))
    items = []
    for quote in batch.items:
        payload = _quote_payload(quote)
        payload["rawType"] = quote.instrument.type
        payload["category"] = dashboard_category(quote.instrument.type)
        items.append(MacroItemResponse(**payload))

    return MacroBatchResponse(
        items=items,
        failures=[_failure_response(f) for f in batch.failures],
        asOf=to_utc_iso(batch.as_of),
    )
