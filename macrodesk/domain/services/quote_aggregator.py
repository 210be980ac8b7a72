"""
QUOTE AGGREGATOR
Fan out quote + history fetches per instrument and attach trailing changes

RESPONSIBILITIES:
- Fetch live value and daily history for every instrument concurrently
- Read the clock once per batch and pass it to the calculator
- Report per-instrument failures (best-effort) or abort (fail-fast)

RULES:
❌ No retries
❌ No caching
✅ One reference instant per batch
"""

import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, Optional, Sequence

from macrodesk.domain.exceptions import ProviderError, QuoteBatchError
from macrodesk.domain.models import (
    Instrument,
    InstrumentQuote,
    ProviderName,
    QuoteBatch,
    QuoteFailure,
)
from macrodesk.domain.services.change_calculator import ChangeCalculator
from macrodesk.infrastructure.market_data.types import HistoryProvider
from macrodesk.utils.time import utc_now

logger = logging.getLogger(__name__)

# 5Y horizon plus a couple of weeks for weekends/holidays before the target day
DEFAULT_LOOKBACK_DAYS = 1840

_VALUE_PRECISION = Decimal("0.0001")

_DASHBOARD_CATEGORIES = {
    "Metals": "Commodities",
    "Energy": "Commodities",
    "Agriculture": "Commodities",
    "Indices": "Markets",
    "Real Estate": "Markets",
    "Bond": "Bonds & Rates",
    "Rates": "Bonds & Rates",
    "Inflation": "Bonds & Rates",
}


def dashboard_category(instrument_type: str) -> str:
    """Dashboard tab for an asset-class type; unknown types map to themselves."""
    return _DASHBOARD_CATEGORIES.get(instrument_type, instrument_type)


class QuoteAggregator:
    """
    Quote Aggregator
    Thin orchestration over history providers and the change calculator
    """

    def __init__(
        self,
        providers: Dict[ProviderName, HistoryProvider],
        calculator: Optional[ChangeCalculator] = None,
        clock: Callable[[], datetime] = utc_now,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        fail_fast: bool = False,
    ):
        self.providers = providers
        self.calculator = calculator or ChangeCalculator()
        self.clock = clock
        self.lookback_days = lookback_days
        self.fail_fast = fail_fast

    async def aggregate(self, instruments: Sequence[Instrument]) -> QuoteBatch:
        """
        Quote every instrument in one batch

        Returns:
            QuoteBatch with successes in input order and any failures
        Raises:
            QuoteBatchError: in fail-fast mode, on the first failing instrument
        """
        reference_instant = self.clock()
        batch = QuoteBatch(as_of=reference_instant)
        if not instruments:
            return batch

        if self.fail_fast:
            quotes = await asyncio.gather(
                *(self._quote_or_abort(i, reference_instant) for i in instruments)
            )
            batch.items.extend(quotes)
            return batch

        results = await asyncio.gather(
            *(self._quote(i, reference_instant) for i in instruments),
            return_exceptions=True,
        )
        for instrument, result in zip(instruments, results):
            if isinstance(result, InstrumentQuote):
                batch.items.append(result)
            elif isinstance(result, Exception):
                logger.warning("Quote failed for %s (%s): %s", instrument.key, instrument.symbol, result)
                batch.failures.append(QuoteFailure(instrument=instrument, reason=str(result)))
            else:
                raise result

        logger.info(
            "Quoted %d/%d instruments (%d failed)",
            len(batch.items), len(instruments), len(batch.failures),
        )
        return batch

    async def _quote(self, instrument: Instrument, reference_instant: datetime) -> InstrumentQuote:
        provider = self.providers.get(instrument.provider)
        if provider is None:
            raise ProviderError(instrument.provider.value, instrument.symbol, "no provider configured")

        reference_day = reference_instant.date()
        start = reference_day - timedelta(days=self.lookback_days)
        latest, history = await asyncio.gather(
            provider.get_latest(instrument.symbol),
            provider.get_history(instrument.symbol, start, reference_day),
        )
        latest_value = Decimal(str(latest)) if latest is not None else None
        if latest_value is None or not latest_value.is_finite():
            raise ProviderError(instrument.provider.value, instrument.symbol, f"no usable live value ({latest})")

        changes = self.calculator.compute_changes(latest_value, history, reference_instant)
        return InstrumentQuote(
            instrument=instrument,
            value=latest_value.quantize(_VALUE_PRECISION),
            changes=changes,
        )

    async def _quote_or_abort(self, instrument: Instrument, reference_instant: datetime) -> InstrumentQuote:
        try:
            return await self._quote(instrument, reference_instant)
        except Exception as exc:
            logger.error("Aborting quote batch at %s: %s", instrument.key, exc)
            raise QuoteBatchError(instrument.key, str(exc)) from exc
