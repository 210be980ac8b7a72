"""
YFinance History Provider
Async-safe Yahoo Finance integration for commodities, FX and indices
"""

import asyncio
import logging
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

import pandas as pd
import yfinance as yf

from macrodesk.domain.exceptions import ProviderError
from macrodesk.domain.models import HistoryPoint

logger = logging.getLogger(__name__)


class YFinanceProvider:
    """
    Yahoo Finance data provider
    Async-safe via thread offloading
    """

    name = "yahoo"

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _ticker(self, symbol: str) -> yf.Ticker:
        return yf.Ticker(symbol)

    async def _history(self, ticker: yf.Ticker, **kwargs) -> pd.DataFrame:
        """
        Async-safe wrapper around yfinance history()
        """
        return await asyncio.to_thread(ticker.history, **kwargs)

    @staticmethod
    def _fast_last_price(ticker: yf.Ticker) -> Optional[float]:
        info = ticker.fast_info or {}
        price = (
            info.get("last_price")
            or info.get("lastPrice")
            or info.get("regularMarketPrice")
        )
        if price is None:
            return None
        price = float(price)
        # fast_info reports NaN when the exchange has no live print
        return price if price and math.isfinite(price) else None

    @staticmethod
    def _to_decimal(value) -> Optional[Decimal]:
        if value is None or pd.isna(value):
            return None
        return Decimal(str(float(value)))

    # ------------------------------------------------------------------
    # LIVE QUOTE
    # ------------------------------------------------------------------

    async def get_latest(self, symbol: str) -> Decimal:
        """
        Latest traded price; falls back to the last daily close
        """
        ticker = self._ticker(symbol)
        try:
            price = await asyncio.to_thread(self._fast_last_price, ticker)
            if price:
                return Decimal(str(price))

            logger.warning("No live price for %s, using last close", symbol)
            hist = await self._history(ticker, period="5d", interval="1d", auto_adjust=False)
        except Exception as exc:
            raise ProviderError(self.name, symbol, f"quote request failed: {exc}") from exc

        if hist.empty or "Close" not in hist:
            raise ProviderError(self.name, symbol, "no price data")
        closes = hist["Close"].dropna()
        if closes.empty:
            raise ProviderError(self.name, symbol, "no price data")
        return Decimal(str(float(closes.iloc[-1])))

    # ------------------------------------------------------------------
    # HISTORICAL SERIES
    # ------------------------------------------------------------------

    async def get_history(self, symbol: str, start: date, end: date) -> List[HistoryPoint]:
        """
        Daily closes from start to end (both inclusive), oldest first
        """
        ticker = self._ticker(symbol)
        try:
            hist = await self._history(
                ticker,
                start=start,
                # yfinance treats end as exclusive
                end=end + timedelta(days=1),
                interval="1d",
                auto_adjust=False,
            )
        except Exception as exc:
            raise ProviderError(self.name, symbol, f"history request failed: {exc}") from exc

        if hist.empty or "Close" not in hist:
            raise ProviderError(self.name, symbol, "empty history")

        points = [
            HistoryPoint(date=ts.date(), value=self._to_decimal(close))
            for ts, close in hist["Close"].items()
        ]
        logger.debug("Yahoo %s: %d history points since %s", symbol, len(points), start)
        return points
