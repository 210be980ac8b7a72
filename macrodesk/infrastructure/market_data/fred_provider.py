"""
FRED History Provider
Macro series (Treasury yields, spreads, breakevens) from the St. Louis Fed API
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

import httpx

from macrodesk.domain.exceptions import ProviderError
from macrodesk.domain.models import HistoryPoint

logger = logging.getLogger(__name__)

# FRED marks missing observations (holidays) with "."
_MISSING = "."


class FredProvider:
    name = "fred"

    def __init__(
        self,
        api_key: Optional[str],
        api_base_url: str = "https://api.stlouisfed.org/fred",
        timeout_seconds: float = 30.0,
    ):
        self.api_key = (api_key or "").strip() or None
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def _request_json(self, series_id: str, params: Dict) -> dict:
        if not self.api_key:
            raise ProviderError(self.name, series_id, "FRED_API_KEY not configured")

        url = f"{self.api_base_url}/series/observations"
        query = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
            **params,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, series_id, f"request failed: {exc}") from exc

        if response.status_code != 200:
            logger.debug("FRED API %s: %s", response.status_code, response.text)
            raise ProviderError(self.name, series_id, f"HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.name, series_id, "malformed JSON response") from exc

    @staticmethod
    def _parse_observations(series_id: str, payload: dict) -> List[HistoryPoint]:
        observations = payload.get("observations")
        if observations is None:
            raise ProviderError("fred", series_id, "response has no observations")

        points: List[HistoryPoint] = []
        for obs in observations:
            raw = obs.get("value")
            if raw is None or raw == _MISSING:
                continue
            try:
                points.append(
                    HistoryPoint(
                        date=date.fromisoformat(obs["date"]),
                        value=Decimal(raw),
                    )
                )
            except (KeyError, ValueError, InvalidOperation):
                logger.warning("Skipping malformed FRED observation for %s: %s", series_id, obs)
        return points

    # ------------------------------------------------------------------
    # LIVE QUOTE
    # ------------------------------------------------------------------

    async def get_latest(self, series_id: str) -> Decimal:
        """
        Most recent non-missing observation
        """
        payload = await self._request_json(series_id, {"sort_order": "desc", "limit": 10})
        points = self._parse_observations(series_id, payload)
        if not points:
            raise ProviderError(self.name, series_id, "no recent observations")
        return max(points, key=lambda p: p.day).value

    # ------------------------------------------------------------------
    # HISTORICAL SERIES
    # ------------------------------------------------------------------

    async def get_history(self, series_id: str, start: date, end: date) -> List[HistoryPoint]:
        payload = await self._request_json(
            series_id,
            {
                "observation_start": start.isoformat(),
                "observation_end": end.isoformat(),
                "sort_order": "asc",
            },
        )
        points = self._parse_observations(series_id, payload)
        if not points:
            raise ProviderError(self.name, series_id, "empty history")
        return points
