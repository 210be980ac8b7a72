"""
History provider factory (settings-driven).
"""

from __future__ import annotations

from typing import Dict, Optional

from macrodesk.config import Settings, settings as default_settings
from macrodesk.domain.models import ProviderName
from macrodesk.infrastructure.market_data.fred_provider import FredProvider
from macrodesk.infrastructure.market_data.types import HistoryProvider
from macrodesk.infrastructure.market_data.yfinance_provider import YFinanceProvider


def _build_provider(name: ProviderName, app_settings: Settings) -> HistoryProvider:
    if name == ProviderName.FRED:
        return FredProvider(
            api_key=app_settings.FRED_API_KEY,
            api_base_url=app_settings.FRED_API_BASE_URL,
            timeout_seconds=app_settings.HTTP_TIMEOUT_SECONDS,
        )
    return YFinanceProvider()


def get_history_providers(
    app_settings: Optional[Settings] = None,
) -> Dict[ProviderName, HistoryProvider]:
    """One provider instance per upstream source."""
    app_settings = app_settings or default_settings
    return {name: _build_provider(name, app_settings) for name in ProviderName}
