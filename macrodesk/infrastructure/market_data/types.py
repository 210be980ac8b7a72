"""
History provider protocol for type hints.
"""

from __future__ import annotations

from typing import Protocol, List
from datetime import date
from decimal import Decimal

from macrodesk.domain.models import HistoryPoint


class HistoryProvider(Protocol):
    name: str

    async def get_latest(self, symbol: str) -> Decimal:
        ...

    async def get_history(self, symbol: str, start: date, end: date) -> List[HistoryPoint]:
        ...
