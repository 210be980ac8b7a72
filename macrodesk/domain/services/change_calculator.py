"""
CHANGE CALCULATOR (CORE)
Trailing absolute/percent change over fixed lookback horizons

RESPONSIBILITIES:
- Pick the comparison point for every horizon
- Compute absolute and percent change
- Round to 2 decimals

RULES:
❌ No I/O
❌ No clock reads (reference instant is always passed in)
❌ No exceptions on well-formed input
✅ Pure calculation
✅ Deterministic output
✅ Every horizon always present in the output
"""

import math
from bisect import bisect_right
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple, Union

from macrodesk.domain.models import HistoryPoint
from macrodesk.domain.services.horizons import DEFAULT_HORIZONS, HorizonTable

Number = Union[Decimal, float, int]
ChangeResult = Dict[str, Optional[Decimal]]

_CENT = Decimal("0.01")


def change_keys(horizon_name: str) -> Tuple[str, str]:
    """Output keys for one horizon: absolute and percent."""
    return f"change{horizon_name}", f"change{horizon_name}Percent"


class ChangeCalculator:
    """
    Change Calculator
    Compares a latest value against history at every configured horizon
    """

    def __init__(self, horizons: HorizonTable = DEFAULT_HORIZONS):
        self.horizons = horizons

    @property
    def output_keys(self) -> List[str]:
        keys: List[str] = []
        for name in self.horizons.names:
            keys.extend(change_keys(name))
        return keys

    def compute_changes(
        self,
        latest: Optional[Number],
        history: Iterable[HistoryPoint],
        reference_instant: Union[datetime, date],
    ) -> ChangeResult:
        """
        Compute trailing changes for every horizon

        Args:
            latest: Current value (live quote or tail of history)
            history: Observations in any order
            reference_instant: Anchor for "now"; only its calendar day is used

        Returns:
            Mapping change<H> / change<H>Percent -> Decimal or None
        """
        reference_day = _as_day(reference_instant)
        latest_value = self._to_decimal(latest)

        points = sorted(history, key=lambda p: p.day)
        days = [p.day for p in points]

        result: ChangeResult = {}
        for horizon in self.horizons.resolve(reference_day):
            abs_key, pct_key = change_keys(horizon.name)
            result[abs_key] = None
            result[pct_key] = None

            if latest_value is None:
                continue

            target_day = reference_day - timedelta(days=horizon.days)
            point = self._find_on_or_before(points, days, target_day)
            if point is None:
                continue

            past_value = self._to_decimal(point.value)
            if past_value is None:
                continue

            delta = latest_value - past_value
            result[abs_key] = self._quantize(delta)
            if past_value != 0:
                result[pct_key] = self._quantize(delta / past_value * Decimal("100"))

        return result

    @staticmethod
    def _find_on_or_before(
        points: List[HistoryPoint],
        days: List[date],
        target_day: date,
    ) -> Optional[HistoryPoint]:
        """Last point whose calendar day is <= target_day (points sorted ascending)."""
        idx = bisect_right(days, target_day) - 1
        if idx < 0:
            return None
        return points[idx]

    @staticmethod
    def _to_decimal(value: Optional[Number]) -> Optional[Decimal]:
        if value is None:
            return None
        if isinstance(value, Decimal):
            return value if value.is_finite() else None
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None

    @staticmethod
    def _quantize(value: Decimal) -> Decimal:
        return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _as_day(instant: Union[datetime, date]) -> date:
    if isinstance(instant, datetime):
        return instant.date()
    return instant
