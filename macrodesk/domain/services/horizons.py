"""
Lookback horizon table.

One immutable table is shared by every caller of the change calculator.
YTD is not a fixed offset: it is resolved against the reference day on
every call.
"""

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from macrodesk.domain.models import HorizonSpec

YTD = "YTD"


def ytd_days(reference_day: date) -> int:
    """Whole days elapsed since January 1st of the reference day's year."""
    return (reference_day - date(reference_day.year, 1, 1)).days


@dataclass(frozen=True)
class HorizonTable:
    """Fixed horizons plus the dynamic year-to-date window"""
    fixed: Tuple[HorizonSpec, ...]
    include_ytd: bool = True

    def __post_init__(self):
        names = [h.name for h in self.fixed]
        if len(names) != len(set(names)):
            raise ValueError("Duplicate horizon names in table")
        if self.include_ytd and YTD in names:
            raise ValueError("YTD is computed dynamically and cannot be a fixed horizon")

    @property
    def names(self) -> Tuple[str, ...]:
        names = tuple(h.name for h in self.fixed)
        return names + (YTD,) if self.include_ytd else names

    def resolve(self, reference_day: date) -> Tuple[HorizonSpec, ...]:
        """Concrete horizons for one evaluation day."""
        if not self.include_ytd:
            return self.fixed
        return self.fixed + (HorizonSpec(YTD, ytd_days(reference_day)),)


DEFAULT_HORIZONS = HorizonTable(
    fixed=(
        HorizonSpec("1D", 1),
        HorizonSpec("3D", 3),
        HorizonSpec("1W", 7),
        HorizonSpec("1M", 30),
        HorizonSpec("1Y", 365),
        HorizonSpec("5Y", 1825),
    )
)
