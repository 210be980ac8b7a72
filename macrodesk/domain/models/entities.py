"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union


class ProviderName(str, Enum):
    """Upstream data source of an instrument"""
    YAHOO = "yahoo"
    FRED = "fred"


class FileType(str, Enum):
    """Document type of an uploaded profile file"""
    PDF = "PDF"
    DOCX = "DOCX"
    TXT = "TXT"
    OTHER = "OTHER"


@dataclass(frozen=True)
class HistoryPoint:
    """One observation of a series"""
    date: Union[date, datetime]
    value: Optional[Decimal]

    @property
    def day(self) -> date:
        """Calendar day of the observation, time of day dropped"""
        if isinstance(self.date, datetime):
            return self.date.date()
        return self.date


@dataclass(frozen=True)
class HorizonSpec:
    """Named lookback window"""
    name: str
    days: int

    def __post_init__(self):
        if not self.name:
            raise ValueError("Horizon name cannot be empty")
        if self.days < 0:
            raise ValueError(f"Horizon {self.name} must look back >= 0 days")


@dataclass(frozen=True)
class Instrument:
    """Instrument Definition - Immutable"""
    key: str
    name: str
    symbol: str
    provider: ProviderName
    type: str
    spot_price: bool
    group: str

    def __post_init__(self):
        if not self.key:
            raise ValueError("Instrument key cannot be empty")
        if not self.symbol:
            raise ValueError(f"Instrument {self.key} has no symbol")


@dataclass
class InstrumentQuote:
    """Live value of an instrument with its trailing changes"""
    instrument: Instrument
    value: Decimal
    changes: Dict[str, Optional[Decimal]]


@dataclass(frozen=True)
class QuoteFailure:
    """Instrument that could not be quoted in a batch"""
    instrument: Instrument
    reason: str


@dataclass
class QuoteBatch:
    """Result of one aggregation run"""
    as_of: datetime
    items: List[InstrumentQuote] = field(default_factory=list)
    failures: List[QuoteFailure] = field(default_factory=list)


@dataclass
class ProfileFile:
    """Text-bearing document attached to a profile"""
    title: str
    date: str
    type: FileType
    tags: List[str] = field(default_factory=list)
    content: str = ""

    def to_dict(self) -> Dict:
        return {
            "title": self.title,
            "date": self.date,
            "type": self.type.value,
            "tags": list(self.tags),
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ProfileFile":
        return cls(
            title=data.get("title", ""),
            date=data.get("date", ""),
            type=FileType(data.get("type", FileType.OTHER.value)),
            tags=list(data.get("tags") or []),
            content=data.get("content") or "",
        )


@dataclass
class Profile:
    """Named collection of documents, stored as one JSON file"""
    id: str
    name: str
    files: List[ProfileFile] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "files": [f.to_dict() for f in self.files],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Profile":
        return cls(
            id=data["id"],
            name=data["name"],
            files=[ProfileFile.from_dict(f) for f in data.get("files", [])],
        )
