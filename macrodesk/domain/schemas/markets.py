from pydantic import BaseModel, Field
from typing import List, Optional


class InstrumentInfo(BaseModel):
    key: str
    name: str
    symbol: str
    provider: str
    type: str
    spotPrice: bool
    group: str


class InstrumentQuoteResponse(BaseModel):
    key: str
    name: str
    symbol: str
    value: float
    type: str
    spotPrice: bool
    change1D: Optional[float] = None
    change1DPercent: Optional[float] = None
    change3D: Optional[float] = None
    change3DPercent: Optional[float] = None
    change1W: Optional[float] = None
    change1WPercent: Optional[float] = None
    change1M: Optional[float] = None
    change1MPercent: Optional[float] = None
    change1Y: Optional[float] = None
    change1YPercent: Optional[float] = None
    change5Y: Optional[float] = None
    change5YPercent: Optional[float] = None
    changeYTD: Optional[float] = None
    changeYTDPercent: Optional[float] = None


class MacroItemResponse(InstrumentQuoteResponse):
    rawType: str
    category: str  # dashboard tab: Commodities, Markets, Bonds & Rates, ...


class QuoteFailureResponse(BaseModel):
    key: str
    name: str
    symbol: str
    reason: str


class QuoteBatchResponse(BaseModel):
    items: List[InstrumentQuoteResponse]
    failures: List[QuoteFailureResponse] = Field(default_factory=list)
    asOf: str


class MacroBatchResponse(BaseModel):
    items: List[MacroItemResponse]
    failures: List[QuoteFailureResponse] = Field(default_factory=list)
    asOf: str
