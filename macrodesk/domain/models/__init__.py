"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    FileType,
    ProviderName,

    # Entities
    HistoryPoint,
    HorizonSpec,
    Instrument,
    InstrumentQuote,
    Profile,
    ProfileFile,
    QuoteBatch,
    QuoteFailure,
)

__all__ = [
    # Enums
    "FileType",
    "ProviderName",

    # Entities
    "HistoryPoint",
    "HorizonSpec",
    "Instrument",
    "InstrumentQuote",
    "Profile",
    "ProfileFile",
    "QuoteBatch",
    "QuoteFailure",
]
