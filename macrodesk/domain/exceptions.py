"""
Domain exceptions.
Routes translate these into HTTP status codes.
"""


class MarketDataError(Exception):
    """Base error for market data failures"""


class ProviderError(MarketDataError):
    """Upstream provider failed or returned unusable data"""

    def __init__(self, provider: str, symbol: str, message: str):
        self.provider = provider
        self.symbol = symbol
        super().__init__(f"{provider}:{symbol}: {message}")


class QuoteBatchError(MarketDataError):
    """Batch aborted on the first failing instrument (fail-fast mode)"""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Quote batch aborted at {key}: {reason}")


class ProfileError(Exception):
    """Base error for profile storage"""


class InvalidProfileIdError(ProfileError):
    """Profile id contains characters outside [A-Za-z0-9_]"""


class ProfileNotFoundError(ProfileError):
    """No profile file exists for the id"""


class ProfileExistsError(ProfileError):
    """A profile with the same id already exists"""


class ProfileFileNotFoundError(ProfileError):
    """File index is out of range for the profile"""


class DocumentError(Exception):
    """Text extraction or PDF rendering failed"""
