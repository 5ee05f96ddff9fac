class PerformanceError(Exception):
    """Base class for request-level failures of the performance pipeline."""


class ValidationError(PerformanceError):
    """Malformed request parameter (date, period keyword, portfolio id)."""


class AuthorizationError(PerformanceError):
    """Requested portfolio is unknown or owned by someone else."""


class RequestCancelled(PerformanceError):
    """The request ran past its time budget; partial work was discarded."""


class PriceDataUnavailable(Exception):
    # Raised per symbol by the provider chain and absorbed by the price builder.
    def __init__(self, symbol: str, reason: str = "no_data"):
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason
