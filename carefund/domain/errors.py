"""
Error taxonomy for the risk pipeline.

Only InvalidInput is meant to reach callers. Source errors are recovered by
the fetchers through fallback values, and AggregationFailure is recovered by
the aggregator's basic collection mode.
"""

from typing import Optional


class CareFundError(Exception):
    """Base class for all pipeline errors"""


class SourceError(CareFundError):
    """An external data source could not supply live data"""

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.status_code = status_code


class SourceUnavailable(SourceError):
    """Network error, timeout, 5xx, or 429 after retries were exhausted"""


class SourceRejected(SourceError):
    """4xx other than 429, missing API key, or unusable source configuration"""


class AggregationFailure(CareFundError):
    """Unexpected failure while composing live data from several sources"""

    def __init__(self, city: str, occupation: str, cause: BaseException):
        super().__init__(f"Aggregation failed for {city}/{occupation}: {cause!r}")
        self.city = city
        self.occupation = occupation
        self.cause = cause


class InvalidInput(CareFundError, ValueError):
    """Profile cannot be scored: unknown category key or malformed field"""
