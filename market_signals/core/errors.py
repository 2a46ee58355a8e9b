"""
Error taxonomy for the Market Signal analytics engine.

Two failure kinds cross the analyzer boundary:

- ConfigError: an invalid weight table or threshold band table. Raised when
  configuration is loaded, never per call. Fatal: callers should fail fast
  rather than run with a renormalized or guessed table.
- NoDataError: an empty review batch handed to a classifier. Recoverable;
  it signals "nothing to analyze" rather than a bug.

Sparse streaming data is NOT an error: analyze_streaming_correlation returns a
zeroed result flagged with sufficientData=False instead of raising.

ConfigError intentionally does not inherit from ValueError. Pydantic v2 wraps
ValueError raised inside validators into a ValidationError; keeping the
taxonomy outside that hierarchy lets a bad table surface as ConfigError even
when it is detected while building a model.
"""


class AnalyticsError(Exception):
    """Base class for all errors raised by the analytics engine."""


class ConfigError(AnalyticsError):
    """Invalid scoring configuration (weights, bands, lexicons)."""


class NoDataError(AnalyticsError):
    """
    Raised when an analyzer receives an empty input batch.

    Attributes:
        analyzer: Name of the analyzer that received no data.
    """

    def __init__(self, analyzer: str, message: str = "") -> None:
        self.analyzer = analyzer
        super().__init__(message or f"{analyzer}: no reviews to analyze")
