"""Exception hierarchy shared by the pipeline stages."""

from __future__ import annotations


class AutoblogError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(AutoblogError):
    """A required binding or credential is missing."""


class FeedFetchError(AutoblogError):
    """The feed document could not be retrieved."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FeedItemError(AutoblogError):
    """A single feed item could not be parsed."""


class ProviderResponseError(AutoblogError):
    """The generative backend returned an unexpected response shape."""


class SummaryError(AutoblogError):
    """Summarization failed after exhausting all attempts."""

    def __init__(self, message: str, attempts: int, last_error: Exception | None = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class LedgerError(AutoblogError):
    """A ledger write or delete failed."""


class PublishError(AutoblogError):
    """The content store rejected or failed a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
