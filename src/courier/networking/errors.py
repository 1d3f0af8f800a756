"""Error taxonomy for the Courier networking layer.

Every failure raised by the pipeline itself derives from HttpClientError.
Errors raised by caller-supplied interceptors are never wrapped.
"""

from __future__ import annotations


class HttpClientError(Exception):
    """Base class for all client errors."""


class TransportError(HttpClientError):
    """The network call could not complete."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class RequestTimeoutError(TransportError):
    """The network call did not complete within the configured timeout."""


class DecodeError(HttpClientError):
    """A response body could not be decoded per its declared type."""

    def __init__(
        self,
        message: str,
        *,
        response_type: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.response_type = response_type
        self.cause = cause


class TransformError(HttpClientError):
    """A request or response transform function raised."""

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        index: int,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.index = index
        self.cause = cause


class ConfigError(HttpClientError, ValueError):
    """Invalid configuration value."""
