"""Asynchronous HTTP client with request/response interceptors.

This module defines the public entry point used by application code. Every
call goes through the same pipeline::

    request interceptors -> dispatch -> response interceptors

Each stage is a fulfilled/rejected handler pair. A value flows through the
fulfilled handlers; once a stage raises, the error skips ahead to the next
rejected handler, which may recover by returning a value or re-raise.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import requests

from .config import (
    LIBRARY_DEFAULTS,
    RequestConfig,
    TransportConfig,
    merge_config,
)
from .dispatcher import ResponseEnvelope, dispatch, resolve
from .errors import ConfigError
from .interceptors import InterceptorManager, InterceptorRecord

logger = logging.getLogger(__name__)

_process_config: RequestConfig | None = None


def setconfig(config: RequestConfig) -> None:
    """Record process-wide request defaults.

    Intended to be called once during startup, before the first client is
    created. Clients read it only when constructed.

    Raises:
        ConfigError: The process configuration was already set.
    """
    global _process_config
    if _process_config is not None:
        raise ConfigError("process configuration is already set")
    _process_config = config


def get_config() -> RequestConfig | None:
    """Return the process-wide defaults, if set."""
    return _process_config


def reset_config() -> None:
    """Forget the process-wide defaults. Meant for test isolation."""
    global _process_config
    _process_config = None


class Interceptors:
    """Request- and response-stage interceptor registries of one client."""

    def __init__(self) -> None:
        self.request: InterceptorManager[RequestConfig] = InterceptorManager(
            "request"
        )
        self.response: InterceptorManager[ResponseEnvelope] = (
            InterceptorManager("response")
        )


async def _run_chain(
    stages: Sequence[InterceptorRecord[Any]], value: Any
) -> Any:
    """Run ``stages`` sequentially with promise-style continuation.

    While no error is pending each stage's fulfilled handler receives the
    current value. After a failure, stages are skipped until one provides a
    rejected handler; its return value resumes the fulfilled path.
    """
    error: Exception | None = None
    for stage in stages:
        handler = stage.fulfilled if error is None else stage.rejected
        if handler is None:
            continue
        try:
            if error is None:
                value = await resolve(handler(value))
            else:
                value = await resolve(handler(error))
                error = None
        except Exception as exc:
            error = exc
    if error is not None:
        raise error
    return value


class HttpClient:
    """Core HTTP client (async).

    Owns the resolved default configuration, the two interceptor registries
    and a requests.Session used for every network call.
    """

    def __init__(
        self,
        config: RequestConfig | None = None,
        *,
        defaults: RequestConfig | None = None,
        transport: TransportConfig | None = None,
    ) -> None:
        """Create a new HttpClient.

        Args:
            config: Client-level overrides merged on top of the defaults.
            defaults: Explicit base configuration. When omitted the
                process-wide configuration from setconfig() is used.
            transport: Session-level settings (user agent, TLS, headers).
        """
        base = defaults if defaults is not None else get_config()
        resolved = merge_config(LIBRARY_DEFAULTS, base or RequestConfig())
        self.defaults = merge_config(resolved, config or RequestConfig())
        self.interceptors = Interceptors()

        self._transport = transport or TransportConfig()
        self._session = requests.Session()
        if self._transport.user_agent:
            self._session.headers["User-Agent"] = self._transport.user_agent
        self._session.headers.update(self._transport.default_headers)
        self._session.verify = self._transport.verify_tls

    async def _dispatch(self, config: Any) -> ResponseEnvelope:
        if not isinstance(config, RequestConfig):
            raise ConfigError(
                "request interceptors must return a RequestConfig, "
                f"got {type(config).__name__}"
            )
        return await dispatch(config, self._session)

    def _build_chain(self) -> list[InterceptorRecord[Any]]:
        """Snapshot the interceptors into an ordered stage list."""
        stages: list[InterceptorRecord[Any]] = []
        self.interceptors.request.for_each(stages.append)
        stages.append(InterceptorRecord(self._dispatch, None))
        self.interceptors.response.for_each(stages.append)
        return stages

    async def request(
        self, config: RequestConfig | None = None
    ) -> ResponseEnvelope:
        """Run one request through the interceptor pipeline.

        Args:
            config: Per-call configuration merged over the client defaults.

        Returns:
            The ResponseEnvelope produced by the last stage. A resolved
            envelope does not imply a successful HTTP status.

        Raises:
            Exception: The first error no rejected handler recovered from.
        """
        merged = merge_config(self.defaults, config or RequestConfig())
        stages = self._build_chain()
        logger.debug(
            "request %s %s through %d stages",
            merged.method,
            merged.url,
            len(stages),
        )
        return await _run_chain(stages, merged)

    async def get(self, url: str, **overrides: Any) -> ResponseEnvelope:
        """Perform an HTTP GET request through the pipeline."""
        return await self.request(RequestConfig(url=url, method="GET", **overrides))

    async def post(
        self, url: str, data: Any = None, **overrides: Any
    ) -> ResponseEnvelope:
        """Perform an HTTP POST request through the pipeline."""
        return await self.request(
            RequestConfig(url=url, method="POST", data=data, **overrides)
        )

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
