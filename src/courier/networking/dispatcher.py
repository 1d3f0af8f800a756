"""Single HTTP exchange at the center of the interceptor pipeline.

dispatch() runs the request transforms, performs one network call through a
requests.Session, decodes the body per the configured response type and runs
the response transforms. It never looks at the HTTP status: a 404 with a
well-formed body resolves like a 200 and callers inspect ``status``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import requests
from requests.structures import CaseInsensitiveDict

from .config import RequestConfig, Transform
from .errors import DecodeError, RequestTimeoutError, TransformError, TransportError
from .url import build_url, join_base_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseEnvelope:
    """Normalized result of one completed exchange."""

    config: RequestConfig
    request: requests.PreparedRequest
    response: requests.Response
    data: Any
    status: int
    status_text: str
    headers: Mapping[str, str]


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, else return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def _apply_transforms(
    stage: str,
    transforms: Sequence[Transform] | None,
    value: Any,
    headers: Mapping[str, Any],
    *,
    method: str,
    url: str,
) -> Any:
    """Reduce ``value`` through ``transforms`` left to right.

    Transforms may be coroutine functions; their results are awaited
    before the next transform runs.
    """
    for index, transform in enumerate(transforms or ()):
        try:
            value = await resolve(transform(value, headers))
        except Exception as exc:
            logger.warning(
                "%s %s: %s transform #%d failed: %s",
                method,
                url,
                stage,
                index,
                type(exc).__name__,
            )
            raise TransformError(
                f"{stage} transform #{index} failed: {exc}",
                stage=stage,
                index=index,
                cause=exc,
            ) from exc
    return value


def _decode(
    response: requests.Response,
    response_type: str | None,
    *,
    method: str,
    url: str,
) -> Any:
    """Decode the body according to ``response_type``.

    An unset response type passes the undecoded body bytes through.
    """
    if response_type == "json":
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning(
                "%s %s: undecodable %s body", method, url, response_type
            )
            raise DecodeError(
                f"response body is not valid JSON: {exc}",
                response_type=response_type,
                cause=exc,
            ) from exc
    if response_type == "text":
        return response.text
    return response.content


def _send(
    session: requests.Session,
    prepared: requests.PreparedRequest,
    timeout: float | None,
) -> requests.Response:
    try:
        return session.send(prepared, timeout=timeout, allow_redirects=True)
    except requests.exceptions.Timeout as exc:
        logger.warning("%s %s timed out", prepared.method, prepared.url)
        raise RequestTimeoutError(str(exc), cause=exc) from exc
    except requests.exceptions.RequestException as exc:
        logger.warning(
            "%s %s failed: %s", prepared.method, prepared.url, type(exc).__name__
        )
        raise TransportError(str(exc), cause=exc) from exc


async def dispatch(
    config: RequestConfig, session: requests.Session
) -> ResponseEnvelope:
    """Execute one HTTP exchange described by ``config``.

    Args:
        config: Fully merged request configuration.
        session: Session used for the network call.

    Returns:
        ResponseEnvelope carrying the decoded and transformed data.

    Raises:
        TransformError: A request or response transform raised.
        TransportError: The network call could not complete.
        DecodeError: The body does not match ``config.response_type``.
    """
    headers = dict(config.headers or {})
    method = config.method or "GET"
    url = build_url(join_base_url(config.base_url, config.url), config.params)
    body = await _apply_transforms(
        "request",
        config.transform_request,
        config.data,
        headers,
        method=method,
        url=url,
    )

    try:
        prepared = session.prepare_request(
            requests.Request(
                method=method,
                url=url,
                headers=headers,
                data=body,
            )
        )
    except requests.exceptions.RequestException as exc:
        raise TransportError(str(exc), cause=exc) from exc

    logger.debug("dispatch %s %s", prepared.method, prepared.url)
    response = await asyncio.to_thread(_send, session, prepared, config.timeout)
    logger.debug(
        "%s %s -> %s", prepared.method, prepared.url, response.status_code
    )

    response_headers = MappingProxyType(CaseInsensitiveDict(response.headers))
    data = _decode(
        response, config.response_type, method=method, url=prepared.url or url
    )
    data = await _apply_transforms(
        "response",
        config.transform_response,
        data,
        response_headers,
        method=method,
        url=prepared.url or url,
    )

    return ResponseEnvelope(
        config=config,
        request=prepared,
        response=response,
        data=data,
        status=response.status_code,
        status_text=response.reason or "",
        headers=response_headers,
    )
