"""Configuration models for the HttpClient pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from .errors import ConfigError

Transform = Callable[[Any, Mapping[str, Any]], Any]

METHODS = frozenset({"GET", "POST"})
RESPONSE_TYPES = frozenset({"json", "blob", "text"})


def _default_headers() -> Mapping[str, str]:
    """Return immutable empty default headers mapping."""

    return MappingProxyType({})


def json_transform_request(data: Any, headers: Mapping[str, Any]) -> Any:
    """Serialize a request body to compact JSON text.

    Bodies that are already encoded (``str``/``bytes``) and ``None`` pass
    through untouched.
    """
    if data is None or isinstance(data, (str, bytes)):
        return data
    return json.dumps(data, separators=(",", ":"))


@dataclass(frozen=True)
class RequestConfig:
    """Per-call request configuration.

    Every field is optional. ``None`` means "not defined" so that
    merge_config can fall back to the base value.
    """

    url: str | None = None
    method: str | None = None
    base_url: str | None = None
    transform_request: Sequence[Transform] | None = None
    transform_response: Sequence[Transform] | None = None
    headers: Mapping[str, str] | None = None
    params: Mapping[str, Any] | None = None
    data: Any = None
    timeout: float | None = None
    response_type: str | None = None

    def __post_init__(self) -> None:
        if self.method is not None:
            method = (
                self.method.upper() if isinstance(self.method, str) else None
            )
            if method not in METHODS:
                raise ConfigError(
                    f"method must be one of {sorted(METHODS)}, got {self.method!r}"
                )
            object.__setattr__(self, "method", method)
        if (
            self.response_type is not None
            and self.response_type not in RESPONSE_TYPES
        ):
            raise ConfigError(
                f"response_type must be one of {sorted(RESPONSE_TYPES)}, "
                f"got {self.response_type!r}"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be > 0 when provided")

        # Freeze copied mappings to avoid post-init mutation side effects.
        if self.headers is not None:
            object.__setattr__(
                self, "headers", MappingProxyType(dict(self.headers))
            )
        if self.params is not None:
            object.__setattr__(
                self, "params", MappingProxyType(dict(self.params))
            )
        for name in ("transform_request", "transform_response"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, tuple(value))


def merge_config(base: RequestConfig, override: RequestConfig) -> RequestConfig:
    """Right-biased merge of two configs.

    For every field the override wins when it defines a value. Headers are
    the exception: when both sides define them the result is the key-wise
    union, override winning per key. Header values are not merged further.
    """
    values: dict[str, Any] = {}
    for item in fields(RequestConfig):
        value = getattr(override, item.name)
        values[item.name] = (
            value if value is not None else getattr(base, item.name)
        )
    if base.headers is not None and override.headers is not None:
        values["headers"] = {**base.headers, **override.headers}
    return RequestConfig(**values)


LIBRARY_DEFAULTS = RequestConfig(
    url="",
    method="GET",
    base_url="",
    headers={},
    response_type="json",
    transform_request=(json_transform_request,),
    transform_response=(),
)


@dataclass(frozen=True)
class TransportConfig:
    """Settings applied to the underlying requests.Session."""

    user_agent: str | None = None
    default_headers: Mapping[str, str] = field(default_factory=_default_headers)
    verify_tls: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "default_headers",
            MappingProxyType(dict(self.default_headers)),
        )
