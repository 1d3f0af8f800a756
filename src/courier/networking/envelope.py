"""Wire envelope exchanged with the remote service.

Outbound calls wrap their payload in an Envelope::

    {"passport": str | null, "session": str, "resource": str,
     "sign": "", "other": null}

``resource`` is the JSON text of the payload, or ``""`` when there is none.
Field names and the null-vs-empty-string distinctions are part of the wire
contract. Replies come back as a ResponsePack with the same resource
encoding plus a status triple (code, message, success).
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from .errors import DecodeError

PASSPORT_KEY = "__PASSPORT"

_RESPONSE_FIELDS = ("code", "message", "success", "session", "resource", "sign")


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


class IdentityStore(Protocol):
    """Read-only view of the key-value store holding the passport."""

    def get(self, key: str) -> str | None:
        ...


class MemoryIdentityStore:
    """In-process IdentityStore backed by a dict."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)


@dataclass(frozen=True)
class Envelope:
    passport: str | None
    session: str
    resource: str
    sign: str = ""
    other: None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "passport": self.passport,
            "session": self.session,
            "resource": self.resource,
            "sign": self.sign,
            "other": self.other,
        }

    def to_json(self) -> str:
        return _dumps(self.to_dict())


def build_envelope(identity_token: str | None, raw_resource: Any = None) -> Envelope:
    """Wrap ``raw_resource`` for the remote service.

    Args:
        identity_token: Passport of the current client, if any.
        raw_resource: Payload to serialize. None means no payload and is
            encoded as an empty string.

    Returns:
        A new Envelope with a fresh session id. Signing is not performed;
        ``sign`` is always empty.
    """
    return Envelope(
        passport=identity_token,
        session=str(uuid.uuid4()),
        resource="" if raw_resource is None else _dumps(raw_resource),
    )


def create_request_pack(store: IdentityStore, raw_resource: Any = None) -> str:
    """Return the JSON text of an envelope carrying the stored passport."""
    return build_envelope(store.get(PASSPORT_KEY), raw_resource).to_json()


@dataclass(frozen=True)
class ResponsePack:
    code: int
    message: str
    success: bool
    session: str
    resource: str
    sign: str = ""
    other: Any = None

    def decode_resource(self) -> Any:
        """Return the decoded resource, or ``""`` when the resource is empty."""
        if self.resource == "":
            return ""
        try:
            return json.loads(self.resource)
        except ValueError as exc:
            raise DecodeError(
                "resource is not JSON", response_type="json", cause=exc
            ) from exc


def parse_response_pack(payload: Any) -> ResponsePack:
    """Build a ResponsePack from a decoded JSON reply body."""
    if not isinstance(payload, Mapping):
        raise DecodeError(
            f"response pack must be an object, got {type(payload).__name__}",
            response_type="json",
        )
    missing = [name for name in _RESPONSE_FIELDS if name not in payload]
    if missing:
        raise DecodeError(
            f"response pack is missing fields: {', '.join(missing)}",
            response_type="json",
        )
    return ResponsePack(
        code=payload["code"],
        message=payload["message"],
        success=payload["success"],
        session=payload["session"],
        resource=payload["resource"],
        sign=payload["sign"],
        other=payload.get("other"),
    )


def unpack_response(data: Any, headers: Mapping[str, Any]) -> ResponsePack:
    """Response transform turning a decoded reply body into a ResponsePack."""
    return parse_response_pack(data)
