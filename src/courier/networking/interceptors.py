"""Ordered interceptor registry for one pipeline stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

Fulfilled = Callable[[V], Any]
Rejected = Callable[[BaseException], Any]


@dataclass(frozen=True)
class InterceptorRecord(Generic[V]):
    """A fulfilled/rejected handler pair.

    Either handler may be None, in which case the value (or error) flows
    past this record unchanged.
    """

    fulfilled: Optional[Fulfilled[V]] = None
    rejected: Optional[Rejected] = None


class InterceptorManager(Generic[V]):
    """Append-only log of interceptor records.

    Handles are zero-based slot indexes. Ejected slots become tombstones
    and are never reused, so a handle stays a valid argument to eject for
    the lifetime of the manager.
    """

    def __init__(self, name: str = "interceptors") -> None:
        self._name = name
        self._handlers: list[InterceptorRecord[V] | None] = []

    def use(
        self,
        fulfilled: Optional[Fulfilled[V]] = None,
        rejected: Optional[Rejected] = None,
    ) -> int:
        """Register a handler pair and return its handle."""
        self._handlers.append(InterceptorRecord(fulfilled, rejected))
        handle = len(self._handlers) - 1
        logger.debug("%s: registered handle %d", self._name, handle)
        return handle

    def eject(self, handle: int) -> None:
        """Tombstone the slot at ``handle``.

        Already-ejected and out-of-range handles are ignored.
        """
        if (
            0 <= handle < len(self._handlers)
            and self._handlers[handle] is not None
        ):
            self._handlers[handle] = None
            logger.debug("%s: ejected handle %d", self._name, handle)

    def for_each(self, visit: Callable[[InterceptorRecord[V]], Any]) -> None:
        """Apply ``visit`` to every live record in ascending slot order.

        Records registered during the traversal are not visited. Records
        ejected during the traversal are skipped if not yet reached.
        """
        for index in range(len(self._handlers)):
            record = self._handlers[index]
            if record is not None:
                visit(record)

    def records(self) -> list[InterceptorRecord[V]]:
        """Return the live records in slot order."""
        collected: list[InterceptorRecord[V]] = []
        self.for_each(collected.append)
        return collected

    def __len__(self) -> int:
        return sum(1 for record in self._handlers if record is not None)
