"""Subscription observer contract."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

T_contra = TypeVar("T_contra", contravariant=True)


class SubscriptionObserver(Protocol[T_contra]):
    """Receives the events of one subscription.

    Callbacks may be plain functions or coroutine functions.
    """

    def next(self, payload: T_contra) -> Any: ...

    def error(self, error: Any) -> Any: ...

    def complete(self) -> Any: ...


@dataclass
class CallbackObserver:
    """Observer built from optional callbacks. Missing callbacks are skipped."""

    next: Callable[[Any], Any] | None = None
    error: Callable[[Any], Any] | None = None
    complete: Callable[[], Any] | None = None
