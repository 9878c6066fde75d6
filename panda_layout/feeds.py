"""Push sources feeding the dashboard: module lists and context changes.

Both sources deliver synchronously to their subscribers in subscription
order. A module feed always emits the complete module list, never a delta.
"""

from __future__ import annotations

import typing as typ

from .model import Context, Module

_T = typ.TypeVar("_T")


class Subscription:
    """Handle returned by :meth:`Publisher.subscribe`; cancel to stop delivery."""

    def __init__(self, cancel: typ.Callable[[], None]) -> None:
        self._cancel = cancel
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._cancel()


class Publisher(typ.Generic[_T]):
    """Minimal synchronous publisher remembering its latest value."""

    def __init__(self, initial: _T | None = None) -> None:
        self._subscribers: list[typ.Callable[[_T], None]] = []
        self.latest: _T | None = initial

    def subscribe(self, callback: typ.Callable[[_T], None]) -> Subscription:
        """Register ``callback`` for every subsequent emission."""
        self._subscribers.append(callback)
        return Subscription(lambda: self._subscribers.remove(callback))

    def emit(self, value: _T) -> None:
        """Record ``value`` as latest and deliver it to every subscriber."""
        self.latest = value
        for callback in list(self._subscribers):
            callback(value)


class ModuleFeed(Publisher[tuple[Module, ...]]):
    """Publisher of complete module lists."""

    def publish(self, modules: typ.Iterable[Module]) -> None:
        self.emit(tuple(modules))


class ContextSource(Publisher[Context]):
    """Publisher of viewing-context changes; repeated widths are not re-sent."""

    def update(self, context: Context) -> None:
        if self.latest == context:
            return
        self.emit(context)


__all__ = ["ContextSource", "ModuleFeed", "Publisher", "Subscription"]
