"""Event signals for pipeline notifications."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Event(Generic[T]):
    """
    Observer list with a single payload argument.

    Usage:
        orchestrator.on_merged += lambda result: print(result.proxy_count)
        orchestrator.on_merged -= handler

    Handlers are called in subscription order. A handler may unsubscribe
    itself or subscribe others while the event is being emitted, changes
    take effect on the next emit().
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._handlers: list[Callable[[T], None]] = []

    def __iadd__(self, handler: Callable[[T], None]) -> "Event[T]":
        if handler not in self._handlers:
            self._handlers.append(handler)
        return self

    def __isub__(self, handler: Callable[[T], None]) -> "Event[T]":
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def emit(self, value: T) -> None:
        for handler in tuple(self._handlers):
            handler(value)

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def __bool__(self) -> bool:
        return bool(self._handlers)

    def __repr__(self) -> str:
        return f"Event({self.name!r}, handlers={len(self._handlers)})"
