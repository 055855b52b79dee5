"""Keyed state shared between game instances (one bus per process).

Keys live in a small namespace: ``lobby``, ``garbage`` and ``player.<id>``.
Values are expected to be immutable records; writers replace them wholesale
rather than mutating them in place. Subscribers are blinker receivers called
as ``listener(sender, key=..., value=...)``.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List

from blinker import Signal

LOBBY_KEY = "lobby"
GARBAGE_KEY = "garbage"
PLAYER_PREFIX = "player."


def player_key(player_id: str) -> str:
    return f"{PLAYER_PREFIX}{player_id}"


class SharedStateBus:
    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._signals: Dict[str, Signal] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> Any:
        """Store ``value`` (or ``value(previous)`` when callable) and notify subscribers."""
        if callable(value):
            value = value(self._values.get(key))
        self._values[key] = value
        sig = self._signals.get(key)
        if sig:
            sig.send(self, key=key, value=value)
        return value

    def delete(self, key: str) -> None:
        if key in self._values:
            del self._values[key]
            sig = self._signals.get(key)
            if sig:
                sig.send(self, key=key, value=None)

    def subscribe(self, key: str, listener: Callable[..., Any]) -> Callable[[], None]:
        sig = self._signals.setdefault(key, Signal(key))
        sig.connect(listener, weak=False)

        def unsubscribe() -> None:
            sig.disconnect(listener)

        return unsubscribe

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(key for key in self._values if key.startswith(prefix))
