"""StateManager — the public entry point.

Thin facade over an owned StateRegistry:

    manager = StateManager()
    loader = manager.get_state("loader", "index")

    def on_change(previous, next_, writer):
        print(writer, previous, "->", next_)

    manager.subscribe("loader", on_change)
    loader.loaders = []
    loader.loaders.append(1)    # on_change fires for each mutation
"""

from __future__ import annotations

from typing import Any, Mapping

from snapstate.registry import StateRegistry
from snapstate.subscriptions import Subscriber
from snapstate.view import StateView


class StateManager:
    """Named reactive states with snapshot-based change notification."""

    def __init__(self, registry: StateRegistry | None = None) -> None:
        self._registry = registry if registry is not None else StateRegistry()

    @property
    def registry(self) -> StateRegistry:
        return self._registry

    def get_state(self, name: str, writer: str | None = None) -> StateView:
        """Open the named state. Omit writer for read-only access."""
        return self._registry.get_view(name, writer)

    def has_state(self, name: str) -> bool:
        return name in self._registry

    def subscribe(self, name: str, callback: Subscriber) -> str:
        """Call callback(previous, next, writer) after every change to the state."""
        return self._registry.get_or_create(name).subscriptions.subscribe(callback)

    def unsubscribe(self, name: str, subscription_id: str) -> None:
        self._registry.lookup(name).subscriptions.unsubscribe(subscription_id)

    def get_state_names(self) -> list[str]:
        return self._registry.names()

    def get_states(self) -> dict[str, Any]:
        return self._registry.export_all()

    def replace(self, states: Mapping[str, Any] | None) -> None:
        self._registry.replace_all(states)

    def replace_one(self, name: str, value: Any) -> None:
        self._registry.replace_one(name, value)

    def delete_state(self, name: str) -> None:
        self._registry.delete(name)
