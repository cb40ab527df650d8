"""StateRegistry — directory of named states.

Each NamedState owns one live data root and one SubscriptionRegistry.
Every mutation of a state, whether through a StateView or a wholesale
replace, goes through NamedState.mutate(): snapshot the whole root, apply,
snapshot again, notify. That sequence runs under a per-state re-entrant lock
so it is one critical section even if a caller brings in threads.

The registry is an ordinary object; whoever creates it owns it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable

from snapstate.errors import InvalidArgument, InvalidName, UnknownState
from snapstate.snapshot import ValueKind, kind_of, snapshot
from snapstate.subscriptions import SubscriptionRegistry
from snapstate.view import StateView, detach

logger = logging.getLogger(__name__)

# Writer identities reported to subscribers for wholesale replacement.
REPLACE_WRITER = "replace"
REPLACE_ONE_WRITER = "replaceOne"


def _check_name(name: object) -> str:
    if not isinstance(name, str):
        raise InvalidName(name)
    return name


def _checked_root(name: str, value: Any) -> Any:
    """Detach value and make sure it can serve as a state root."""
    value = detach(value)
    if kind_of(value) not in (ValueKind.MAPPING, ValueKind.SEQUENCE):
        raise InvalidArgument(
            f"Invalid parameter: state {name!r} must be replaced with a mapping "
            f"or list, got {type(value).__name__}"
        )
    return value


class NamedState:
    """One named state: live data root plus its subscribers."""

    __slots__ = ("name", "root", "subscriptions", "_lock")

    def __init__(
        self,
        name: str,
        root: Any = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.name = name
        self.root = {} if root is None else root
        self.subscriptions = SubscriptionRegistry(id_factory)
        self._lock = threading.RLock()

    def mutate(self, writer: str, apply: Callable[[], Any]) -> Any:
        """Run apply() between two root snapshots, then notify subscribers.

        If apply() raises, nothing is notified and the error propagates.
        """
        with self._lock:
            previous = snapshot(self.root)
            result = apply()
            next_ = snapshot(self.root)
            logger.debug(
                "State %r changed by %r; notifying %d subscriptions",
                self.name, writer, len(self.subscriptions),
            )
            self.subscriptions.notify_all(previous, next_, writer)
            return result

    def swap(self, root: Any, writer: str) -> None:
        """Replace the whole root as a single notified mutation."""

        def _swap():
            self.root = root

        self.mutate(writer, _swap)

    def view(self, writer: str | None = None) -> StateView:
        return StateView(self, writer)

    def __repr__(self) -> str:
        return f"NamedState({self.name!r}, {len(self.subscriptions)} subscribers)"


class StateRegistry:
    """Named states in creation order."""

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._states: dict[str, NamedState] = {}
        self._id_factory = id_factory

    def get_or_create(self, name: str) -> NamedState:
        """Return the state called name, creating an empty one if absent."""
        state = self._states.get(_check_name(name))
        if state is None:
            state = NamedState(name, id_factory=self._id_factory)
            self._states[name] = state
            logger.debug("Created state %r", name)
        return state

    def lookup(self, name: str) -> NamedState:
        """Return the state called name without creating it."""
        state = self._states.get(_check_name(name))
        if state is None:
            raise UnknownState(name)
        return state

    def get_view(self, name: str, writer: str | None = None) -> StateView:
        """View over the named state's root. Without a writer it is read-only."""
        return self.get_or_create(name).view(writer)

    def names(self) -> list[str]:
        return list(self._states)

    def export_all(self) -> dict[str, Any]:
        """Map every state name to its *live* root (not a snapshot).

        Meant to be fed back into replace_all().
        """
        return {name: state.root for name, state in self._states.items()}

    def replace_all(self, states: Mapping[str, Any] | None) -> None:
        """Swap in new roots for several existing states.

        All names are validated before any state is touched. States not named
        in the argument are left alone. Subscribers see REPLACE_WRITER.
        """
        if states is None or not isinstance(states, Mapping):
            raise InvalidArgument(
                f"Invalid parameter: states must be a mapping of name to value, got {states!r}"
            )
        targets = []
        for name, value in states.items():
            state = self.lookup(name)
            targets.append((state, _checked_root(name, value)))
        logger.debug("Replacing %d states", len(targets))
        for state, value in targets:
            state.swap(value, REPLACE_WRITER)

    def replace_one(self, name: str, value: Any) -> None:
        """Swap in a new root for one state, creating it if needed."""
        _check_name(name)
        value = _checked_root(name, value)
        state = self.get_or_create(name)
        logger.debug("Replacing state %r", name)
        state.swap(value, REPLACE_ONE_WRITER)

    def delete(self, name: str) -> None:
        """Forget the state's data and subscribers. Unknown names are ignored."""
        state = self._states.pop(_check_name(name), None)
        if state is not None:
            state.subscriptions.clear()
            logger.debug("Deleted state %r", name)

    def __contains__(self, name: object) -> bool:
        return name in self._states

    def __len__(self) -> int:
        return len(self._states)
