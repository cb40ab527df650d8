"""Per-state subscription bookkeeping.

Callbacks are keyed by generated id and fanned out in insertion order.
Exceptions raised by a callback are not caught; they propagate to whoever
made the mutation.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from snapstate._ids import new_subscription_id
from snapstate.errors import InvalidSubscription

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any, Any, str], None]


def _accepts_three_positional(callback: Callable) -> bool:
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        # Some builtins expose no signature; trust that they are callable.
        return True
    try:
        signature.bind(None, None, None)
    except TypeError:
        return False
    return True


class SubscriptionRegistry:
    """Ordered mapping of subscription id -> callback for one state."""

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._new_id = id_factory or new_subscription_id

    def subscribe(self, callback: Subscriber) -> str:
        """Register callback and return its new subscription id.

        The same callback may be registered several times; each registration
        is a separate subscription.
        """
        if not callable(callback):
            raise InvalidSubscription(
                f"Subscribe failed. Non function provided: {callback!r}"
            )
        if not _accepts_three_positional(callback):
            raise InvalidSubscription(
                "Subscribe failed. Callback must accept "
                "(previous, next, writer) positional arguments."
            )
        subscription_id = self._new_id()
        while subscription_id in self._subscribers:
            subscription_id = self._new_id()
        self._subscribers[subscription_id] = callback
        logger.debug("Added subscription %s", subscription_id)
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription. Unknown ids are ignored."""
        if self._subscribers.pop(subscription_id, None) is None:
            logger.warning("Unsubscribe of unknown subscription %r ignored", subscription_id)
        else:
            logger.debug("Removed subscription %s", subscription_id)

    def notify_all(self, previous: Any, next_: Any, writer: str) -> None:
        """Call every subscriber in insertion order with (previous, next, writer).

        A subscription removed by an earlier callback during the same fan-out
        is skipped.
        """
        for subscription_id, callback in list(self._subscribers.items()):
            if subscription_id in self._subscribers:
                callback(previous, next_, writer)

    def ids(self) -> list[str]:
        return list(self._subscribers)

    def clear(self) -> None:
        self._subscribers.clear()

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._subscribers

    def __len__(self) -> int:
        return len(self._subscribers)

    def __repr__(self) -> str:
        return f"SubscriptionRegistry({len(self._subscribers)} subscribers)"
