"""Path-scoped publish/subscribe with ancestor bubbling.

A change published on ``"a.b.c"`` is delivered to subscribers of
``"a.b.c"`` first, then to subscribers of ``"a.b"`` and ``"a"`` (nearest
ancestor first). Subscribers of descendant paths such as ``"a.b.c.d"`` are
never notified. This module knows nothing about storage; callers supply a
resolver that returns the current value for a path.
"""

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count
from typing import Any


logger = logging.getLogger(__name__)

Subscriber = Callable[[Any, str], None]
Resolver = Callable[[str], Any]
Unsubscribe = Callable[[], None]

PATH_SEPARATOR = "."

_registration_ids = count(1)


def ancestor_paths(path: str) -> list[str]:
    """Return the strict ancestors of a dotted path, nearest first.

    >>> ancestor_paths("a.b.c")
    ['a.b', 'a']
    """
    parts = path.split(PATH_SEPARATOR)
    return [PATH_SEPARATOR.join(parts[:i]) for i in range(len(parts) - 1, 0, -1)]


@dataclass(eq=False)
class Subscription:
    """One registration of a callback on a path."""

    path: str
    callback: Subscriber
    registration_id: int = field(default_factory=lambda: next(_registration_ids))


class SubscriberRegistry:
    """Registry of path subscriptions that computes ordered deliveries."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, path: str, callback: Subscriber) -> Unsubscribe:
        """Register a callback on a path.

        The same callback may be registered several times; each returned
        handle removes only its own registration and is safe to call twice.
        """
        subscription = Subscription(path=path, callback=callback)
        self._subscriptions.setdefault(path, []).append(subscription)
        logger.debug("Subscribed #%d on %s", subscription.registration_id, path)

        def _unsubscribe() -> None:
            registered = self._subscriptions.get(path, [])
            with contextlib.suppress(ValueError):
                registered.remove(subscription)
            if not registered:
                self._subscriptions.pop(path, None)

        return _unsubscribe

    def subscriber_count(self, path: str | None = None) -> int:
        if path is not None:
            return len(self._subscriptions.get(path, []))
        return sum(len(registered) for registered in self._subscriptions.values())

    def delivery_order(self, path: str) -> list[Subscription]:
        """Subscriptions interested in a change at ``path``, in delivery order.

        Exact-path subscriptions come first (in registration order), followed
        by each ancestor's subscriptions from the nearest ancestor to the root.
        """
        ordered = list(self._subscriptions.get(path, []))
        for ancestor in ancestor_paths(path):
            ordered.extend(self._subscriptions.get(ancestor, []))
        return ordered

    def publish(self, path: str, resolve: Resolver) -> int:
        """Deliver a change at ``path`` synchronously.

        Each subscriber receives its own copy of the current value of the path
        it subscribed to, as returned by ``resolve``. A subscriber that raises
        is logged and skipped; the remaining deliveries still happen.

        Returns:
            Number of callbacks invoked successfully
        """
        delivered = 0
        for subscription in self.delivery_order(path):
            try:
                subscription.callback(resolve(subscription.path), subscription.path)
            except Exception:
                logger.exception(
                    "Subscriber #%d on %s failed while handling change at %s",
                    subscription.registration_id,
                    subscription.path,
                    path,
                )
                continue
            delivered += 1
        return delivered
