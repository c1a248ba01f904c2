"""
Change Feed

In-process publish/subscribe for real-time updates. Services publish a
topic after committing a change; listeners (WebSocket handlers, watchers)
re-query and push fresh snapshots.

    unsubscribe = await change_feed.subscribe(conversations_topic(uid), on_change)
    ...
    unsubscribe()   # exactly once when done; extra calls are harmless

Topics:
- conversations:{user_id}   the user's conversation list changed
- messages:{conversation_id} a message was added to the conversation
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from mentorconnect.core.logging_config import logger
from mentorconnect.core.types import utc_now

OnChange = Callable[[Dict[str, Any]], Awaitable[None]]


def conversations_topic(user_id: str) -> str:
    return f"conversations:{user_id}"


def messages_topic(conversation_id: str) -> str:
    return f"messages:{conversation_id}"


@dataclass
class Subscription:
    id: int
    topic: str
    on_change: OnChange
    created_at: datetime = field(default_factory=utc_now)
    active: bool = True


class Unsubscribe:
    """Cancellation handle returned by ChangeFeed.subscribe"""

    def __init__(self, feed: "ChangeFeed", subscription: Subscription):
        self._feed = feed
        self._subscription = subscription

    @property
    def active(self) -> bool:
        return self._subscription.active

    def __call__(self) -> None:
        if not self._subscription.active:
            return
        self._subscription.active = False
        self._feed._remove(self._subscription)


class ChangeFeed:
    """
    Topic -> subscribers registry.

    Callbacks run sequentially in publish order. A callback that raises is
    logged and skipped; the other subscribers still receive the event.
    """

    def __init__(self):
        # topic -> {subscription_id: Subscription}
        self._topics: Dict[str, Dict[int, Subscription]] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def subscribe(self, topic: str, on_change: OnChange) -> Unsubscribe:
        subscription = Subscription(id=next(self._ids), topic=topic, on_change=on_change)
        async with self._lock:
            self._topics.setdefault(topic, {})[subscription.id] = subscription
        logger.debug(f"Subscribed #{subscription.id} to {topic}")
        return Unsubscribe(self, subscription)

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._topics.get(subscription.topic)
        if subscribers is None:
            return
        subscribers.pop(subscription.id, None)
        if not subscribers:
            del self._topics[subscription.topic]
        logger.debug(f"Unsubscribed #{subscription.id} from {subscription.topic}")

    async def publish(self, topic: str, payload: Optional[Dict[str, Any]] = None) -> int:
        """
        Notify every current subscriber of `topic`.

        Returns:
            Number of callbacks that ran successfully
        """
        async with self._lock:
            subscribers = list(self._topics.get(topic, {}).values())

        event = {"topic": topic, **(payload or {})}
        delivered = 0
        for subscription in subscribers:
            # May have been cancelled by an earlier callback
            if not subscription.active:
                continue
            try:
                await subscription.on_change(event)
                delivered += 1
            except Exception as exc:
                logger.log_error_with_context(exc, context=f"change_feed.publish:{topic}",
                                              subscription_id=subscription.id)
        return delivered

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        if topic is not None:
            return len(self._topics.get(topic, {}))
        return sum(len(subscribers) for subscribers in self._topics.values())


# Global instance
change_feed = ChangeFeed()
