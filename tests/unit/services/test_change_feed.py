"""
Unit Tests for the in-process change feed
"""
from mentorconnect.services.change_feed import ChangeFeed, conversations_topic, messages_topic


class TestChangeFeed:
    """Subscribe / publish / unsubscribe"""

    async def test_publish_reaches_subscribers_of_topic_only(self):
        feed = ChangeFeed()
        received = []

        async def on_change(event):
            received.append(event)

        await feed.subscribe(messages_topic("c1"), on_change)
        delivered = await feed.publish(messages_topic("c1"), {"message_id": "m1"})
        await feed.publish(messages_topic("c2"), {"message_id": "m2"})

        assert delivered == 1
        assert received == [{"topic": "messages:c1", "message_id": "m1"}]

    async def test_unsubscribe_is_idempotent(self):
        feed = ChangeFeed()
        received = []

        async def on_change(event):
            received.append(event)

        unsubscribe = await feed.subscribe(conversations_topic("u1"), on_change)
        assert unsubscribe.active is True

        unsubscribe()
        unsubscribe()

        assert unsubscribe.active is False
        assert feed.subscriber_count() == 0
        assert await feed.publish(conversations_topic("u1")) == 0
        assert received == []

    async def test_unsubscribe_leaves_other_subscribers(self):
        feed = ChangeFeed()
        topic = conversations_topic("u1")

        async def noop(event):
            return None

        first = await feed.subscribe(topic, noop)
        await feed.subscribe(topic, noop)
        first()

        assert feed.subscriber_count(topic) == 1

    async def test_failing_callback_isolated(self):
        feed = ChangeFeed()
        topic = messages_topic("c1")
        received = []

        async def broken(event):
            raise RuntimeError("listener crashed")

        async def healthy(event):
            received.append(event["topic"])

        await feed.subscribe(topic, broken)
        await feed.subscribe(topic, healthy)

        assert await feed.publish(topic) == 1
        assert received == [topic]

    async def test_callback_cancelling_later_subscriber(self):
        feed = ChangeFeed()
        topic = messages_topic("c1")
        received = []
        handles = {}

        async def first(event):
            handles["second"]()

        async def second(event):
            received.append(event)

        await feed.subscribe(topic, first)
        handles["second"] = await feed.subscribe(topic, second)

        assert await feed.publish(topic) == 1
        assert received == []
