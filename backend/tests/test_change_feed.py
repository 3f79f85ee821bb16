import asyncio

from sortie.services.change_feed import ChangeFeed


def test_subscribers_receive_events_for_their_entity():
    feed = ChangeFeed()

    async def scenario():
        bookings = feed.subscribe("bookings")
        trips = feed.subscribe("trips")

        assert feed.publish("bookings", "INSERT", 3) == 1
        message = await asyncio.wait_for(bookings.get(), timeout=1)
        await asyncio.sleep(0)
        return message, trips.empty()

    message, trips_empty = asyncio.run(scenario())

    assert message["entity"] == "bookings"
    assert message["event"] == "INSERT"
    assert message["id"] == 3
    assert "at" in message
    assert trips_empty


def test_unsubscribe():
    feed = ChangeFeed()

    async def scenario():
        queue = feed.subscribe("bookings")
        feed.unsubscribe("bookings", queue)
        return feed.publish("bookings", "DELETE", 1)

    assert asyncio.run(scenario()) == 0
    assert feed.subscriber_count("bookings") == 0


def test_subscribers_on_closed_loops_are_dropped():
    feed = ChangeFeed()

    async def scenario():
        feed.subscribe("bookings")

    asyncio.run(scenario())
    assert feed.subscriber_count("bookings") == 1

    assert feed.publish("bookings", "UPDATE", 1) == 0
    assert feed.subscriber_count("bookings") == 0


def test_publish_without_subscribers():
    assert ChangeFeed().publish("bookings", "INSERT") == 0
