import asyncio
import threading

import pytest

from broadcaster import EVENT_NAME, Broadcaster
from conftest import at, make_sample
from models import Classification, PostureStatus
from observation_builder import build_observation


@pytest.fixture
def observations():
    classification = Classification(status=PostureStatus.HEALTHY, score=100, virtual_distance=35)
    return [build_observation(make_sample(600, i), classification, now=at(i)) for i in range(3)]


class TestBroadcaster:

    def test_publish_from_another_thread(self, observations):
        async def scenario():
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()

            worker = threading.Thread(target=broadcaster.publish, args=(observations[0],))
            worker.start()
            worker.join()

            return await asyncio.wait_for(queue.get(), timeout=1)

        message = asyncio.run(scenario())

        assert message["event"] == EVENT_NAME
        assert message["data"]["id"] == observations[0].id
        assert message["data"]["statusText"] == "Healthy State"

    def test_every_subscriber_gets_each_observation_in_order(self, observations):
        async def scenario():
            broadcaster = Broadcaster()
            queues = [broadcaster.subscribe(), broadcaster.subscribe()]
            for obs in observations:
                broadcaster.publish(obs)
            await asyncio.sleep(0)
            return [[(await q.get())["data"]["id"] for _ in observations] for q in queues]

        received = asyncio.run(scenario())
        expected = [o.id for o in observations]

        assert received == [expected, expected]

    def test_slow_subscriber_drops_oldest(self, observations):
        async def scenario():
            broadcaster = Broadcaster(queue_size=2)
            queue = broadcaster.subscribe()
            for obs in observations:
                broadcaster.publish(obs)
            await asyncio.sleep(0)
            return [queue.get_nowait()["data"]["id"] for _ in range(queue.qsize())]

        assert asyncio.run(scenario()) == [observations[1].id, observations[2].id]

    def test_unsubscribe(self, observations):
        async def scenario():
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()
            assert broadcaster.subscriber_count == 1

            broadcaster.unsubscribe(queue)
            broadcaster.publish(observations[0])
            await asyncio.sleep(0)
            return broadcaster.subscriber_count, queue.qsize()

        assert asyncio.run(scenario()) == (0, 0)

    def test_publish_without_subscribers(self, observations):
        Broadcaster().publish(observations[0])
