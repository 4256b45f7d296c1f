import pytest

from conftest import at, make_sample
from models import Classification, PostureStatus
from observation_builder import build_observation
from session_buffer import SessionBuffer


def observation(n: int):
    classification = Classification(status=PostureStatus.HEALTHY, score=100, virtual_distance=35)
    return build_observation(make_sample(600 + n, n), classification, now=at(n))


class TestSessionBuffer:

    def test_starts_empty(self):
        buffer = SessionBuffer()
        assert len(buffer) == 0
        assert buffer.snapshot() == []
        assert buffer.capacity == 200

    def test_keeps_insertion_order(self):
        buffer = SessionBuffer(capacity=5)
        items = [observation(i) for i in range(3)]
        for item in items:
            buffer.append(item)

        assert [o.id for o in buffer.snapshot()] == [o.id for o in items]

    def test_201_appends_evict_the_oldest(self):
        buffer = SessionBuffer()
        items = [observation(i) for i in range(201)]
        for item in items:
            buffer.append(item)

        snapshot = buffer.snapshot()
        assert len(buffer) == 200
        assert items[0].id not in {o.id for o in snapshot}
        assert [o.id for o in snapshot] == [o.id for o in items[1:]]

    def test_snapshot_is_a_copy(self):
        buffer = SessionBuffer(capacity=3)
        buffer.append(observation(0))

        snapshot = buffer.snapshot()
        snapshot.clear()

        assert len(buffer) == 1

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            SessionBuffer(capacity=0)
