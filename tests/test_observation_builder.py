import pytest
from pydantic import ValidationError

from conftest import T0, make_sample
from models import Classification, PostureStatus
from observation_builder import build_observation


@pytest.fixture
def classification() -> Classification:
    return Classification(status=PostureStatus.POOR, score=60, virtual_distance=26, is_violation=False)


class TestBuildObservation:

    def test_fields(self, classification):
        obs = build_observation(make_sample(450), classification, now=T0)

        assert obs.resource_type == "Observation"
        assert obs.timestamp == T0
        assert obs.status_text == PostureStatus.POOR
        assert obs.score == 60
        assert obs.distance == 26
        assert obs.light == 450

    def test_components_shape(self, classification):
        obs = build_observation(make_sample(450), classification, now=T0)
        data = obs.model_dump(mode="json", by_alias=True)

        assert data["resourceType"] == "Observation"
        assert data["statusText"] == "Poor Posture Condition"
        assert data["components"] == [
            {"kind": "distance", "value": 26, "unit": "cm"},
            {"kind": "light", "value": 450, "unit": None},
        ]
        assert data["timestamp"].startswith("2025-03-14T09:30:00")

    def test_id_is_time_based_and_increasing(self, classification):
        first = build_observation(make_sample(450), classification, now=T0)
        second = build_observation(make_sample(450), classification, now=T0)

        millis = str(int(T0.timestamp() * 1000))
        assert first.id.startswith(millis)
        assert first.id != second.id
        assert second.id > first.id

    def test_observation_is_immutable(self, classification):
        obs = build_observation(make_sample(450), classification, now=T0)
        with pytest.raises(ValidationError):
            obs.score = 100

    def test_defaults_timestamp_to_now(self, classification):
        obs = build_observation(make_sample(450), classification)
        assert obs.timestamp.tzinfo is not None
