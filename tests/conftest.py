from datetime import datetime, timedelta

import pytest
import pytz

from data_processor import PostureProcessor
from models import LightSample


T0 = pytz.UTC.localize(datetime(2025, 3, 14, 9, 30, 0))


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def make_sample(light: int, seconds: float = 0, first_field: str = "41") -> LightSample:
    return LightSample(light=light, raw=f"{first_field},{light}", received_at=at(seconds))


@pytest.fixture
def processor() -> PostureProcessor:
    """Processor with reference defaults (baseline 864)."""
    return PostureProcessor()
