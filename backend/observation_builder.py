"""
Builds observation records from classified samples
"""

import itertools
import threading
from datetime import datetime
from typing import Optional

from models import Classification, LightSample, Observation, ObservationComponent
from utils import now_local

_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def next_observation_id(now: datetime) -> str:
    """Creation time in milliseconds plus a process-wide sequence number"""
    with _sequence_lock:
        seq = next(_sequence)
    return f"{int(now.timestamp() * 1000)}-{seq:06d}"


def build_observation(sample: LightSample, classification: Classification,
                      now: Optional[datetime] = None) -> Observation:
    """Package a classification and its sample into an Observation. Inputs are trusted."""
    now = now or now_local()
    return Observation(
        id=next_observation_id(now),
        timestamp=now,
        status_text=classification.status,
        score=classification.score,
        components=[
            ObservationComponent(kind="distance", value=classification.virtual_distance, unit="cm"),
            ObservationComponent(kind="light", value=sample.light),
        ]
    )
