"""
Posture classification logic for the light sensor
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from models import Classification, PostureStatus
from config import (
    INITIAL_BASELINE,
    PRIMARY_THRESHOLD,
    VIOLATION_RATIO,
    DEBOUNCE_SECONDS,
    WARNING_DISTANCE,
    BASELINE_ADAPTATION,
    SENSOR_RANGE,
    DISTANCE_SCALE
)


@dataclass
class PostureState:
    """Mutable classifier state carried across samples"""
    baseline: float = INITIAL_BASELINE
    violation_started_at: Optional[datetime] = None


class PostureProcessor:
    """
    Classifies posture from a single ambient-light reading.
    Keeps an adaptive baseline of healthy light levels and a debounced
    violation timer. Not thread-safe; callers must feed samples one at a
    time in chronological order.
    """

    def __init__(
        self,
        state: Optional[PostureState] = None,
        primary_threshold: int = PRIMARY_THRESHOLD,
        violation_ratio: float = VIOLATION_RATIO,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        warning_distance: int = WARNING_DISTANCE,
        adaptation: float = BASELINE_ADAPTATION,
        sensor_range: int = SENSOR_RANGE,
        distance_scale: int = DISTANCE_SCALE
    ):
        self.state = state if state is not None else PostureState()
        self.primary_threshold = primary_threshold
        self.violation_ratio = violation_ratio
        self.debounce = timedelta(seconds=debounce_seconds)
        self.warning_distance = warning_distance
        self.adaptation = adaptation
        self.sensor_range = sensor_range
        self.distance_scale = distance_scale

    @property
    def violation_threshold(self) -> float:
        return self.state.baseline * self.violation_ratio

    def virtual_distance(self, light: int) -> int:
        """
        Map light intensity to a synthetic distance in cm.
        Lower light reads as closer. Halves round up.
        """
        return int(math.floor(light / self.sensor_range * self.distance_scale + 0.5))

    def update_baseline(self, light: int) -> float:
        """
        Exponential moving average over healthy readings.
        A small adaptation factor keeps brief flashes from moving the reference.
        """
        self.state.baseline = self.state.baseline * (1 - self.adaptation) + light * self.adaptation
        return self.state.baseline

    def classify(self, light: int, now: datetime) -> Classification:
        """
        Classify one light sample and advance the classifier state.

        Logic:
        - HEALTHY: light at or above the primary threshold; baseline adapts
        - POOR: light below the primary threshold
        - VIOLATION: light held below baseline * ratio for the debounce window
        - TOO_CLOSE: virtual distance under the warning distance, unless in violation

        Score:
        - 100 when light is above the primary threshold
        - 20 during a confirmed violation
        - 60 otherwise
        """
        distance = self.virtual_distance(light)
        is_violation = False

        if light < self.primary_threshold:
            status = PostureStatus.POOR

            if light < self.violation_threshold:
                if self.state.violation_started_at is None:
                    self.state.violation_started_at = now
                elif now - self.state.violation_started_at >= self.debounce:
                    status = PostureStatus.VIOLATION
                    is_violation = True
            else:
                # Recovered above the violation threshold, restart the debounce
                self.state.violation_started_at = None
        else:
            status = PostureStatus.HEALTHY
            self.state.violation_started_at = None
            self.update_baseline(light)

        if distance < self.warning_distance and status != PostureStatus.VIOLATION:
            status = PostureStatus.TOO_CLOSE

        if light > self.primary_threshold:
            score = 100
        elif is_violation:
            score = 20
        else:
            score = 60

        return Classification(
            status=status,
            score=score,
            virtual_distance=distance,
            is_violation=is_violation
        )
