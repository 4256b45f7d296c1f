"""
Data models for the Light Posture Monitor
"""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class PostureStatus(str, Enum):
    """Posture classification states"""
    HEALTHY = "Healthy State"
    POOR = "Poor Posture Condition"
    VIOLATION = "TRUE POSTURAL VIOLATION"
    TOO_CLOSE = "Warning State: Too Close"


class LightSample(BaseModel):
    """Decoded frame from the Arduino"""
    light: int  # second field, native sensor range 0-1023
    raw: str  # stripped line; first field is carried here but never read
    received_at: datetime


class Classification(BaseModel):
    """Result of one state machine step"""
    status: PostureStatus
    score: int  # 20, 60 or 100
    virtual_distance: int
    is_violation: bool = False


class ObservationComponent(BaseModel):
    """One measured value inside an observation"""
    kind: str  # "distance" or "light"
    value: int
    unit: Optional[str] = None


class Observation(BaseModel):
    """Timestamped, scored classification record"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    resource_type: str = Field(default="Observation", alias="resourceType")
    id: str
    timestamp: datetime
    status_text: PostureStatus = Field(alias="statusText")
    score: int
    components: List[ObservationComponent]

    def _component(self, kind: str) -> Optional[int]:
        for component in self.components:
            if component.kind == kind:
                return component.value
        return None

    @property
    def distance(self) -> Optional[int]:
        return self._component("distance")

    @property
    def light(self) -> Optional[int]:
        return self._component("light")


class ObservationBundle(BaseModel):
    """Collection envelope used for session export"""
    model_config = ConfigDict(populate_by_name=True)

    resource_type: str = Field(default="Bundle", alias="resourceType")
    type: str = "collection"
    timestamp: datetime
    total: int
    entry: List[Observation]


class ProcessorStatus(BaseModel):
    """Current classifier state for real-time display"""
    baseline: float
    violation_started_at: Optional[datetime] = None
    violation_threshold: float
    total_processed: int
    last_observation: Optional[Observation] = None


class SessionStats(BaseModel):
    """Statistics over the current session buffer"""
    buffered_observations: int
    total_processed: int
    status_counts: Dict[str, int]
    violation_count: int
    average_score: float


class SerialStatus(BaseModel):
    """Serial transport status"""
    connected: bool
    port: str
    baud_rate: int
    lines_read: int  # every line received, valid or not
