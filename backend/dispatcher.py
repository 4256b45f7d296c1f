"""
Sequential pipeline from decoded samples to stored and broadcast observations
"""

import logging
import threading
from collections import Counter
from queue import Empty, Queue
from typing import List, Optional

from broadcaster import Broadcaster
from data_processor import PostureProcessor
from models import LightSample, Observation, ObservationBundle, PostureStatus, ProcessorStatus, SessionStats
from observation_builder import build_observation
from session_buffer import SessionBuffer
from utils import now_local

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Consumes light samples from a queue on a single worker thread.

    Each sample runs classify -> build -> append -> broadcast to completion
    before the next one starts. One lock covers the classifier state, the
    session buffer and the counters, so HTTP readers always see a
    consistent snapshot.
    """

    def __init__(
        self,
        processor: Optional[PostureProcessor] = None,
        buffer: Optional[SessionBuffer] = None,
        broadcaster: Optional[Broadcaster] = None,
        sample_queue: Optional[Queue] = None
    ):
        self.processor = processor if processor is not None else PostureProcessor()
        self.buffer = buffer if buffer is not None else SessionBuffer()
        self.broadcaster = broadcaster if broadcaster is not None else Broadcaster()
        self.sample_queue: Queue = sample_queue if sample_queue is not None else Queue()

        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self.is_running = False

        self.total_processed = 0
        self.last_observation: Optional[Observation] = None

    def submit(self, sample: LightSample) -> None:
        """Hand a sample to the worker thread"""
        self.sample_queue.put(sample)

    def process_sample(self, sample: LightSample) -> Observation:
        """Run the full pipeline for one sample"""
        with self._lock:
            classification = self.processor.classify(sample.light, sample.received_at)
            observation = build_observation(sample, classification)
            self.buffer.append(observation)
            self.total_processed += 1
            self.last_observation = observation
            self.broadcaster.publish(observation)

        logger.debug("light=%d status=%s score=%d", sample.light,
                     observation.status_text.value, observation.score)
        return observation

    def _run(self):
        logger.info("Dispatcher started")

        while self.is_running:
            try:
                sample = self.sample_queue.get(timeout=0.5)
            except Empty:
                continue

            try:
                self.process_sample(sample)
            except Exception:
                logger.exception("Failed to process sample %r", sample.raw)
            finally:
                self.sample_queue.task_done()

        logger.info("Dispatcher stopped")

    def start(self):
        if self.is_running:
            return
        self.is_running = True
        self._worker = threading.Thread(target=self._run, name="dispatcher", daemon=True)
        self._worker.start()

    def stop(self):
        self.is_running = False
        if self._worker:
            self._worker.join(timeout=2)
            self._worker = None

    def export_bundle(self) -> ObservationBundle:
        """Current session history wrapped as a collection"""
        with self._lock:
            entries = self.buffer.snapshot()

        return ObservationBundle(
            timestamp=now_local(),
            total=len(entries),
            entry=entries
        )

    def recent(self, limit: int = 50) -> List[Observation]:
        with self._lock:
            entries = self.buffer.snapshot()
        return entries[-limit:] if limit > 0 else []

    def current_status(self) -> ProcessorStatus:
        with self._lock:
            state = self.processor.state
            return ProcessorStatus(
                baseline=round(state.baseline, 3),
                violation_started_at=state.violation_started_at,
                violation_threshold=round(self.processor.violation_threshold, 3),
                total_processed=self.total_processed,
                last_observation=self.last_observation
            )

    def session_stats(self) -> SessionStats:
        with self._lock:
            entries = self.buffer.snapshot()
            total_processed = self.total_processed

        counts = Counter(o.status_text.value for o in entries)
        average = sum(o.score for o in entries) / len(entries) if entries else 0.0

        return SessionStats(
            buffered_observations=len(entries),
            total_processed=total_processed,
            status_counts={status.value: counts.get(status.value, 0) for status in PostureStatus},
            violation_count=counts.get(PostureStatus.VIOLATION.value, 0),
            average_score=round(average, 2)
        )
