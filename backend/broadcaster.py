"""
Fan-out of observations to websocket subscribers
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Tuple

from config import BROADCAST_QUEUE_SIZE
from models import Observation

logger = logging.getLogger(__name__)

EVENT_NAME = "fhir-data"


class Broadcaster:
    """
    Delivers each published observation to every subscriber's queue.
    publish() may be called from any thread and never waits on a subscriber.
    A subscriber that falls behind loses its oldest pending messages.
    """

    def __init__(self, queue_size: int = BROADCAST_QUEUE_SIZE):
        self.queue_size = queue_size
        self._subscribers: List[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = []
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        """Register a subscriber. Must be called from the subscriber's event loop."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        with self._lock:
            self._subscribers.append((loop, queue))
        logger.info("Dashboard client connected (%d total)", self.subscriber_count)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers = [(loop, q) for loop, q in self._subscribers if q is not queue]
        logger.info("Dashboard client disconnected (%d total)", self.subscriber_count)

    def publish(self, observation: Observation) -> None:
        message = {
            "event": EVENT_NAME,
            "data": observation.model_dump(mode="json", by_alias=True),
        }

        with self._lock:
            subscribers = list(self._subscribers)

        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(self._offer, queue, message)
            except RuntimeError:
                # Event loop already closed
                self.unsubscribe(queue)

    @staticmethod
    def _offer(queue: asyncio.Queue, message: Dict[str, Any]) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(message)
