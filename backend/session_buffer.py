"""
Bounded in-memory history of observations
"""

from collections import deque
from typing import List

from config import SESSION_BUFFER_CAPACITY
from models import Observation


class SessionBuffer:
    """
    Oldest-first store of the most recent observations.
    Appending at capacity evicts from the head. Not thread-safe on its own;
    the dispatcher guards it together with the classifier state.
    """

    def __init__(self, capacity: int = SESSION_BUFFER_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: deque = deque()

    def append(self, observation: Observation) -> None:
        self._items.append(observation)
        while len(self._items) > self.capacity:
            self._items.popleft()

    def snapshot(self) -> List[Observation]:
        """Copy of the current contents, oldest first"""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
