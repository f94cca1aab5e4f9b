"""
History Buffer - Fixed-capacity window of recent feature vectors.

Once full, each push evicts the oldest entry. window() always returns the
most recent min(pushes, capacity) vectors, oldest first.
"""

from collections import deque
from typing import List

import numpy as np


class HistoryBuffer:
    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._frames = deque(maxlen=capacity)

    def push(self, frame: np.ndarray):
        self._frames.append(frame)

    def window(self) -> List[np.ndarray]:
        """Copies of the buffered frames, oldest to newest."""
        return [f.copy() for f in self._frames]

    def __len__(self) -> int:
        return len(self._frames)
