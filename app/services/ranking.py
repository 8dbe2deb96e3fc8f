from __future__ import annotations

import heapq
import itertools
from typing import List, Optional, Tuple

from app.models.flights import ScoredCandidate

MIN_LIMIT = 1
MAX_LIMIT = 100


def clamp_limit(limit: int, max_limit: int = MAX_LIMIT) -> int:
    return max(MIN_LIMIT, min(limit, max_limit))


class TopKSelector:
    """
    Keeps the K best (lowest-score) candidates seen so far in a stream.

    Entries are keyed on (score, sequence, arrival), where arrival is the
    selector's own insertion counter, so keys are unique even when callers
    repeat a sequence number. The same key orders the drained result. Storage
    is a max-heap on that key (negated into heapq's min-heap), which makes the
    root the entry to evict: the worst score, and among equal worst scores the
    one offered last.

    offer() is O(log K). drain() sorts the at most K survivors, O(K log K)
    rather than the O(K) an in-order walk of a balanced tree would give; with
    K capped at 100 the heap is kept. drain() closes the selector and any
    further offer() or drain() raises RuntimeError.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._heap: List[Tuple[float, int, int, ScoredCandidate]] = []
        self._arrival = itertools.count()
        self._drained = False

    def __len__(self) -> int:
        return len(self._heap)

    def _check_open(self) -> None:
        if self._drained:
            raise RuntimeError("TopKSelector has already been drained")

    def offer(self, candidate: ScoredCandidate) -> Optional[ScoredCandidate]:
        """Insert a candidate; returns the evicted entry, if any (at most one)."""
        self._check_open()
        entry = (-candidate.score, -candidate.sequence, -next(self._arrival), candidate)
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, entry)
            return None
        # Push then pop the max key in one step; may hand back the newcomer
        return heapq.heappushpop(self._heap, entry)[3]

    def drain(self) -> List[ScoredCandidate]:
        self._check_open()
        self._drained = True
        heap, self._heap = self._heap, []
        return [c for *_, c in sorted(heap, reverse=True)]
