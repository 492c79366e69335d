"""
History Ledger

Bounded, append-only log of periodic snapshots across all junctions.

Features:
- Circular buffer (deque with maxlen) for bounded memory
- Oldest entries evicted from the head
- Most-recent-N reads in chronological order
"""

from collections import deque
from typing import List, Optional

from citysim.models.junction import HistorySnapshot


HISTORY_CAPACITY = 120


class HistoryLedger:
    """
    Store the most recent simulation snapshots

    Usage:
        ledger = HistoryLedger(capacity=120)
        ledger.record(snapshot)
        recent = ledger.read(20)
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        """
        Initialize history ledger

        Args:
            capacity: Maximum number of snapshots kept (default 120)
        """
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._snapshots: deque = deque(maxlen=capacity)
        self.total_recorded = 0

    def record(self, snapshot: HistorySnapshot):
        """
        Append a snapshot at the tail

        The deque drops the oldest snapshot once capacity is exceeded.
        """
        self._snapshots.append(snapshot)
        self.total_recorded += 1

    def read(self, limit: int) -> List[HistorySnapshot]:
        """
        Get the most recent snapshots

        Args:
            limit: Maximum number of snapshots to return

        Returns:
            Up to `limit` snapshots, oldest first
        """
        if limit <= 0:
            return []
        count = min(limit, len(self._snapshots))
        return list(self._snapshots)[-count:]

    def latest(self) -> Optional[HistorySnapshot]:
        """Get the newest snapshot, if any"""
        if not self._snapshots:
            return None
        return self._snapshots[-1]

    def clear(self):
        """Drop all snapshots"""
        self._snapshots.clear()

    def get_stats(self) -> dict:
        """Get ledger statistics"""
        return {
            'entries': len(self._snapshots),
            'capacity': self.capacity,
            'totalRecorded': self.total_recorded
        }

    def __len__(self) -> int:
        return len(self._snapshots)
