from collections import deque
from itertools import count
from typing import Deque, List

from ..models.dice import HistoryEntry, RollResult

HISTORY_CAPACITY = 10


class RollHistoryBuffer:
    """Most recent rolls, newest first, never more than HISTORY_CAPACITY."""

    def __init__(self):
        self._entries: Deque[HistoryEntry] = deque(maxlen=HISTORY_CAPACITY)
        self._ids = count(1)

    def record(self, result: RollResult) -> HistoryEntry:
        entry = HistoryEntry(id=next(self._ids), result=result)
        self.push(entry)
        return entry

    def push(self, entry: HistoryEntry):
        # appendleft on a full deque drops the oldest entry from the right
        self._entries.appendleft(entry)

    def clear(self):
        self._entries.clear()

    def list(self) -> List[HistoryEntry]:
        return [entry for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> dict:
        return {
            "capacity": HISTORY_CAPACITY,
            "entries": [entry.to_dict() for entry in self._entries],
        }
