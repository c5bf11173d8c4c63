"""Bounded in-process memory store for agents."""

from __future__ import annotations

import json
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from .config import DEFAULT_MEMORY_CAPACITY


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryEntry(BaseModel):
    """One salient event remembered by an agent."""

    content: Any
    type: str = "conversation"  # e.g. "conversation" | "tool_result" | "fact"
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utc_now)
    importance: float = 0.5
    references: list[str] = Field(default_factory=list)


class MemoryStore:
    """Append-only log holding at most ``capacity`` entries.

    When full, the oldest entry is evicted first. Safe to share across
    threads and concurrent runs.
    """

    def __init__(self, capacity: int = DEFAULT_MEMORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: deque[MemoryEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def add(self, entry: MemoryEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def get_recent(self, n: int | None = None) -> list[MemoryEntry]:
        """Newest ``n`` entries (all when ``n`` is None), oldest first."""
        with self._lock:
            entries = list(self._entries)
        if n is None:
            return entries
        if n <= 0:
            return []
        return entries[-n:]

    def search(
        self,
        type: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> list[MemoryEntry]:
        """Entries matching ``type`` and whose context contains every pair in ``context``."""
        with self._lock:
            entries = list(self._entries)
        results: list[MemoryEntry] = []
        for entry in entries:
            if type is not None and entry.type != type:
                continue
            if context and any(entry.context.get(k) != v for k, v in context.items()):
                continue
            results.append(entry)
        return results

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        with self._lock:
            entries = [e.model_dump(mode="json") for e in self._entries]
        return json.dumps({"capacity": self.capacity, "entries": entries})

    @classmethod
    def from_json(cls, raw: str) -> MemoryStore:
        data = json.loads(raw)
        store = cls(capacity=int(data.get("capacity", DEFAULT_MEMORY_CAPACITY)))
        for item in data.get("entries") or []:
            store.add(MemoryEntry.model_validate(item))
        return store
