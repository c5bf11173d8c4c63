"""Unit tests for the bounded memory store."""
from __future__ import annotations

import threading
import unittest

from agent_swarm import MemoryEntry, MemoryStore


class TestMemoryStore(unittest.TestCase):
    def test_evicts_oldest_when_full(self) -> None:
        store = MemoryStore(capacity=3)
        for i in range(5):
            store.add(MemoryEntry(content=f"m{i}"))
        self.assertEqual(len(store), 3)
        self.assertEqual([e.content for e in store.get_recent()], ["m2", "m3", "m4"])

    def test_get_recent(self) -> None:
        store = MemoryStore()
        for i in range(4):
            store.add(MemoryEntry(content=i))
        self.assertEqual([e.content for e in store.get_recent(2)], [2, 3])
        self.assertEqual(store.get_recent(0), [])
        self.assertEqual(len(store.get_recent(10)), 4)

    def test_search_by_type_and_context(self) -> None:
        store = MemoryStore()
        store.add(MemoryEntry(content="a", type="tool_result", context={"tool": "x", "agent": "A"}))
        store.add(MemoryEntry(content="b", type="tool_result", context={"tool": "y", "agent": "A"}))
        store.add(MemoryEntry(content="c", type="conversation", context={"agent": "A"}))
        self.assertEqual([e.content for e in store.search(type="tool_result")], ["a", "b"])
        self.assertEqual([e.content for e in store.search(context={"tool": "y"})], ["b"])
        self.assertEqual([e.content for e in store.search(context={"agent": "A"})], ["a", "b", "c"])
        self.assertEqual(store.search(type="fact"), [])

    def test_clear(self) -> None:
        store = MemoryStore()
        store.add(MemoryEntry(content="x"))
        store.clear()
        self.assertEqual(len(store), 0)

    def test_invalid_capacity(self) -> None:
        with self.assertRaises(ValueError):
            MemoryStore(capacity=0)

    def test_json_snapshot(self) -> None:
        store = MemoryStore(capacity=5)
        store.add(MemoryEntry(content="remember me", type="fact", importance=0.9, references=["call_1"]))
        restored = MemoryStore.from_json(store.to_json())
        self.assertEqual(restored.capacity, 5)
        entry = restored.get_recent()[0]
        self.assertEqual(entry.content, "remember me")
        self.assertEqual(entry.type, "fact")
        self.assertEqual(entry.importance, 0.9)
        self.assertEqual(entry.references, ["call_1"])
        self.assertEqual(entry.timestamp, store.get_recent()[0].timestamp)

    def test_concurrent_adds(self) -> None:
        store = MemoryStore(capacity=1000)

        def writer(prefix: str) -> None:
            for i in range(100):
                store.add(MemoryEntry(content=f"{prefix}{i}"))

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(store), 400)


if __name__ == "__main__":
    unittest.main()
