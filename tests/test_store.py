from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from readlater.errors import StorageUnavailable
from readlater.extractor.article import extract_from_url, wrap_plain_text
from readlater.models import Article, Chapter, encode_queue
from readlater.store.base import MemoryStore
from readlater.store.queue import PENDING_ARTICLES_KEY, PendingQueue
from readlater.store.sqlite import SQLiteStore


def _article(title: str) -> Article:
    return Article(
        title=title,
        source="Shared Text",
        chapters=(Chapter(title=title, content=f"Body of {title}"),),
    )


class SlowMemoryStore(MemoryStore):
    """Widens the read-modify-write window so unsynchronized writers would collide."""

    def get(self, key: str) -> bytes | None:
        value = super().get(key)
        time.sleep(0.02)
        return value


class TestMemoryStore:
    def test_get_missing(self) -> None:
        assert MemoryStore().get("nope") is None

    def test_set_then_get(self) -> None:
        store = MemoryStore()
        store.set("k", b"v")
        assert store.get("k") == b"v"

    def test_update_receives_current_value(self) -> None:
        store = MemoryStore()
        seen: list[bytes | None] = []

        def fn(current: bytes | None) -> bytes:
            seen.append(current)
            return (current or b"") + b"x"

        store.update("k", fn)
        store.update("k", fn)
        assert seen == [None, b"x"]
        assert store.get("k") == b"xx"

    def test_update_failure_leaves_value(self) -> None:
        store = MemoryStore()
        store.set("k", b"orig")

        def boom(current: bytes | None) -> bytes:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            store.update("k", boom)
        assert store.get("k") == b"orig"


class TestSQLiteStore:
    def test_roundtrip(self, tmp_path: Path) -> None:
        store = SQLiteStore(tmp_path / "shared.db")
        assert store.get("k") is None
        store.set("k", b"\x00\x01bytes")
        assert store.get("k") == b"\x00\x01bytes"

    def test_shared_between_instances(self, tmp_path: Path) -> None:
        SQLiteStore(tmp_path / "shared.db").set("k", b"one")
        assert SQLiteStore(tmp_path / "shared.db").get("k") == b"one"

    def test_update(self, tmp_path: Path) -> None:
        store = SQLiteStore(tmp_path / "shared.db")
        store.update("k", lambda cur: (cur or b"") + b"a")
        written = store.update("k", lambda cur: (cur or b"") + b"b")
        assert written == b"ab"
        assert store.get("k") == b"ab"

    def test_update_failure_rolls_back(self, tmp_path: Path) -> None:
        store = SQLiteStore(tmp_path / "shared.db")
        store.set("k", b"orig")

        def boom(current: bytes | None) -> bytes:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            store.update("k", boom)
        assert store.get("k") == b"orig"
        # The write lock was released.
        store.set("k", b"next")
        assert store.get("k") == b"next"

    def test_missing_directory_is_storage_unavailable(self, tmp_path: Path) -> None:
        with pytest.raises(StorageUnavailable) as exc_info:
            SQLiteStore(tmp_path / "no" / "such" / "dir" / "shared.db")
        assert exc_info.value.kind == "storage_unavailable"

    def test_path_is_a_directory(self, tmp_path: Path) -> None:
        with pytest.raises(StorageUnavailable):
            SQLiteStore(tmp_path)


class TestPendingQueue:
    def test_default_key(self) -> None:
        store = MemoryStore()
        PendingQueue(store).append(_article("One"))
        assert store.get(PENDING_ARTICLES_KEY) is not None

    def test_newest_first(self, memory_queue: PendingQueue) -> None:
        for title in ("First", "Second", "Third"):
            memory_queue.append(_article(title))
        assert [a.title for a in memory_queue.load()] == ["Third", "Second", "First"]

    def test_preserves_existing_items(self) -> None:
        store = MemoryStore()
        existing = [_article("Old 1"), _article("Old 2")]
        store.set(PENDING_ARTICLES_KEY, encode_queue(existing))

        queue = PendingQueue(store)
        new = _article("New")
        queue.append(new)
        assert queue.load() == [new, *existing]

    def test_empty_load(self, memory_queue: PendingQueue) -> None:
        assert memory_queue.load() == []

    @pytest.mark.parametrize("blob", [b"", b"garbage", b"{}", b'[{"id": 1}]'])
    def test_corrupt_queue_treated_as_empty(self, blob: bytes) -> None:
        store = MemoryStore()
        store.set(PENDING_ARTICLES_KEY, blob)
        queue = PendingQueue(store)
        article = _article("Fresh")

        queue.append(article)
        assert queue.load() == [article]

    def test_corrupt_queue_is_logged(self, caplog) -> None:
        store = MemoryStore()
        store.set(PENDING_ARTICLES_KEY, b"garbage")
        with caplog.at_level("WARNING", logger="readlater.store.queue"):
            PendingQueue(store).append(_article("Fresh"))
        assert "undecodable" in caplog.text

    def test_custom_key(self) -> None:
        store = MemoryStore()
        PendingQueue(store, key="otherQueue").append(_article("x"))
        assert store.get(PENDING_ARTICLES_KEY) is None
        assert PendingQueue(store, key="otherQueue").load()[0].title == "x"

    def test_storage_failure_propagates(self, tmp_path: Path) -> None:
        store = SQLiteStore(tmp_path / "shared.db")
        (tmp_path / "shared.db").unlink()
        (tmp_path / "shared.db").mkdir()
        with pytest.raises(StorageUnavailable):
            PendingQueue(store).append(_article("lost?"))


class TestConcurrentAppend:
    def test_two_shares_in_flight_both_kept(self) -> None:
        queue = PendingQueue(SlowMemoryStore())
        html = b"<title>From the web</title><article><p>Body</p></article>"
        articles = [
            extract_from_url(html, "https://example.com/a"),
            wrap_plain_text("Notes\nshared at the same time"),
        ]
        barrier = threading.Barrier(len(articles))

        def _append(article: Article) -> None:
            barrier.wait()
            queue.append(article)

        with ThreadPoolExecutor(max_workers=len(articles)) as pool:
            list(pool.map(_append, articles))

        stored = queue.load()
        assert len(stored) == 2
        assert {a.id for a in stored} == {a.id for a in articles}

    def test_many_concurrent_appends_memory(self) -> None:
        queue = PendingQueue(SlowMemoryStore())
        articles = [_article(f"Article {i}") for i in range(8)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(queue.append, articles))

        assert {a.id for a in queue.load()} == {a.id for a in articles}

    def test_concurrent_appends_sqlite_separate_handles(self, tmp_path: Path) -> None:
        path = tmp_path / "shared.db"
        SQLiteStore(path)
        articles = [_article(f"Article {i}") for i in range(6)]
        barrier = threading.Barrier(len(articles))

        def _append(article: Article) -> None:
            # Each writer opens its own store, as separate processes would.
            queue = PendingQueue(SQLiteStore(path, timeout=30))
            barrier.wait()
            queue.append(article)

        with ThreadPoolExecutor(max_workers=len(articles)) as pool:
            list(pool.map(_append, articles))

        stored = PendingQueue(SQLiteStore(path)).load()
        assert len(stored) == len(articles)
        assert {a.id for a in stored} == {a.id for a in articles}

    def test_unsynchronized_read_then_write_loses_an_article(self) -> None:
        store = SlowMemoryStore()
        barrier = threading.Barrier(2)

        def _naive_append(article: Article) -> None:
            barrier.wait()
            current = PendingQueue(store).load()
            store.set(PENDING_ARTICLES_KEY, encode_queue([article, *current]))

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(_naive_append, [_article("A"), _article("B")]))

        # Both writers read the empty queue, so the last write wins.
        assert len(PendingQueue(store).load()) == 1
