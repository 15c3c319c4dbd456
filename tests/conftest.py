from __future__ import annotations

from pathlib import Path

import pytest

from readlater.store.base import MemoryStore
from readlater.store.queue import PendingQueue

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_article_html() -> str:
    return (FIXTURES_DIR / "sample_article.html").read_text(encoding="utf-8")


@pytest.fixture
def sample_article_bytes() -> bytes:
    return (FIXTURES_DIR / "sample_article.html").read_bytes()


@pytest.fixture
def memory_queue() -> PendingQueue:
    return PendingQueue(MemoryStore())
