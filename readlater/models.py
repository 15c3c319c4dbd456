"""Article / Chapter value objects and the pending-queue wire format.

The queue is read by a separate reader application, so the JSON field names
and encodings here are a contract: camelCase keys, upper-case UUID strings,
``dateAdded`` as seconds since 2001-01-01 UTC, and optional fields omitted
when unset.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)
WORDS_PER_MINUTE = 200


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Chapter:
    title: str
    content: str
    html_content: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def word_count(self) -> int:
        return len(self.content.split())


@dataclass(frozen=True)
class Article:
    title: str
    source: str
    chapters: tuple[Chapter, ...]
    source_url: str | None = None
    author: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    date_added: datetime = field(default_factory=_now)
    last_read_chapter: int = 0
    last_read_position: int = 0

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as a tuple.
        object.__setattr__(self, "chapters", tuple(self.chapters))
        if not self.title:
            raise ValueError("Article title must not be empty")
        if not self.chapters:
            raise ValueError("Article must have at least one chapter")
        for chapter in self.chapters:
            if not chapter.content.strip():
                raise ValueError("Chapter content must not be empty")

    @property
    def total_word_count(self) -> int:
        return sum(c.word_count for c in self.chapters)

    @property
    def reading_time_minutes(self) -> int:
        return max(1, self.total_word_count // WORDS_PER_MINUTE)

    @property
    def formatted_reading_time(self) -> str:
        minutes = self.reading_time_minutes
        if minutes < 60:
            return f"{minutes} min read"
        hours, mins = divmod(minutes, 60)
        return f"{hours}h {mins}m read" if mins else f"{hours}h read"

    @property
    def display_source(self) -> str:
        host = urlsplit(self.source_url).hostname if self.source_url else None
        if host:
            return strip_www(host)
        return self.source


def strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


# ------------------------------------------------------------------
# Wire format
# ------------------------------------------------------------------


def _encode_date(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - REFERENCE_DATE).total_seconds()


def _decode_date(raw: object) -> datetime:
    if isinstance(raw, bool):
        raise ValueError(f"Invalid date: {raw!r}")
    if isinstance(raw, (int, float)):
        return REFERENCE_DATE + timedelta(seconds=raw)
    if isinstance(raw, str):
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ValueError(f"Invalid date: {raw!r}")


def chapter_to_dict(chapter: Chapter) -> dict:
    data = {
        "id": str(chapter.id).upper(),
        "title": chapter.title,
        "content": chapter.content,
    }
    if chapter.html_content is not None:
        data["htmlContent"] = chapter.html_content
    return data


def chapter_from_dict(data: dict) -> Chapter:
    return Chapter(
        id=uuid.UUID(data["id"]),
        title=data["title"],
        content=data["content"],
        html_content=data.get("htmlContent"),
    )


def article_to_dict(article: Article) -> dict:
    data: dict = {
        "id": str(article.id).upper(),
        "title": article.title,
        "source": article.source,
    }
    if article.source_url is not None:
        data["sourceURL"] = article.source_url
    if article.author is not None:
        data["author"] = article.author
    data["chapters"] = [chapter_to_dict(c) for c in article.chapters]
    data["dateAdded"] = _encode_date(article.date_added)
    data["lastReadChapter"] = article.last_read_chapter
    data["lastReadPosition"] = article.last_read_position
    return data


def article_from_dict(data: dict) -> Article:
    return Article(
        id=uuid.UUID(data["id"]),
        title=data["title"],
        source=data["source"],
        source_url=data.get("sourceURL"),
        author=data.get("author"),
        chapters=tuple(chapter_from_dict(c) for c in data["chapters"]),
        date_added=_decode_date(data["dateAdded"]),
        last_read_chapter=int(data.get("lastReadChapter", 0)),
        last_read_position=int(data.get("lastReadPosition", 0)),
    )


def encode_queue(articles: list[Article]) -> bytes:
    payload = [article_to_dict(a) for a in articles]
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def decode_queue(blob: bytes) -> list[Article]:
    """Decode a serialized queue.

    Raises ``ValueError`` for anything that is not a JSON array of valid
    Article objects.
    """
    try:
        payload = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Queue payload is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError("Queue payload must be a JSON array")
    try:
        return [article_from_dict(item) for item in payload]
    except (KeyError, TypeError, AttributeError, OverflowError) as exc:
        raise ValueError(f"Malformed article in queue: {exc!r}") from exc
