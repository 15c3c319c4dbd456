from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from readlater.store.queue import PENDING_ARTICLES_KEY
from readlater.utils.fetch import DEFAULT_USER_AGENT

DEFAULT_STORE_PATH = Path("~/.local/share/readlater/shared.db")


@dataclass
class StoreConfig:
    """Where the shared pending queue lives."""

    path: Path = DEFAULT_STORE_PATH
    key: str = PENDING_ARTICLES_KEY

    def __post_init__(self) -> None:
        self.path = Path(self.path).expanduser()


@dataclass
class FetchConfig:
    timeout: float = 30.0
    max_retries: int = 0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class Config:
    store: StoreConfig = field(default_factory=StoreConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    capture_html: bool = False
    deadline: float = 60.0


def load_config(path: Path) -> Config:
    with open(path, "rb") as f:
        raw = tomllib.load(f)

    store_raw = raw.get("store", {})
    store = StoreConfig(
        path=Path(store_raw.get("path", DEFAULT_STORE_PATH)),
        key=str(store_raw.get("key", PENDING_ARTICLES_KEY)),
    )

    fetch_raw = raw.get("fetch", {})
    fetch = FetchConfig(
        timeout=float(fetch_raw.get("timeout", 30.0)),
        max_retries=int(fetch_raw.get("max_retries", 0)),
        user_agent=str(fetch_raw.get("user_agent", DEFAULT_USER_AGENT)),
    )

    capture_html = bool(raw.get("extract", {}).get("capture_html", False))
    deadline = float(raw.get("share", {}).get("deadline", 60.0))

    return Config(
        store=store,
        fetch=fetch,
        capture_html=capture_html,
        deadline=deadline,
    )
