from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from readlater.config import Config, load_config
from readlater.errors import StorageUnavailable
from readlater.share import run_share
from readlater.store.queue import PendingQueue
from readlater.store.sqlite import SQLiteStore
from readlater.utils.fetch import fetch_url
from readlater.utils.retry import with_retry

DEFAULT_CONFIG_PATH = Path("config.toml")

console = Console()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="readlater-share",
        description="Save a web article or a piece of text to the reader's pending queue.",
    )
    parser.add_argument("content", nargs="?", help="URL or text to share")
    parser.add_argument("--config", type=Path, help="path to config.toml")
    parser.add_argument("--list", action="store_true", help="show the pending queue")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _resolve_config(path: Path | None) -> Config:
    if path is not None:
        if not path.exists():
            console.print(f"[red]Config file not found:[/red] {path}")
            sys.exit(1)
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return Config()


def _open_queue(config: Config) -> PendingQueue:
    config.store.path.parent.mkdir(parents=True, exist_ok=True)
    return PendingQueue(SQLiteStore(config.store.path), key=config.store.key)


def _print_queue(queue: PendingQueue) -> None:
    articles = queue.load()
    if not articles:
        console.print("[dim]pending queue is empty[/dim]")
        return

    table = Table(title=f"{len(articles)} pending article(s)")
    table.add_column("Title")
    table.add_column("Source", style="cyan")
    table.add_column("Added", style="dim")
    table.add_column("Length", justify="right")
    for article in articles:
        table.add_row(
            escape(article.title),
            article.display_source,
            article.date_added.strftime("%Y-%m-%d %H:%M"),
            article.formatted_reading_time,
        )
    console.print(table)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    config = _resolve_config(args.config)

    try:
        queue = _open_queue(config)
    except (StorageUnavailable, OSError) as exc:
        console.print(f"  [red]✗ Shared store unavailable:[/red] {exc}")
        sys.exit(1)

    if args.list:
        try:
            _print_queue(queue)
        except StorageUnavailable as exc:
            console.print(f"  [red]✗ Shared store unavailable:[/red] {exc}")
            sys.exit(1)
        return

    if not args.content:
        console.print("[red]Nothing to share:[/red] pass a URL or some text")
        sys.exit(2)

    fetcher = partial(
        with_retry,
        fetch_url,
        max_retries=config.fetch.max_retries,
        timeout=config.fetch.timeout,
        user_agent=config.fetch.user_agent,
    )

    with console.status("Saving to Reader..."):
        result = run_share(
            args.content,
            queue,
            deadline=config.deadline,
            fetcher=fetcher,
            capture_html=config.capture_html,
        )

    if result.ok:
        console.print(f"  [green]✓[/green] {escape(result.message)}")
        return
    console.print(f"  [red]✗ {escape(result.message)}[/red]")
    sys.exit(1)


if __name__ == "__main__":
    main()
