"""embark CLI — document store backed by one file per document.

Commands:
    embark init                     create embark.toml + data dir
    embark insert TAG [CONTENT]     store a document, print its key
    embark get TAG ID               print a document
    embark update TAG ID [CONTENT]  replace a document's content
    embark delete TAG ID            remove a document
    embark list TAG                 every document in a collection
    embark status                   data dir, key counter, collection sizes

CONTENT defaults to stdin when omitted or "-".
"""

from __future__ import annotations

import contextlib
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click

from embark.config import EmbarkConfig, init_config, load_config
from embark.errors import EmbarkError
from embark.store import FileDataStore

if TYPE_CHECKING:
    from collections.abc import Iterator

_LOG_FORMAT = "%(asctime)s %(name)s %(message)s"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> EmbarkConfig:
    try:
        return load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _open_store(ctx: click.Context, cfg: EmbarkConfig | None = None) -> FileDataStore:
    if cfg is None:
        cfg = _load_cfg()
    level = logging.DEBUG if ctx.obj.get("verbose") else cfg.logging.level_no
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    with _store_errors():
        return FileDataStore.from_config(cfg)


@contextlib.contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except (EmbarkError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc


def _read_content(content: str | None) -> str:
    if content is None or content == "-":
        return click.get_text_stream("stdin").read()
    return content


def _not_found(tag: str, doc_id: str) -> None:
    click.echo(f"Not found: {tag}/{doc_id}", err=True)
    raise SystemExit(1)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="embark")
@click.option("-v", "--verbose", is_flag=True, help="Log store operations to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """embark — filesystem document store."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# embark init
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
@click.option("--data-dir", default=None, help="Store directory, relative to the project root")
def init(root: str, data_dir: str | None) -> None:
    """Create embark.toml and the store directory."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, data_dir=data_dir)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("embark.toml already exists — skipping init")

    try:
        cfg = load_config(root_path)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    cfg.ensure_dirs()
    click.echo(f"Data dir : {cfg.store.data_dir}")


# ---------------------------------------------------------------------------
# embark insert / get / update / delete
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("tag")
@click.argument("content", required=False)
@click.pass_context
def insert(ctx: click.Context, tag: str, content: str | None) -> None:
    """Store CONTENT in collection TAG and print the new key."""
    store = _open_store(ctx)
    text = _read_content(content)
    with _store_errors():
        key = store.insert(tag, text)
    click.echo(key)


@cli.command()
@click.argument("tag")
@click.argument("doc_id", metavar="ID")
@click.pass_context
def get(ctx: click.Context, tag: str, doc_id: str) -> None:
    """Print a document's content."""
    store = _open_store(ctx)
    with _store_errors():
        text = store.get(tag, doc_id)
    if text is None:
        _not_found(tag, doc_id)
    click.echo(text, nl=False)


@cli.command()
@click.argument("tag")
@click.argument("doc_id", metavar="ID")
@click.argument("content", required=False)
@click.pass_context
def update(ctx: click.Context, tag: str, doc_id: str, content: str | None) -> None:
    """Replace an existing document's content."""
    store = _open_store(ctx)
    text = _read_content(content)
    with _store_errors():
        found = store.update(tag, doc_id, text)
    if not found:
        _not_found(tag, doc_id)
    click.echo(f"Updated {tag}/{doc_id}")


@cli.command()
@click.argument("tag")
@click.argument("doc_id", metavar="ID")
@click.pass_context
def delete(ctx: click.Context, tag: str, doc_id: str) -> None:
    """Remove a document."""
    store = _open_store(ctx)
    with _store_errors():
        found = store.delete(tag, doc_id)
    if not found:
        _not_found(tag, doc_id)
    click.echo(f"Deleted {tag}/{doc_id}")


# ---------------------------------------------------------------------------
# embark list
# ---------------------------------------------------------------------------


@cli.command(name="list")
@click.argument("tag")
@click.option("--json", "as_json", is_flag=True, help="One JSON object per line")
@click.pass_context
def list_cmd(ctx: click.Context, tag: str, as_json: bool) -> None:
    """Show every document in collection TAG.

    Unreadable entries are reported on stderr and make the exit code 1;
    everything readable is still shown.
    """
    store = _open_store(ctx)
    with _store_errors():
        result = store.scan(tag)
    envelopes = sorted(result.envelopes, key=lambda e: e.id)

    if as_json:
        for env in envelopes:
            click.echo(json.dumps(env.to_dict()))
    else:
        from rich.console import Console
        from rich.markup import escape
        from rich.table import Table

        table = Table(title=f"{tag} ({len(envelopes)})", show_header=True, header_style="bold")
        table.add_column("ID", justify="right", no_wrap=True)
        table.add_column("Content")
        for env in envelopes:
            table.add_row(str(env.id), escape(env.text))
        Console().print(table)

    for failure in result.failures:
        click.echo(f"Unreadable: {tag}/{failure.name}: {failure.error}", err=True)
    if not result.ok:
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# embark status
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show data dir, key counter, and collection sizes."""
    from rich.console import Console
    from rich.table import Table

    cfg = _load_cfg()
    store = _open_store(ctx, cfg)

    table = Table(title="embark", show_header=True, header_style="bold")
    table.add_column("Metric", style="dim", no_wrap=True)
    table.add_column("Value", justify="right")

    from importlib.metadata import version as _pkg_version
    try:
        _ver = _pkg_version("embark")
    except Exception:
        _ver = "unknown"
    table.add_row("Version", _ver)
    table.add_row("Config", str(cfg.config_path) if cfg.config_path.exists() else "[dim]defaults[/dim]")
    table.add_row("Data dir", str(store.base_dir))
    table.add_row("Lock mode", store.lock_mode)
    table.add_row("Last key", str(store.last_key))
    table.add_row("", "")

    with _store_errors():
        tags = store.collections()
        if not tags:
            table.add_row("Collections", "[dim]none[/dim]")
        for tag in tags:
            table.add_row(f"  {tag}", str(store.count(tag)))

    Console().print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
