"""Command-line interface for inspecting and editing wiki snapshots."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import frontmatter
import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from . import snapshot
from .config import WikiConfig, load_config
from .editor.binding import table_html
from .editor.converters import ContentConverter
from .errors import ConfigError, SnapshotError
from .pages.models import ROOT_PAGE_ID, Page
from .pages.store import PageStore
from .pages.tree import TreeNode, build_forest
from .workspace import WikiWorkspace

app = typer.Typer(help="Browse and edit a hierarchical wiki held in a JSON snapshot.")
console = Console()
err_console = Console(stderr=True)

LOGGER_NAME = "wiki_editor"


def _configure_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Set the package logger level from ``-v`` flags, falling back to configuration."""

    if verbosity <= 0:
        level = logging.getLevelName(default_level)
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(level)
    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        app_logger.addHandler(handler)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a configuration TOML file",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log output (-v for INFO, -vv for DEBUG)",
    ),
) -> None:
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    _configure_logging(verbose, config.log_level)
    ctx.obj = {"config": config}


def _config(ctx: typer.Context) -> WikiConfig:
    return ctx.obj["config"]


def _read_store(path: Path) -> PageStore:
    if not path.exists():
        raise typer.BadParameter(f"Snapshot {path} does not exist")
    try:
        return snapshot.store_from_text(path.read_text(encoding="utf-8"))
    except SnapshotError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _require_page(store: PageStore, page_id: str) -> Page:
    page = store.get_page(page_id)
    if page is None:
        raise typer.BadParameter(f"Unknown page id {page_id!r}")
    return page


def _label(page: Page) -> str:
    title = escape(page.title) if page.title else "[italic](untitled)[/italic]"
    return f"{title} [dim]{escape(page.id)}[/dim]"


def _add_branch(tree: Tree, node: TreeNode) -> None:
    branch = tree.add(_label(node.page))
    for child in node.children:
        _add_branch(branch, child)


@app.command()
def seed(
    ctx: typer.Context,
    children: Optional[list[str]] = typer.Option(
        None,
        "--child",
        help="Title of a page to create under the root (repeatable)",
    ),
) -> None:
    """Print a fresh snapshot holding the root page and optional children."""

    config = _config(ctx)
    store = PageStore(root_title=config.root.title, root_content=config.root.content)
    for title in children or []:
        store.add_page(title, ROOT_PAGE_ID)
    typer.echo(snapshot.dumps(store.pages))


@app.command()
def tree(
    snapshot_path: Path = typer.Argument(..., help="JSON snapshot of the page collection"),
) -> None:
    """Render the page hierarchy of a snapshot."""

    store = _read_store(snapshot_path)
    forest = build_forest(store.pages)
    root = Tree(f"[bold]Pages[/bold] ({len(store)})")
    for node in forest.roots:
        _add_branch(root, node)
    if forest.orphans:
        orphans = root.add("[yellow]Orphans[/yellow]")
        for node in forest.orphans:
            _add_branch(orphans, node)
    if forest.detached:
        detached = root.add("[red]Detached[/red]")
        for page in forest.detached:
            detached.add(_label(page))
    console.print(root)


@app.command()
def show(
    snapshot_path: Path = typer.Argument(..., help="JSON snapshot of the page collection"),
    page_id: str = typer.Argument(..., help="Identifier of the page to print"),
    html: bool = typer.Option(False, "--html", help="Print the stored HTML instead of Markdown"),
) -> None:
    """Print a page as Markdown with YAML frontmatter."""

    page = _require_page(_read_store(snapshot_path), page_id)
    body = page.content if html else ContentConverter().html_to_markdown(page.content)
    post = frontmatter.Post(body)
    post.metadata.update(
        {
            "id": page.id,
            "title": page.title,
            "parent_id": page.parent_id,
        }
    )
    typer.echo(frontmatter.dumps(post))


@app.command()
def table(
    rows: int = typer.Argument(..., min=1, help="Number of rows"),
    cols: int = typer.Argument(..., min=1, help="Number of columns"),
) -> None:
    """Print the HTML the editor inserts for a table."""

    typer.echo(table_html(rows, cols))


@app.command("insert-table")
def insert_table(
    ctx: typer.Context,
    snapshot_path: Path = typer.Argument(..., help="JSON snapshot of the page collection"),
    page_id: str = typer.Argument(..., help="Page receiving the table"),
    rows: int = typer.Option(..., "--rows", "-r", min=1, help="Number of rows"),
    cols: int = typer.Option(..., "--cols", "-k", min=1, help="Number of columns"),
) -> None:
    """Append an empty table to a page and print the updated snapshot."""

    store = _read_store(snapshot_path)
    _require_page(store, page_id)
    workspace = WikiWorkspace(store, config=_config(ctx))
    workspace.select_page(page_id)
    workspace.insert_table(rows, cols)
    workspace.run_pending()
    typer.echo(snapshot.dumps(store.pages))


@app.command("insert-image")
def insert_image(
    ctx: typer.Context,
    snapshot_path: Path = typer.Argument(..., help="JSON snapshot of the page collection"),
    page_id: str = typer.Argument(..., help="Page receiving the image"),
    image: Path = typer.Argument(..., help="Image file to embed as a data URI"),
) -> None:
    """Embed an image file at the end of a page and print the updated snapshot."""

    store = _read_store(snapshot_path)
    _require_page(store, page_id)
    warnings: list[str] = []
    workspace = WikiWorkspace(store, config=_config(ctx), on_warning=warnings.append)
    workspace.select_page(page_id)
    workspace.upload_image(image)
    workspace.run_pending()
    if warnings:
        for message in warnings:
            err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
        raise typer.Exit(code=1)
    typer.echo(snapshot.dumps(store.pages))


def run() -> None:
    """Entry point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    run()
