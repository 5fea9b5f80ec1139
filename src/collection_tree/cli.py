"""CLI for browsing a catalog's collection tree."""

import asyncio
from typing import Annotated

import typer
from loguru import logger

from collection_tree.api import CatalogApi
from collection_tree.core.tree.breadcrumbs import get_breadcrumbs
from collection_tree.core.tree.node_store import NodeStore
from collection_tree.core.tree.path_resolver import resolve_path
from collection_tree.logging_config import configure_logging
from collection_tree.models.node import ROOT_ID, CollectionNode, FetchStatus
from collection_tree.protocols import CatalogProtocol

app = typer.Typer(help="Collection tree: browse nested collections of a catalog.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _make_catalog(api_url: str | None) -> CatalogProtocol:
    try:
        return CatalogApi(api_url=api_url)
    except RuntimeError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


async def render_tree(store: NodeStore, *, depth: int | None = None) -> list[str]:
    """Walk the tree depth-first and return indented lines."""
    lines = ["My Collection"]
    todo: list[tuple[int, CollectionNode | None]] = [(0, None)]
    seen: set[str] = set()
    while todo:
        level, node = todo.pop()
        parent_id = ROOT_ID
        if node is not None:
            lines.append(f"{'    ' * level}- {node.name} ({node.id})")
            if node.id in seen:
                continue
            seen.add(node.id)
            parent_id = node.id
        if depth is not None and level >= depth:
            continue

        children = await store.get_children(parent_id)
        if store.status(parent_id) is FetchStatus.ERROR:
            lines.append(f"{'    ' * (level + 1)}! failed to load")
        todo.extend((level + 1, child) for child in reversed(children))
    return lines


@app.command()
def tree(
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", help="Levels to show (default: all)"),
    ] = None,
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="GraphQL endpoint"),
    ] = None,
) -> None:
    """Print the collection tree."""
    store = NodeStore(_make_catalog(api_url))
    for line in asyncio.run(render_tree(store, depth=depth)):
        typer.echo(line)


@app.command()
def path(
    target_id: str = typer.Argument(..., help="Collection id to locate"),
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="GraphQL endpoint"),
    ] = None,
) -> None:
    """Print the ancestors of a collection."""
    store = NodeStore(_make_catalog(api_url))
    ancestors = asyncio.run(resolve_path(store, target_id))
    if ancestors is None:
        typer.echo(f"Collection {target_id} not found")
        raise typer.Exit(1)

    names = {ROOT_ID: "My Collection"}
    for parent_id in [ROOT_ID, *ancestors]:
        for child in store.peek(parent_id) or ():
            names[child.id] = child.name
    typer.echo(" > ".join(names.get(i, str(i)) for i in [ROOT_ID, *ancestors, target_id]))


@app.command()
def breadcrumbs(
    collection_id: str = typer.Argument(..., help="Collection id"),
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="GraphQL endpoint"),
    ] = None,
) -> None:
    """Print the collections above a collection, looked up parent by parent."""
    store = NodeStore(_make_catalog(api_url))
    crumbs = asyncio.run(get_breadcrumbs(store, collection_id))
    if crumbs is None:
        typer.echo(f"Collection {collection_id} not found")
        raise typer.Exit(1)
    for crumb in crumbs:
        typer.echo(f"{'  ' * (crumb.depth - 1)}{crumb.name} ({crumb.node_id})")
