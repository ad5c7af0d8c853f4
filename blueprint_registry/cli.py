"""Blueprint Registry CLI -- the main entry point for release automation."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from blueprint_registry import __version__
from blueprint_registry.registry.store import DEFAULT_REGISTRY_PATH

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log per-asset detail")
def main(verbose: bool):
    """Blueprint Registry.

    Keep the blueprint catalog (registry.json) in sync with tagged releases
    of a blueprints repository.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--tag", envvar="TAG", default=None, help="Release tag to sync [env: TAG]")
@click.option(
    "--repo",
    envvar="BLUEPRINTS_REPO",
    default=None,
    help="Blueprints repository, owner/name [env: BLUEPRINTS_REPO]",
)
@click.option(
    "--registry",
    "-r",
    "registry_path",
    envvar="REGISTRY_PATH",
    default=DEFAULT_REGISTRY_PATH,
    show_default=True,
    help="Catalog file",
)
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token [env: GITHUB_TOKEN]")
def sync(tag: str | None, repo: str | None, registry_path: str, token: str | None):
    """Upsert every .zip asset of a release into the catalog."""
    from blueprint_registry.config import SyncConfig
    from blueprint_registry.errors import RegistryError
    from blueprint_registry.sync.reconciler import sync_registry

    try:
        config = SyncConfig.from_env(
            tag=tag, repository=repo, registry_path=registry_path, token=token
        ).validate()
        result = sync_registry(config)
    except RegistryError as e:
        _print_error(str(e))
        sys.exit(1)

    click.echo(result.summary())


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
@click.option(
    "--registry",
    "-r",
    "registry_path",
    envvar="REGISTRY_PATH",
    default=DEFAULT_REGISTRY_PATH,
    show_default=True,
    help="Catalog file",
)
def list_entries(registry_path: str):
    """List all blueprints in the catalog."""
    catalog = _load_or_exit(registry_path)

    if not catalog.blueprints:
        console.print("[yellow]Registry is empty.[/]")
        return

    table = Table(title=f"Registry ({len(catalog)} blueprints)")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Tags")
    table.add_column("Description")

    for entry in catalog.blueprints:
        table.add_row(entry.name, entry.version, ", ".join(entry.tags), entry.description[:50])

    console.print(table)


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option(
    "--registry",
    "-r",
    "registry_path",
    envvar="REGISTRY_PATH",
    default=DEFAULT_REGISTRY_PATH,
    show_default=True,
    help="Catalog file",
)
def show(name: str, registry_path: str):
    """Print one catalog entry as JSON."""
    from blueprint_registry.registry.store import entry_to_dict

    catalog = _load_or_exit(registry_path)
    entry = catalog.get(name)
    if entry is None:
        _print_error(f"no blueprint named '{name}'")
        sys.exit(1)

    click.echo(json.dumps(entry_to_dict(entry), indent=2))


def _print_error(message: str) -> None:
    err_console.print(f"[red]error:[/] {escape(message)}", highlight=False, soft_wrap=True)


def _load_or_exit(registry_path: str):
    from blueprint_registry.errors import DecodeError
    from blueprint_registry.registry.store import CatalogStore

    try:
        return CatalogStore(registry_path).load()
    except DecodeError as e:
        _print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
