"""Reconciler -- merge a tagged release into the blueprint catalog.

For each ``.zip`` asset of the release (in the order the API lists them) the
reconciler resolves the blueprint's manifest, fills in fallbacks, builds a
catalog entry, and upserts it by name. The upsert is idempotent: applying the
same entry twice yields the same catalog as applying it once. When two assets
resolve to the same name, the one applied last wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from blueprint_registry.config import SyncConfig
from blueprint_registry.github.client import GitHubClient
from blueprint_registry.github.manifests import ManifestResolver, apply_fallbacks
from blueprint_registry.github.releases import ReleaseFetcher
from blueprint_registry.registry.models import Blueprint, Catalog, Manifest, ReleaseAsset
from blueprint_registry.registry.store import CatalogStore

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"
REPO_HOST = "github.com"


@dataclass
class SyncResult:
    """Outcome of reconciling one release into a catalog."""

    tag: str
    catalog: Catalog
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # Asset names, not blueprints
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)

    def summary(self) -> str:
        return (
            f"registry updated for {self.tag} at "
            f"{self.completed_at.isoformat(timespec='seconds')} "
            f"with {len(self.catalog)} entries"
        )


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def blueprint_id_for_asset(asset_name: str) -> str | None:
    """Return the blueprint id for a package archive, or None to skip the asset."""
    if not asset_name.endswith(ARCHIVE_SUFFIX):
        return None
    blueprint_id = asset_name[: -len(ARCHIVE_SUFFIX)]
    return blueprint_id or None


def build_entry(
    repository: str,
    asset: ReleaseAsset,
    blueprint_path: str,
    manifest: Manifest,
) -> Blueprint:
    """Build a catalog entry from a release asset and its resolved manifest."""
    return Blueprint(
        name=manifest.name,
        version=manifest.version,
        repo=f"{REPO_HOST}/{repository}",
        path=blueprint_path,
        download_url=asset.download_url,
        description=manifest.description,
        tags=list(manifest.tags),
    )


def upsert(catalog: Catalog, entry: Blueprint) -> Catalog:
    """Insert ``entry`` or fully replace the entry with the same name.

    A replaced entry keeps its position; a new entry is appended. The input
    catalog is not modified.
    """
    blueprints = list(catalog.blueprints)
    for i, existing in enumerate(blueprints):
        if existing.name == entry.name:
            blueprints[i] = replace(entry, tags=list(entry.tags))
            return Catalog(blueprints=blueprints)
    blueprints.append(replace(entry, tags=list(entry.tags)))
    return Catalog(blueprints=blueprints)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


class Reconciler:
    """Builds catalog entries from a release and upserts them into a catalog."""

    def __init__(self, fetcher: ReleaseFetcher, resolver: ManifestResolver):
        self.fetcher = fetcher
        self.resolver = resolver

    def reconcile(self, catalog: Catalog, repository: str, tag: str) -> SyncResult:
        """Reconcile the release tagged ``tag`` into ``catalog``.

        The release lookup happens before any upsert, so a FetchError leaves
        the catalog untouched. Manifest failures never raise.
        """
        release = self.fetcher.fetch_release(repository, tag)
        result = SyncResult(tag=tag, catalog=catalog)

        for asset in release.assets:
            blueprint_id = blueprint_id_for_asset(asset.name)
            if blueprint_id is None:
                logger.debug(f"Skipping non-archive asset {asset.name}")
                result.skipped.append(asset.name)
                continue

            manifest = self.resolver.resolve_manifest(repository, tag, blueprint_id)
            manifest = apply_fallbacks(manifest, tag, blueprint_id)
            entry = build_entry(
                repository, asset, self.resolver.blueprint_path(blueprint_id), manifest
            )

            if result.catalog.get(entry.name) is None:
                result.added.append(entry.name)
                logger.info(f"Adding {entry.qualified_id}")
            else:
                if entry.name not in result.added and entry.name not in result.updated:
                    result.updated.append(entry.name)
                logger.info(f"Updating {entry.qualified_id}")

            result.catalog = upsert(result.catalog, entry)

        result.completed_at = datetime.now(timezone.utc)
        return result


def sync_registry(config: SyncConfig, client: GitHubClient | None = None) -> SyncResult:
    """Run one sync: load the catalog, reconcile ``config.tag``, save.

    ``config`` must already be validated. The catalog is written only after
    every upsert has been computed.
    """
    store = CatalogStore(config.registry_path)
    catalog = store.load()

    with client or GitHubClient.from_config(config) as gh:
        reconciler = Reconciler(ReleaseFetcher(gh), ManifestResolver(gh))
        result = reconciler.reconcile(catalog, config.repository, config.tag)

    store.save(result.catalog)
    logger.info(
        f"Synced {config.repository}@{config.tag}: "
        f"{len(result.added)} added, {len(result.updated)} updated, "
        f"{len(result.skipped)} assets skipped"
    )
    return result
