"""Manifest resolution with filename/tag fallbacks.

Each blueprint may ship ``blueprints/<id>/manifest.yaml`` in the repository at
the release tag::

    name: alpha
    version: 1.2.3
    description: Alpha service scaffold
    tags: [web, go]

Every field is optional. Failing to obtain a manifest never aborts a run: a
missing, unreachable, or malformed document resolves to an empty manifest and
the fallbacks apply. The cause is still logged so authoring mistakes can be
diagnosed.
"""

from __future__ import annotations

import logging
import posixpath

import yaml

from blueprint_registry.errors import FetchError
from blueprint_registry.github.client import GitHubClient
from blueprint_registry.registry.models import Manifest

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_ROOT = "blueprints"
DEFAULT_MANIFEST_NAME = "manifest.yaml"

# Implicit types that would rewrite scalars (1.10 -> 1.1, 010 -> 8, yes -> True)
_TYPED_SCALAR_TAGS = {
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:timestamp",
}


class _TextLoader(yaml.SafeLoader):
    """SafeLoader that keeps scalars as written. Only null is still resolved."""


_TextLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TYPED_SCALAR_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class ManifestResolver:
    """Fetches and parses per-blueprint manifests."""

    def __init__(
        self,
        client: GitHubClient,
        package_root: str = DEFAULT_PACKAGE_ROOT,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
    ):
        self.client = client
        self.package_root = package_root
        self.manifest_name = manifest_name

    def blueprint_path(self, blueprint_id: str) -> str:
        return posixpath.normpath(posixpath.join(self.package_root, blueprint_id))

    def manifest_path(self, blueprint_id: str) -> str:
        return posixpath.join(self.blueprint_path(blueprint_id), self.manifest_name)

    def manifest_url(self, repository: str, tag: str, blueprint_id: str) -> str:
        return f"{self.client.raw_url}/{repository}/{tag}/{self.manifest_path(blueprint_id)}"

    def resolve_manifest(self, repository: str, tag: str, blueprint_id: str) -> Manifest:
        """Return the blueprint's manifest, or an empty one on any failure."""
        url = self.manifest_url(repository, tag, blueprint_id)

        try:
            text = self.client.get(url).text
        except FetchError as e:
            if e.status_code == 404:
                logger.debug(f"No manifest for {blueprint_id} at {url}")
            else:
                logger.warning(f"Could not fetch manifest for {blueprint_id}: {e}")
            return Manifest()

        try:
            data = yaml.load(text, Loader=_TextLoader)
        except yaml.YAMLError as e:
            logger.warning(f"Malformed manifest for {blueprint_id} at {url}: {e}")
            return Manifest()

        if data is None:
            logger.debug(f"Empty manifest for {blueprint_id} at {url}")
            return Manifest()
        if not isinstance(data, dict):
            logger.warning(
                f"Malformed manifest for {blueprint_id} at {url}: "
                f"expected a mapping, got {type(data).__name__}"
            )
            return Manifest()

        return parse_manifest(data)


def parse_manifest(data: dict) -> Manifest:
    """Build a Manifest from a parsed document, ignoring unknown fields."""
    return Manifest(
        name=_as_str(data.get("name")),
        version=_as_str(data.get("version")),
        description=_as_str(data.get("description")),
        tags=_as_tags(data.get("tags")),
    )


def apply_fallbacks(manifest: Manifest, tag: str, blueprint_id: str) -> Manifest:
    """Fill empty manifest fields with values derived from the asset and tag.

    Tags have no fallback and stay empty.
    """
    return Manifest(
        name=manifest.name or blueprint_id,
        version=manifest.version or _strip_version_prefix(tag),
        description=manifest.description or f"{blueprint_id} blueprint",
        tags=list(manifest.tags),
    )


def _strip_version_prefix(tag: str) -> str:
    return tag[1:] if tag.startswith("v") else tag


def _as_str(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_tags(value: object) -> list[str]:
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return [str(t) for t in value if t is not None]
    return []
