"""File-based catalog storage.

The catalog is a single JSON document::

    {
      "blueprints": [
        {"name": ..., "version": ..., "repo": ..., "path": ...,
         "download_url": ..., "description": ..., "tags": [...]}
      ]
    }

Key order and two-space indentation are fixed so repeated saves of the same
catalog produce identical bytes.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from blueprint_registry.errors import DecodeError, PersistError
from blueprint_registry.registry.models import Blueprint, Catalog

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = "registry.json"


class CatalogStore:
    """Loads and saves the blueprint catalog at ``path``."""

    def __init__(self, path: str | Path = DEFAULT_REGISTRY_PATH):
        self.path = Path(path)

    def load(self) -> Catalog:
        """Read the catalog. A missing file is an empty catalog, not an error.

        Raises:
            DecodeError: If the file exists but is not a valid catalog.
        """
        if not self.path.exists():
            logger.info(f"No catalog at {self.path}, starting empty")
            return Catalog()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON in {self.path}: {e}", path=self.path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise DecodeError(f"Could not read {self.path}: {e}", path=self.path) from e

        catalog = _dict_to_catalog(data, self.path)
        logger.info(f"Loaded {len(catalog)} blueprints from {self.path}")
        return catalog

    def save(self, catalog: Catalog) -> None:
        """Write the catalog, replacing the previous file only on success.

        Raises:
            PersistError: If the file cannot be written.
        """
        content = json.dumps(_catalog_to_dict(catalog), indent=2, ensure_ascii=False) + "\n"

        tmp_name = ""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistError(f"Could not save {self.path}: {e}", path=self.path) from e

        logger.info(f"Saved {len(catalog)} blueprints to {self.path}")


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def entry_to_dict(entry: Blueprint) -> dict:
    return {
        "name": entry.name,
        "version": entry.version,
        "repo": entry.repo,
        "path": entry.path,
        "download_url": entry.download_url,
        "description": entry.description,
        "tags": list(entry.tags),
    }


def _catalog_to_dict(catalog: Catalog) -> dict:
    # Always an explicit list, never null or omitted
    return {"blueprints": [entry_to_dict(b) for b in catalog.blueprints]}


def _dict_to_entry(data: object, path: Path) -> Blueprint:
    if not isinstance(data, dict) or not data.get("name"):
        raise DecodeError(f"Blueprint entry without a name in {path}", path=path)
    tags = data.get("tags") or []
    if not isinstance(tags, list):
        raise DecodeError(f"Tags of '{data['name']}' must be a list in {path}", path=path)
    return Blueprint(
        name=str(data["name"]),
        version=str(data.get("version") or ""),
        repo=str(data.get("repo") or ""),
        path=str(data.get("path") or ""),
        download_url=str(data.get("download_url") or ""),
        description=str(data.get("description") or ""),
        tags=[str(t) for t in tags],
    )


def _dict_to_catalog(data: object, path: Path) -> Catalog:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object at the top of {path}", path=path)
    entries = data.get("blueprints")
    if entries is None:
        return Catalog()
    if not isinstance(entries, list):
        raise DecodeError(f"'blueprints' must be a list in {path}", path=path)
    blueprints = [_dict_to_entry(e, path) for e in entries]

    seen: set[str] = set()
    for entry in blueprints:
        if entry.name in seen:
            raise DecodeError(f"Duplicate blueprint '{entry.name}' in {path}", path=path)
        seen.add(entry.name)
    return Catalog(blueprints=blueprints)
