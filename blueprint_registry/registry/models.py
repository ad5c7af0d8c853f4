"""Registry data models: catalog entries, manifests, and release metadata."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Blueprint:
    """A single entry in the blueprint catalog. ``name`` is the unique key."""

    name: str
    version: str = ""
    repo: str = ""  # e.g. github.com/owner/name
    path: str = ""  # Location of the blueprint within its repo
    download_url: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)

    @property
    def qualified_id(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class Catalog:
    """Ordered collection of blueprints, at most one per name."""

    blueprints: list[Blueprint] = field(default_factory=list)

    def names(self) -> list[str]:
        return [b.name for b in self.blueprints]

    def get(self, name: str) -> Blueprint | None:
        for entry in self.blueprints:
            if entry.name == name:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.blueprints)


@dataclass
class Manifest:
    """Per-blueprint metadata read from ``manifest.yaml``. Never persisted.

    Empty fields mean "not provided" and are filled by fallback derivation.
    """

    name: str = ""
    version: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass
class ReleaseAsset:
    """A file attached to a release."""

    name: str
    download_url: str = ""


@dataclass
class Release:
    """A tagged release and its assets, in the order the API returned them."""

    tag_name: str
    assets: list[ReleaseAsset] = field(default_factory=list)
