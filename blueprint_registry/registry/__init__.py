"""Registry: the persisted catalog of blueprints.

The registry provides:
- Models: blueprint entries, the catalog, and per-asset manifests
- Storage: load and save the catalog as stable, human-readable JSON
"""
