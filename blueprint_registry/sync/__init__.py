"""Sync: reconcile a tagged release into the blueprint catalog.

For every ``.zip`` asset in the release, a catalog entry is derived from the
blueprint's manifest (with filename/tag fallbacks) and upserted by name.
"""
