"""Blueprint Registry: keep a blueprint catalog in sync with tagged releases."""

__version__ = "0.1.0"
