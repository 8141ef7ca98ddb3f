"""Student results lookup: dataset loading, normalization and identity-checked matching."""

__version__ = "0.1.0"
