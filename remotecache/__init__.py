"""Building blocks for a remote build cache: models, validation, splicing and utilities."""

__version__ = "0.1.0"