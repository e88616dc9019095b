"""Data model and selection logic for GPU resource claims, sharing settings and node allocation state."""

__version__ = "0.1.0"