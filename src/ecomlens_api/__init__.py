"""EcomLens API - AI product photography studio."""

__version__ = "1.0.0"
