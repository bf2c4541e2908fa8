"""Page-view analytics: client identity, event classification, ingestion and reporting."""

__version__ = "0.1.0"
