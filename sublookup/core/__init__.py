"""Data ingestion and query engine for the subscription lookup service."""

from sublookup.core.manifest import (
    DataManifest,
    discover_manifest,
    load_manifest,
    manifest_for,
)
from sublookup.core.query_engine import QueryEngine
from sublookup.core.repository import DataRepository

__all__ = [
    "DataManifest",
    "DataRepository",
    "QueryEngine",
    "discover_manifest",
    "load_manifest",
    "manifest_for",
]
