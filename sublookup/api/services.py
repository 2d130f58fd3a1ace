"""Access to the repository and query engine bound to the current app."""

from __future__ import annotations

from flask import current_app

from sublookup.core.query_engine import QueryEngine
from sublookup.core.repository import DataRepository

EXTENSION_KEY = "sublookup"


def get_engine() -> QueryEngine:
    return current_app.extensions[EXTENSION_KEY]["engine"]


def get_repository() -> DataRepository:
    return current_app.extensions[EXTENSION_KEY]["repository"]


__all__ = ["EXTENSION_KEY", "get_engine", "get_repository"]
