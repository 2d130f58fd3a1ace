"""Subscription lookup service backed by flat CSV/config files."""

__version__ = "0.3.0"
