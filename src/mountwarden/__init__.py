"""Periodic reconciliation of network drive mappings."""

__version__ = "0.1.0"
