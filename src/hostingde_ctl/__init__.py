"""Declarative reconciliation of hosting.de DNS zones."""

__version__ = "0.1.0"
