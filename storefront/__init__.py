"""Catalogue data-access layer for the storefront."""

__version__ = "1.0.0"
