"""Windowed, incrementally paginated carousel engine for the storefront."""

__version__ = "0.1.0"
