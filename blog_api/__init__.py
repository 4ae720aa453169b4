"""Blog API: accounts, JWT sessions and profile endpoints."""

__version__ = "1.0.0"
