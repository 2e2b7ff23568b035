"""Content resolution and composition engine for CMS-backed pages."""

__version__ = "0.1.0"
