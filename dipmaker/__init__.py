"""Build dissemination packages from archival submission packages."""

__version__ = "0.1.0"
