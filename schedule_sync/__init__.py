"""Reconciles a stored broadcast schedule against a published XMLTV feed."""

__version__ = "0.1.0"
