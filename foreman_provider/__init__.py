"""Foreman provider: map declarative resource records onto the Foreman REST API."""

from foreman_provider.__about__ import __version__

__all__ = ["__version__"]
