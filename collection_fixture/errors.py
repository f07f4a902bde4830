"""Exceptions raised by the collection fixture."""

from __future__ import annotations


class FixtureError(Exception):
    """Base class for errors raised by the fixture itself."""


class ConfigurationError(FixtureError):
    """Raised when required configuration is missing or unreadable."""
