"""Isolated, prefix-scoped MongoDB collections for automated tests."""

from .config import DataSettings, Settings, load_settings
from .errors import ConfigurationError, FixtureError
from .fixture import DEFAULT_DATABASE_NAME, DatabaseFixture

__all__ = [
    "ConfigurationError",
    "DEFAULT_DATABASE_NAME",
    "DataSettings",
    "DatabaseFixture",
    "FixtureError",
    "Settings",
    "load_settings",
]
