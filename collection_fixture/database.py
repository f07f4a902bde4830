"""MongoDB client creation."""

from __future__ import annotations

import logging

from pymongo import MongoClient

_LOGGER = logging.getLogger(__name__)


def connect(connection_string: str) -> MongoClient:
    """Create a new MongoDB client for the given connection string."""
    _LOGGER.debug("Creating MongoDB client")
    return MongoClient(connection_string)
