"""Prefix-scoped MongoDB collections for test runs."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from bson.codec_options import CodecOptions
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.write_concern import WriteConcern

from collection_fixture import database
from collection_fixture.config import Settings, load_settings
from collection_fixture.errors import ConfigurationError, FixtureError

_LOGGER = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "Testing"
MAX_DROP_WORKERS = 8


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def fallback_prefix() -> str:
    """Time-of-day prefix used when the caller supplies none."""
    return datetime.now(timezone.utc).strftime("%H:%M:%S")


def entity_name(entity_type: Union[type, str]) -> str:
    """Return the collection suffix for a document class or a plain name."""
    if isinstance(entity_type, str):
        if _is_blank(entity_type):
            raise ValueError("Entity name must not be blank")
        return entity_type
    if isinstance(entity_type, type):
        return entity_type.__name__
    raise TypeError(f"Expected a class or a name, got {type(entity_type).__name__}")


class DatabaseFixture:
    """
    Owns a set of ``<prefix>_<Entity>`` collections in a test database.

    Use a prefix unique to the test class or run (for example the test class
    name) so that dropping collections never touches another suite running
    in parallel against the same database.

    Args:
        collection_prefix: Prefix for every collection handed out. A blank
            prefix falls back to the current UTC time of day.
        database_name: Database to use. Defaults to ``"Testing"``; never read
            from settings or the environment.
        drop_on_init: Drop prefixed collections before construction returns.
        drop_on_dispose: Drop tracked and prefixed collections on dispose.
        settings: Settings snapshot. Loaded from ``config.json``, ``.env`` and
            the environment when omitted.
        codec_options: BSON codec options applied to every collection, used
            to register custom document types.
    """

    def __init__(
        self,
        collection_prefix: Optional[str],
        database_name: Optional[str] = None,
        drop_on_init: bool = True,
        drop_on_dispose: bool = False,
        *,
        settings: Optional[Settings] = None,
        codec_options: Optional[CodecOptions] = None,
    ) -> None:
        self._settings = settings if settings is not None else load_settings()
        self._connection_string = self._settings.connection_string

        if _is_blank(collection_prefix):
            collection_prefix = fallback_prefix()
            _LOGGER.warning(
                "No collection prefix given, using %r; this is not unique across parallel runs",
                collection_prefix,
            )
        self._collection_prefix = collection_prefix

        self._database_name = DEFAULT_DATABASE_NAME if _is_blank(database_name) else database_name

        self._drop_on_init = drop_on_init
        self._drop_on_dispose = drop_on_dispose
        self._codec_options = codec_options

        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None
        self._collection_names: List[str] = []

        if self._drop_on_init:
            self.drop_collections()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def connection_string(self) -> Optional[str]:
        return self._connection_string

    @property
    def collection_prefix(self) -> str:
        return self._collection_prefix

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def drop_on_init(self) -> bool:
        return self._drop_on_init

    @property
    def drop_on_dispose(self) -> bool:
        return self._drop_on_dispose

    @property
    def codec_options(self) -> Optional[CodecOptions]:
        return self._codec_options

    @property
    def collection_names(self) -> Tuple[str, ...]:
        """Every name handed out by :meth:`get_collection`, in call order."""
        return tuple(self._collection_names)

    def get_client(self) -> MongoClient:
        """Get or create the MongoDB client for this fixture."""
        if self._client is None:
            if _is_blank(self._connection_string):
                raise ConfigurationError("Data:ConnectionString is not configured")
            self._client = database.connect(self._connection_string)
        return self._client

    def get_database(self) -> Database:
        """Get or create the handle to the fixture's database."""
        if self._database is None:
            self._database = self.get_client()[self._database_name]
        return self._database

    def collection_name(self, entity_type: Union[type, str]) -> str:
        return f"{self._collection_prefix}_{entity_name(entity_type)}"

    def get_collection(self, entity_type: Union[type, str]) -> Collection:
        """
        Return the prefixed collection for a document type.

        Every call records the name for cleanup, including repeated calls for
        the same type. Writes use majority acknowledgement.
        """
        name = self.collection_name(entity_type)
        self._collection_names.append(name)

        options: Dict[str, Any] = {"write_concern": WriteConcern(w="majority")}
        if self._codec_options is not None:
            options["codec_options"] = self._codec_options
        return self.get_database().get_collection(name, **options)

    def drop_collections(self) -> None:
        """
        Drop tracked collections, then every collection matching the prefix.

        Tracked names are dropped one at a time in the order they were handed
        out. Prefixed collections found in the database (left behind by
        earlier aborted runs, for instance) are dropped concurrently; the call
        returns once all of them have finished and re-raises the first
        failure. Dropping a collection that does not exist is not an error.
        """
        if not self._collection_prefix:
            raise FixtureError("Refusing to drop collections without a prefix")

        db = self.get_database()
        for name in self._collection_names:
            _LOGGER.debug("Dropping tracked collection %s.%s", self._database_name, name)
            db.drop_collection(name)

        matches = [name for name in db.list_collection_names() if name.startswith(self._collection_prefix)]
        if matches:
            with ThreadPoolExecutor(max_workers=min(len(matches), MAX_DROP_WORKERS)) as executor:
                futures = [executor.submit(self._drop_discovered, db, name) for name in matches]
            for future in futures:
                future.result()

        _LOGGER.info(
            "Dropped %d tracked and %d prefixed collection(s) for prefix %r in %s",
            len(self._collection_names),
            len(matches),
            self._collection_prefix,
            self._database_name,
        )

    def _drop_discovered(self, db: Database, name: str) -> None:
        _LOGGER.debug("Dropping prefixed collection %s.%s", self._database_name, name)
        db.drop_collection(name)

    def dispose(self) -> None:
        """Drop collections if ``drop_on_dispose`` was requested.

        The client is left open; its lifetime belongs to the driver.
        """
        if self._drop_on_dispose:
            self.drop_collections()

    def __enter__(self) -> "DatabaseFixture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return (
            f"DatabaseFixture(collection_prefix={self._collection_prefix!r}, "
            f"database_name={self._database_name!r})"
        )
