"""pytest fixtures for prefix-scoped test collections."""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Sequence

import pytest

from collection_fixture.fixture import DatabaseFixture


def collection_prefix(request: pytest.FixtureRequest) -> str:
    """Derive a collection prefix from the requesting test class or module."""
    if request.cls is not None:
        return request.cls.__name__
    return request.module.__name__.replace(".", "_")


def dispose_all(fixtures: Sequence[DatabaseFixture]) -> None:
    """Dispose fixtures newest first, then re-raise the first failure."""
    errors: List[Exception] = []
    for fixture in reversed(fixtures):
        try:
            fixture.dispose()
        except Exception as exc:
            errors.append(exc)
    if errors:
        raise errors[0]


@pytest.fixture
def database_fixture(request: pytest.FixtureRequest) -> Iterator[Callable[..., DatabaseFixture]]:
    """
    Factory for :class:`DatabaseFixture` instances.

    The prefix defaults to the test class (or module) name. Collections are
    dropped when the test finishes, newest fixture first.
    """
    created: List[DatabaseFixture] = []

    def make(
        prefix: Optional[str] = None,
        database_name: Optional[str] = None,
        drop_on_init: bool = True,
        drop_on_dispose: bool = True,
        **kwargs,
    ) -> DatabaseFixture:
        fixture = DatabaseFixture(
            prefix or collection_prefix(request),
            database_name,
            drop_on_init,
            drop_on_dispose,
            **kwargs,
        )
        created.append(fixture)
        return fixture

    yield make

    dispose_all(created)
