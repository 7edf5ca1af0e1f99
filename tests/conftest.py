from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from politrack.adapters.sqlalchemy import start_mappers
from politrack.adapters.sqlalchemy.migrations import upgrade_head
from politrack.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    """A migrated in-memory record store shared by every connection of the test."""

    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    start_mappers()
    upgrade_head(engine=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(sqlite_engine: Engine) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)
    yield SqlAlchemyUnitOfWork
    shutdown()

