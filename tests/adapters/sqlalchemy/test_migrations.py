from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, inspect

from politrack.adapters.sqlalchemy import mapper_registry
from politrack.adapters.sqlalchemy.migrations import current_revision, upgrade_head

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_head_schema_matches_mapped_tables(sqlite_engine: Engine) -> None:
    tables = set(inspect(sqlite_engine).get_table_names())

    assert set(mapper_registry.metadata.tables).issubset(tables)
    assert "alembic_version" in tables


def test_upgrade_head_is_repeatable() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        upgrade_head(engine=engine)
        upgrade_head(engine=engine)
        columns = {column["name"] for column in inspect(engine).get_columns("mandate")}
    finally:
        engine.dispose()

    assert {"is_current", "needs_review", "department_code"}.issubset(columns)


def test_current_revision_after_upgrade(sqlite_engine: Engine) -> None:
    assert current_revision(sqlite_engine) == "0001"
