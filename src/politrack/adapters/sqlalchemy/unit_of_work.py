"""Engine lifecycle and the SQLAlchemy unit of work.

The engine is process-wide: ``startup`` opens and migrates the record store once,
and every ``SqlAlchemyUnitOfWork`` draws its session from the shared factory.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from politrack.adapters.sqlalchemy.mappings import start_mappers
from politrack.adapters.sqlalchemy.migrations import upgrade_head
from politrack.adapters.sqlalchemy.repositories import (
    SqlAlchemyAffairRepository,
    SqlAlchemyDismissedDuplicateRepository,
    SqlAlchemyEntityMergeRepository,
    SqlAlchemyExternalLinkRepository,
    SqlAlchemyMandateRepository,
    SqlAlchemyPartyRepository,
    SqlAlchemyPoliticianRepository,
)
from politrack.config import StoreUnavailableError, get_database_config
from politrack.domain.ports.unit_of_work import ReconciliationRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """The adapter was used before ``startup`` or configured twice."""


_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Open the record store, map the model and migrate the schema to head.

    A second call raises ``StartupError`` unless ``force`` is set, in which case
    the new engine replaces the old one (the old one is not disposed).
    """

    global _engine, _sessions  # noqa: PLW0603
    if _engine is not None and not force:
        raise StartupError("Record store already started; pass force=True to replace it")

    resolved = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    try:
        upgrade_head(engine=resolved)
    except OperationalError as exc:
        resolved.dispose()
        raise StoreUnavailableError(f"Cannot open record store {resolved.url}: {exc}") from exc

    _engine = resolved
    _sessions = sessionmaker(bind=resolved, expire_on_commit=False)
    log.debug("Record store ready at %s", resolved.url)


def shutdown() -> None:
    global _engine, _sessions  # noqa: PLW0603
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


def is_started() -> bool:
    return _engine is not None


def configured_engine() -> Engine | None:
    return _engine


class SqlAlchemyUnitOfWork:
    """One session per ``with`` block; leaving on an exception rolls back."""

    def __init__(self) -> None:
        if _sessions is None:
            raise StartupError(
                "Record store not started; call "
                "politrack.adapters.sqlalchemy.unit_of_work.startup() first"
            )
        self._sessions = _sessions
        self._session: Session | None = None
        self._repositories: ReconciliationRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._sessions()
        self._session = session
        self._repositories = ReconciliationRepositories(
            politicians=SqlAlchemyPoliticianRepository(session),
            parties=SqlAlchemyPartyRepository(session),
            external_links=SqlAlchemyExternalLinkRepository(session),
            affairs=SqlAlchemyAffairRepository(session),
            mandates=SqlAlchemyMandateRepository(session),
            dismissed_duplicates=SqlAlchemyDismissedDuplicateRepository(session),
            merges=SqlAlchemyEntityMergeRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with block")
        return self._session

    @property
    def repositories(self) -> ReconciliationRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from politrack.domain.ports import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyUnitOfWork()
