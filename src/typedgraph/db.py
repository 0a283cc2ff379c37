from __future__ import annotations

"""Engine and session factory construction."""

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .config import DatabaseSettings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores FOREIGN KEY clauses (and thus ON DELETE CASCADE) unless
    # asked per connection.
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def create_db_engine(
    url: str,
    *,
    pool_size: Optional[int] = None,
    max_overflow: Optional[int] = None,
    pool_pre_ping: bool = False,
    echo: bool = False,
) -> Engine:
    """
    Build a pooled SQLAlchemy engine for ``url``.

    Pool sizing is only forwarded to backends that use a QueuePool; SQLite
    engines get foreign-key enforcement switched on for every connection.
    """
    sa_url = make_url(url)
    kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": pool_pre_ping}

    is_sqlite = sa_url.get_backend_name() == "sqlite"
    if not is_sqlite:
        if pool_size is not None:
            kwargs["pool_size"] = pool_size
        if max_overflow is not None:
            kwargs["max_overflow"] = max_overflow

    engine = create_engine(sa_url, **kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(
        "Created %s engine for %s", sa_url.get_backend_name(),
        sa_url.render_as_string(hide_password=True),
    )
    return engine


def engine_from_settings(settings: DatabaseSettings) -> Engine:
    return create_db_engine(
        str(settings.url),
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_pre_ping=settings.pool_pre_ping,
        echo=settings.echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Rows are turned into plain records before the session closes.
    return sessionmaker(bind=engine, expire_on_commit=False)
