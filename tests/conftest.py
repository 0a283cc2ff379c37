from __future__ import annotations

from typing import Iterator, List

import pytest
from sqlalchemy import event
from sqlalchemy.engine import Engine

from typedgraph.db import create_db_engine, create_session_factory
from typedgraph.engine import GraphEngine
from typedgraph.schema import create_graph_schema
from typedgraph.store import EdgeStore, VertexStore


class StatementLog:
    """Records every SQL statement sent to the DBAPI cursor."""

    def __init__(self, engine: Engine) -> None:
        self.statements: List[str] = []
        event.listen(engine, "before_cursor_execute", self._record)

    # noinspection PyUnusedLocal
    def _record(self, conn, cursor, statement, parameters, context, executemany) -> None:
        self.statements.append(statement)

    def clear(self) -> None:
        self.statements.clear()

    @property
    def count(self) -> int:
        return len(self.statements)

    def matching(self, prefix: str) -> List[str]:
        return [s for s in self.statements if s.lstrip().upper().startswith(prefix)]


@pytest.fixture
def engine() -> Iterator[Engine]:
    eng = create_db_engine("sqlite+pysqlite:///:memory:")
    create_graph_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def statements(engine: Engine) -> StatementLog:
    return StatementLog(engine)


@pytest.fixture
def session_factory(engine: Engine):
    return create_session_factory(engine)


@pytest.fixture
def vertex_store(session_factory) -> VertexStore:
    return VertexStore(session_factory)


@pytest.fixture
def edge_store(session_factory) -> EdgeStore:
    return EdgeStore(session_factory)


@pytest.fixture
def graph(engine: Engine) -> GraphEngine:
    return GraphEngine(engine)
