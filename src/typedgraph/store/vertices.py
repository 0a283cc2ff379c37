from __future__ import annotations

import logging
from typing import List, Sequence

from sqlalchemy import select, insert, delete
from sqlalchemy.orm import Session, sessionmaker

from ..errors import NotFound, store_boundary
from ..models import NewVertex, Vertex
from ..schema import vertex
from ..validation import validate_id, validate_vertex, validate_vertices

logger = logging.getLogger(__name__)


def _vertex_row(new_vertex: NewVertex) -> dict[str, str]:
    # The creator is also the first updater.
    return {
        "name": new_vertex.name,
        "type": new_vertex.type,
        "created_by": new_vertex.created_by,
        "updated_by": new_vertex.created_by,
    }


class VertexStore:
    """
    Vertex repository.

    Every public method runs in its own transaction taken from
    ``session_factory`` and releases its connection on all exit paths.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def create_vertex(self, new_vertex: NewVertex) -> Vertex:
        validate_vertex(new_vertex)

        with store_boundary("create_vertex"), self._session_factory.begin() as session:
            row = session.execute(
                insert(vertex).values(**_vertex_row(new_vertex)).returning(*vertex.c)
            ).mappings().one()
            created = Vertex.from_row(row)

        logger.info("Created vertex %d of type %r", created.id, created.type)
        return created

    def create_vertices(self, new_vertices: Sequence[NewVertex]) -> List[Vertex]:
        """
        Insert all ``new_vertices`` in one statement and one transaction.

        Result order matches input order. Nothing is persisted if any row
        fails.
        """
        validate_vertices(new_vertices)
        if not new_vertices:
            return []

        rows = [_vertex_row(v) for v in new_vertices]
        with store_boundary("create_vertices"), self._session_factory.begin() as session:
            result = session.execute(
                insert(vertex).returning(*vertex.c, sort_by_parameter_order=True),
                rows,
            )
            created = [Vertex.from_row(r) for r in result.mappings()]

        logger.info("Created %d vertices", len(created))
        return created

    def get_vertex_by_id(self, vertex_id: int) -> Vertex:
        validate_id(vertex_id)

        with store_boundary("get_vertex_by_id"), self._session_factory() as session:
            row = session.execute(
                select(vertex).where(vertex.c.id == vertex_id)
            ).mappings().one_or_none()

        if row is None:
            raise NotFound("vertex", vertex_id)
        return Vertex.from_row(row)

    def delete_vertex_by_id(self, vertex_id: int) -> int:
        """
        Delete a vertex and return the number of rows removed (0 or 1).

        Edges referencing the vertex are removed by the schema's cascading
        foreign keys within the same statement.
        """
        validate_id(vertex_id)

        with store_boundary("delete_vertex_by_id"), self._session_factory.begin() as session:
            affected = session.execute(
                delete(vertex).where(vertex.c.id == vertex_id)
            ).rowcount

        logger.info("Deleted vertex %d (%d row(s))", vertex_id, affected)
        return int(affected)
