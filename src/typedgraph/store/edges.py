from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy import select, insert
from sqlalchemy.orm import Session, sessionmaker

from ..errors import NotFound, ValidationError, Violation, store_boundary
from ..models import Edge, NewEdge
from ..schema import edge
from ..validation import EDGE_ID_FIELDS, validate_edge, validate_edges, validate_id
from .types import resolve_type, resolve_types

logger = logging.getLogger(__name__)


def _edge_row(new_edge: NewEdge, from_type: str, to_type: str) -> dict[str, object]:
    return {
        "from_vertex_id": new_edge.from_vertex_id,
        "from_vertex_type": from_type,
        "to_vertex_id": new_edge.to_vertex_id,
        "to_vertex_type": to_type,
        "label": new_edge.label,
        "created_by": new_edge.created_by,
        "updated_by": new_edge.created_by,
    }


def _unresolved(
    new_edges: Sequence[NewEdge], types: Mapping[int, str]
) -> List[Violation]:
    missing = []
    for i, new_edge in enumerate(new_edges):
        for field in EDGE_ID_FIELDS:
            vertex_id = getattr(new_edge, field)
            if vertex_id not in types:
                missing.append(
                    Violation(field, "not_found", f"vertex {vertex_id} does not exist", i)
                )
    return missing


class EdgeStore:
    """
    Edge repository.

    Endpoint types are resolved and the edge rows inserted inside one
    transaction; resolution always completes before the first insert.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def create_edge(self, new_edge: NewEdge) -> Edge:
        validate_edge(new_edge)

        with store_boundary("create_edge"), self._session_factory.begin() as session:
            from_type = resolve_type(session, new_edge.from_vertex_id)
            to_type = resolve_type(session, new_edge.to_vertex_id)

            row = session.execute(
                insert(edge)
                .values(**_edge_row(new_edge, from_type, to_type))
                .returning(*edge.c)
            ).mappings().one()
            created = Edge.from_row(row)

        logger.info(
            "Created edge %d: %d(%s) -[%s]-> %d(%s)",
            created.id,
            created.from_vertex_id,
            created.from_vertex_type,
            created.label,
            created.to_vertex_id,
            created.to_vertex_type,
        )
        return created

    def create_edges(self, new_edges: Sequence[NewEdge]) -> List[Edge]:
        """
        Create a batch of edges atomically.

        - The distinct set of referenced vertex ids is resolved once into an
          id -> type mapping.
        - If any id is missing, a ValidationError lists every unresolved
          endpoint and no edge from the batch is written.
        - Otherwise all edges are inserted with one bulk statement; result
          order matches input order.
        """
        validate_edges(new_edges)
        if not new_edges:
            return []

        with store_boundary("create_edges"), self._session_factory.begin() as session:
            vertex_ids = [
                getattr(e, field) for e in new_edges for field in EDGE_ID_FIELDS
            ]
            types: Dict[int, str] = resolve_types(session, vertex_ids)

            missing = _unresolved(new_edges, types)
            if missing:
                raise ValidationError(missing)

            rows = [
                _edge_row(e, types[e.from_vertex_id], types[e.to_vertex_id])
                for e in new_edges
            ]
            result = session.execute(
                insert(edge).returning(*edge.c, sort_by_parameter_order=True),
                rows,
            )
            created = [Edge.from_row(r) for r in result.mappings()]

        logger.info("Created %d edges", len(created))
        return created

    def get_edge_by_id(self, edge_id: int) -> Edge:
        validate_id(edge_id)

        with store_boundary("get_edge_by_id"), self._session_factory() as session:
            row = session.execute(
                select(edge).where(edge.c.id == edge_id)
            ).mappings().one_or_none()

        if row is None:
            raise NotFound("edge", edge_id)
        return Edge.from_row(row)

    def list_edges(
        self,
        *,
        from_vertex_id: Optional[int] = None,
        to_vertex_id: Optional[int] = None,
    ) -> List[Edge]:
        """Return edges filtered by endpoint, ordered by id."""
        stmt = select(edge).order_by(edge.c.id)
        if from_vertex_id is not None:
            validate_id(from_vertex_id, "from_vertex_id")
            stmt = stmt.where(edge.c.from_vertex_id == from_vertex_id)
        if to_vertex_id is not None:
            validate_id(to_vertex_id, "to_vertex_id")
            stmt = stmt.where(edge.c.to_vertex_id == to_vertex_id)

        with store_boundary("list_edges"), self._session_factory() as session:
            rows = session.execute(stmt).mappings().all()
        return [Edge.from_row(r) for r in rows]
