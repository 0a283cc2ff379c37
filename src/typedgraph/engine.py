from __future__ import annotations

"""Store-agnostic facade consumed by the request-handling layer."""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from sqlalchemy.engine import Engine

from .config import AppSettings
from .db import create_session_factory, engine_from_settings
from .models import Edge, NewEdge, NewVertex, Vertex
from .schema import create_graph_schema
from .store import EdgeStore, VertexStore

logger = logging.getLogger(__name__)

VertexLike = Union[NewVertex, Mapping[str, Any]]
EdgeLike = Union[NewEdge, Mapping[str, Any]]


def _as_vertex(item: VertexLike) -> NewVertex:
    return item if isinstance(item, NewVertex) else NewVertex.from_mapping(item)


def _as_edge(item: EdgeLike) -> NewEdge:
    return item if isinstance(item, NewEdge) else NewEdge.from_mapping(item)


class GraphEngine:
    """
    Entry point for typed-graph persistence.

    Every call is a synchronous request/response against the pooled
    ``engine``. Errors are members of :mod:`typedgraph.errors`.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        session_factory = create_session_factory(engine)
        self.vertices = VertexStore(session_factory)
        self.edges = EdgeStore(session_factory)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "GraphEngine":
        """Build from the database section; logging is left to the application."""
        return cls(engine_from_settings(settings.database))

    @property
    def engine(self) -> Engine:
        return self._engine

    def setup_database(self) -> None:
        create_graph_schema(self._engine)
        logger.info("Graph schema ready")

    def dispose(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------ #
    # Vertices
    # ------------------------------------------------------------------ #

    def create_vertex(self, name: str, type: str, created_by: str) -> Vertex:
        return self.vertices.create_vertex(
            NewVertex(name=name, type=type, created_by=created_by)
        )

    def create_vertices(self, items: Iterable[VertexLike]) -> List[Vertex]:
        return self.vertices.create_vertices([_as_vertex(i) for i in items])

    def get_vertex_by_id(self, vertex_id: int) -> Vertex:
        return self.vertices.get_vertex_by_id(vertex_id)

    def delete_vertex_by_id(self, vertex_id: int) -> int:
        return self.vertices.delete_vertex_by_id(vertex_id)

    # ------------------------------------------------------------------ #
    # Edges
    # ------------------------------------------------------------------ #

    def create_edge(
        self, from_vertex_id: int, to_vertex_id: int, label: str, created_by: str
    ) -> Edge:
        return self.edges.create_edge(
            NewEdge(
                from_vertex_id=from_vertex_id,
                to_vertex_id=to_vertex_id,
                label=label,
                created_by=created_by,
            )
        )

    def create_edges(self, items: Iterable[EdgeLike]) -> List[Edge]:
        return self.edges.create_edges([_as_edge(i) for i in items])

    def get_edge_by_id(self, edge_id: int) -> Edge:
        return self.edges.get_edge_by_id(edge_id)

    def list_edges(
        self,
        *,
        from_vertex_id: Optional[int] = None,
        to_vertex_id: Optional[int] = None,
    ) -> List[Edge]:
        return self.edges.list_edges(
            from_vertex_id=from_vertex_id, to_vertex_id=to_vertex_id
        )
