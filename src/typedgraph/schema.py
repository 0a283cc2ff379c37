from __future__ import annotations

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.engine import Engine

from .patterns import (
    MAX_NAME_LENGTH,
    MAX_TYPE_LENGTH,
    MAX_EDGE_LABEL_LENGTH,
    MAX_USERNAME_LENGTH,
)

metadata = MetaData()

vertex = Table(
    "vertex",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(MAX_NAME_LENGTH), nullable=False),
    Column("type", String(MAX_TYPE_LENGTH), nullable=False),
    Column("created_by", String(MAX_USERNAME_LENGTH), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_by", String(MAX_USERNAME_LENGTH), nullable=False),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
)

# Deleting a vertex removes every edge touching it (ON DELETE CASCADE on both
# endpoints). The foreign keys are also what keeps an edge from being
# committed against a vertex deleted after its type was resolved.
edge = Table(
    "edge",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "from_vertex_id",
        Integer,
        ForeignKey("vertex.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("from_vertex_type", String(MAX_TYPE_LENGTH), nullable=False),
    Column(
        "to_vertex_id",
        Integer,
        ForeignKey("vertex.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("to_vertex_type", String(MAX_TYPE_LENGTH), nullable=False),
    Column("label", String(MAX_EDGE_LABEL_LENGTH), nullable=False),
    Column("created_by", String(MAX_USERNAME_LENGTH), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_by", String(MAX_USERNAME_LENGTH), nullable=False),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
    CheckConstraint("from_vertex_id <> to_vertex_id", name="ck_edge_no_self_loop"),
    Index("ix_edge_from_vertex_id", "from_vertex_id"),
    Index("ix_edge_to_vertex_id", "to_vertex_id"),
)


def create_graph_schema(engine: Engine) -> None:
    """
    Create the vertex and edge tables if they do not exist yet.

    This is a bootstrap helper for tests and local setups; production
    databases are expected to be migrated out of band.
    """
    with engine.begin() as conn:
        metadata.create_all(conn)
