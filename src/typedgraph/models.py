from __future__ import annotations

"""Descriptors accepted by the stores and records returned by them."""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class NewVertex:
    """Caller-owned fields of a vertex to be created."""

    name: str
    type: str
    created_by: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NewVertex":
        return cls(
            name=data.get("name"),  # type: ignore[arg-type]
            type=data.get("type"),  # type: ignore[arg-type]
            created_by=data.get("created_by"),  # type: ignore[arg-type]
        )


@dataclass(slots=True, frozen=True)
class NewEdge:
    """Caller-owned fields of an edge to be created.

    Endpoint types are not part of the descriptor; they are resolved from the
    referenced vertices when the edge is stored.
    """

    from_vertex_id: int
    to_vertex_id: int
    label: str
    created_by: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NewEdge":
        return cls(
            from_vertex_id=data.get("from_vertex_id"),  # type: ignore[arg-type]
            to_vertex_id=data.get("to_vertex_id"),  # type: ignore[arg-type]
            label=data.get("label"),  # type: ignore[arg-type]
            created_by=data.get("created_by"),  # type: ignore[arg-type]
        )


def _render(record: Any) -> dict[str, Any]:
    out = asdict(record)
    for key, value in out.items():
        if isinstance(value, datetime):
            out[key] = value.isoformat()
    return out


@dataclass(slots=True, frozen=True)
class Vertex:
    id: int
    name: str
    type: str
    created_by: str
    created_at: datetime
    updated_by: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Vertex":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            type=row["type"],
            created_by=row["created_by"],
            created_at=row["created_at"],
            updated_by=row["updated_by"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return _render(self)


@dataclass(slots=True, frozen=True)
class Edge:
    """
    Persisted edge.

    ``from_vertex_type`` / ``to_vertex_type`` are copies of the endpoint types
    taken when the edge was created; they are not kept in sync afterwards.
    """

    id: int
    from_vertex_id: int
    from_vertex_type: str
    to_vertex_id: int
    to_vertex_type: str
    label: str
    created_by: str
    created_at: datetime
    updated_by: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Edge":
        return cls(
            id=int(row["id"]),
            from_vertex_id=int(row["from_vertex_id"]),
            from_vertex_type=row["from_vertex_type"],
            to_vertex_id=int(row["to_vertex_id"]),
            to_vertex_type=row["to_vertex_type"],
            label=row["label"],
            created_by=row["created_by"],
            created_at=row["created_at"],
            updated_by=row["updated_by"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return _render(self)
