from __future__ import annotations

"""
Descriptor validation.

Every check here runs before the store is touched. Rules are evaluated
exhaustively: a descriptor with three bad fields yields three violations.
"""

import re
from typing import Any, Iterable, List, Optional, Sequence

from .errors import ValidationError, Violation
from .models import NewEdge, NewVertex
from .patterns import PATTERNS, MAX_ID, MIN_TOKEN_LENGTH

# field name -> pattern key in PATTERNS
VERTEX_FIELDS = (("name", "name"), ("type", "type"), ("created_by", "username"))
EDGE_TEXT_FIELDS = (("label", "edge_label"), ("created_by", "username"))
EDGE_ID_FIELDS = ("from_vertex_id", "to_vertex_id")

MATCHED = "matched"


def check_token(
    field: str, value: Any, pattern: re.Pattern[str], index: Optional[int] = None
) -> Optional[Violation]:
    if not isinstance(value, str):
        return Violation(field, "type", "must be a string", index)
    if pattern.fullmatch(value) is None:
        return Violation(
            field,
            "regex",
            f"must be {MIN_TOKEN_LENGTH} or more alphanumeric characters "
            f"matching {pattern.pattern}",
            index,
        )
    return None


def check_id(field: str, value: Any, index: Optional[int] = None) -> Optional[Violation]:
    # bool is an int subclass; True must not pass as vertex 1
    if not isinstance(value, int) or isinstance(value, bool):
        return Violation(field, "type", "must be an integer", index)
    if value < 1:
        return Violation(field, "range", "must be greater than or equal to 1", index)
    if value > MAX_ID:
        return Violation(field, "range", f"must be less than or equal to {MAX_ID}", index)
    return None


def check_distinct_endpoints(edge: NewEdge, index: Optional[int] = None) -> Optional[Violation]:
    """Struct-level invariant: an edge may not loop back onto its source."""
    if edge.from_vertex_id == edge.to_vertex_id:
        return Violation(
            None,
            MATCHED,
            "from_vertex_id and to_vertex_id must reference different vertices",
            index,
        )
    return None


def vertex_violations(vertex: NewVertex, index: Optional[int] = None) -> List[Violation]:
    found = [
        check_token(field, getattr(vertex, field), PATTERNS[key], index)
        for field, key in VERTEX_FIELDS
    ]
    return [v for v in found if v is not None]


def edge_violations(edge: NewEdge, index: Optional[int] = None) -> List[Violation]:
    found: List[Optional[Violation]] = [
        check_id(field, getattr(edge, field), index) for field in EDGE_ID_FIELDS
    ]
    found.extend(
        check_token(field, getattr(edge, field), PATTERNS[key], index)
        for field, key in EDGE_TEXT_FIELDS
    )
    found.append(check_distinct_endpoints(edge, index))
    return [v for v in found if v is not None]


def _raise_if_any(violations: Iterable[Violation]) -> None:
    violations = list(violations)
    if violations:
        raise ValidationError(violations)


def validate_vertex(vertex: NewVertex) -> NewVertex:
    _raise_if_any(vertex_violations(vertex))
    return vertex


def validate_vertices(vertices: Sequence[NewVertex]) -> Sequence[NewVertex]:
    _raise_if_any(v for i, item in enumerate(vertices) for v in vertex_violations(item, i))
    return vertices


def validate_edge(edge: NewEdge) -> NewEdge:
    _raise_if_any(edge_violations(edge))
    return edge


def validate_edges(edges: Sequence[NewEdge]) -> Sequence[NewEdge]:
    _raise_if_any(v for i, item in enumerate(edges) for v in edge_violations(item, i))
    return edges


def validate_id(value: Any, field: str = "id") -> int:
    violation = check_id(field, value)
    if violation is not None:
        raise ValidationError([violation])
    return value
