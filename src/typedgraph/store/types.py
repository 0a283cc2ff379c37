from __future__ import annotations

"""Vertex type lookups used to denormalize endpoint types onto edges."""

import logging
from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import NotFound
from ..schema import vertex

logger = logging.getLogger(__name__)


def resolve_type(session: Session, vertex_id: int) -> str:
    """
    Return the current type of vertex ``vertex_id``.

    Raises NotFound if the vertex does not exist.
    """
    vertex_type = session.execute(
        select(vertex.c.type).where(vertex.c.id == vertex_id)
    ).scalar_one_or_none()
    if vertex_type is None:
        raise NotFound("vertex", vertex_id)
    return str(vertex_type)


def resolve_types(session: Session, vertex_ids: Iterable[int]) -> Dict[int, str]:
    """
    Resolve the types of many vertices with a single query.

    Repeated ids are looked up once. Ids that do not exist are absent from
    the returned mapping; it is up to the caller to decide how to fail.
    """
    unique_ids = sorted(set(vertex_ids))
    if not unique_ids:
        return {}

    result = session.execute(
        select(vertex.c.id, vertex.c.type).where(vertex.c.id.in_(unique_ids))
    )
    types: Dict[int, str] = {int(vid): str(vtype) for vid, vtype in result}

    logger.debug("Resolved %d of %d vertex types", len(types), len(unique_ids))
    return types
