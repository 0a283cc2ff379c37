"""
typedgraph.store
================

Repository layer: parameterized statements behind named methods.

- VertexStore  : create / batch create / get / delete vertices.
- EdgeStore    : create / batch create edges with denormalized endpoint types.
- resolve_type / resolve_types : vertex type lookups used by EdgeStore.
"""

from __future__ import annotations

from .types import resolve_type, resolve_types
from .vertices import VertexStore
from .edges import EdgeStore

__all__ = [
    "VertexStore",
    "EdgeStore",
    "resolve_type",
    "resolve_types",
]
