try:
    from ._version import version as __version__  # populated by setuptools-scm
except ModuleNotFoundError:
    __version__ = "0.0.0"

from .errors import (
    GraphError,
    ValidationError,
    NotFound,
    Conflict,
    DatabaseError,
    StoreIOError,
)
from .models import NewVertex, NewEdge, Vertex, Edge
from .engine import GraphEngine

__all__ = [
    "__version__",
    "GraphEngine",
    "NewVertex",
    "NewEdge",
    "Vertex",
    "Edge",
    "GraphError",
    "ValidationError",
    "NotFound",
    "Conflict",
    "DatabaseError",
    "StoreIOError",
]
