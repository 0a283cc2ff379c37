from __future__ import annotations

"""
Closed error taxonomy for the graph store.

Validation failures are raised before any store access. Store failures are
translated exactly once, at the store boundary (see :func:`store_boundary`),
and then propagate unchanged to the caller.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Sequence

from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CONNECTION_EXCEPTION_CLASS = "08"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    IO = "io"


class GraphError(Exception):
    """Base class for every error raised by typedgraph."""

    kind: ErrorKind = ErrorKind.DATABASE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready representation consumed by the request layer."""
        return {"kind": self.kind.value, "message": self.message}


# ─────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class Violation:
    """
    A single failed rule.

    ``field`` is None for struct-level invariants (e.g. an edge whose
    endpoints are the same vertex). ``index`` is the position of the
    offending descriptor inside a batch, None for single-item calls.
    """

    field: Optional[str]
    code: str
    message: str
    index: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "field": self.field,
            "code": self.code,
            "message": self.message,
        }
        if self.index is not None:
            out["index"] = self.index
        return out


class ValidationError(GraphError):
    kind = ErrorKind.VALIDATION

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = list(violations)
        super().__init__(self._format(self.violations))

    @staticmethod
    def _format(violations: Sequence[Violation]) -> str:
        parts = []
        for v in violations:
            where = v.field if v.field is not None else "<record>"
            if v.index is not None:
                where = f"[{v.index}].{where}"
            parts.append(f"{where}: {v.message}")
        return "Validation error: " + "; ".join(parts)

    @property
    def fields(self) -> set[Optional[str]]:
        return {v.field for v in self.violations}

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["violations"] = [v.to_dict() for v in self.violations]
        return payload


# ─────────────────────────────────────────────────────────────
# Store-side errors
# ─────────────────────────────────────────────────────────────


class NotFound(GraphError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str = "row", ident: Any = None) -> None:
        self.entity = entity
        self.ident = ident
        if ident is None:
            message = f"{entity.capitalize()} not found"
        else:
            message = f"{entity.capitalize()} {ident!r} not found"
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["entity"] = self.entity
        if self.ident is not None:
            payload["id"] = self.ident
        return payload


class Conflict(GraphError):
    kind = ErrorKind.CONFLICT

    def __init__(self, detail: str) -> None:
        super().__init__(f"Conflict: {detail}")


class DatabaseError(GraphError):
    kind = ErrorKind.DATABASE

    def __init__(self, detail: str) -> None:
        super().__init__(f"Database error: {detail}")


class StoreIOError(GraphError):
    """Transport or connection failure while talking to the store."""

    kind = ErrorKind.IO

    def __init__(self, detail: str) -> None:
        super().__init__(f"I/O error: {detail}")


# ─────────────────────────────────────────────────────────────
# Mapping
# ─────────────────────────────────────────────────────────────


def _sqlstate(exc: sa_exc.DBAPIError) -> Optional[str]:
    orig = exc.orig
    # psycopg 3 exposes .sqlstate, psycopg2 exposes .pgcode
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return str(code) if code else None


def _detail(exc: BaseException) -> str:
    if isinstance(exc, sa_exc.DBAPIError) and exc.orig is not None:
        return str(exc.orig).strip()
    return str(exc).strip() or exc.__class__.__name__


def map_store_error(exc: BaseException) -> GraphError:
    """Translate a backing-store exception into the closed taxonomy."""
    if isinstance(exc, GraphError):
        return exc

    if isinstance(exc, sa_exc.NoResultFound):
        return NotFound()

    if isinstance(exc, sa_exc.IntegrityError):
        state = _sqlstate(exc)
        detail = _detail(exc)
        if state == UNIQUE_VIOLATION or "UNIQUE constraint failed" in detail:
            return Conflict(detail)
        if state == FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in detail:
            # An endpoint vanished between resolution and insert.
            return NotFound("vertex")
        return DatabaseError(detail)

    if isinstance(exc, (sa_exc.DisconnectionError, sa_exc.TimeoutError)):
        return StoreIOError(_detail(exc))

    if isinstance(exc, sa_exc.DBAPIError):
        state = _sqlstate(exc)
        if (
            exc.connection_invalidated
            or isinstance(exc, sa_exc.InterfaceError)
            or (state is not None and state.startswith(CONNECTION_EXCEPTION_CLASS))
        ):
            return StoreIOError(_detail(exc))
        return DatabaseError(_detail(exc))

    if isinstance(exc, OSError):
        return StoreIOError(_detail(exc))

    return DatabaseError(_detail(exc))


@contextmanager
def store_boundary(operation: str) -> Iterator[None]:
    """
    Translate store exceptions raised inside the block.

    Taxonomy errors pass through untouched; anything coming from SQLAlchemy,
    the DBAPI driver or the socket layer is mapped once and re-raised with
    the original exception chained.
    """
    try:
        yield
    except GraphError:
        raise
    # sqlite3 raises OverflowError unwrapped for integers beyond 64 bits
    except (sa_exc.SQLAlchemyError, OSError, OverflowError) as exc:
        mapped = map_store_error(exc)
        logger.warning("%s failed: %s (%s)", operation, mapped.message, mapped.kind.value)
        raise mapped from exc
