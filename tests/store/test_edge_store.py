from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from typedgraph.errors import DatabaseError, NotFound, ValidationError
from typedgraph.models import Edge, NewEdge, NewVertex
from typedgraph.schema import edge
from typedgraph.validation import MATCHED


@pytest.fixture
def trio(vertex_store):
    """Three vertices: two people and a company."""
    return vertex_store.create_vertices(
        [
            NewVertex(name="alice", type="person", created_by="svc1"),
            NewVertex(name="bob", type="person", created_by="svc1"),
            NewVertex(name="acme", type="company", created_by="svc1"),
        ]
    )


def _edge(src: int, dst: int, label: str = "knows") -> NewEdge:
    return NewEdge(from_vertex_id=src, to_vertex_id=dst, label=label, created_by="svc1")


# ---------------------------------------------------------------------------
# create_edge
# ---------------------------------------------------------------------------

def test_create_edge_denormalizes_endpoint_types(edge_store, trio) -> None:
    alice, _, acme = trio
    created = edge_store.create_edge(_edge(alice.id, acme.id, "worksAt"))

    assert created.id > 0
    assert created.from_vertex_id == alice.id
    assert created.from_vertex_type == "person"
    assert created.to_vertex_id == acme.id
    assert created.to_vertex_type == "company"
    assert created.label == "worksAt"
    assert created.created_by == created.updated_by == "svc1"


def test_edge_types_are_snapshots(edge_store, session_factory, trio) -> None:
    from sqlalchemy import update
    from typedgraph.schema import vertex

    alice, bob, _ = trio
    created = edge_store.create_edge(_edge(alice.id, bob.id))

    # No update operation exists in the API; change the type behind its back.
    with session_factory.begin() as session:
        session.execute(update(vertex).where(vertex.c.id == alice.id).values(type="robot"))

    assert edge_store.get_edge_by_id(created.id).from_vertex_type == "person"
    later = edge_store.create_edge(_edge(alice.id, bob.id, "likes"))
    assert later.from_vertex_type == "robot"


@pytest.mark.parametrize("exists", [True, False])
def test_create_edge_self_loop_fails_without_query(
    edge_store, trio, statements, exists: bool
) -> None:
    vertex_id = trio[0].id if exists else 4242
    statements.clear()

    with pytest.raises(ValidationError) as info:
        edge_store.create_edge(_edge(vertex_id, vertex_id))

    assert info.value.violations[0].code == MATCHED
    assert statements.count == 0


def test_create_edge_missing_endpoint_persists_nothing(edge_store, trio) -> None:
    alice, _, _ = trio

    with pytest.raises(NotFound) as info:
        edge_store.create_edge(_edge(alice.id, 9999))
    assert info.value.ident == 9999

    with pytest.raises(NotFound):
        edge_store.create_edge(_edge(9998, alice.id))

    assert edge_store.list_edges() == []


def test_foreign_key_backstops_a_vanished_endpoint(edge_store, trio, monkeypatch) -> None:
    """
    If a vertex disappears between type resolution and insert, the foreign
    key rejects the edge and the error surfaces as NotFound.
    """
    alice, _, _ = trio
    monkeypatch.setattr(
        "typedgraph.store.edges.resolve_type", lambda session, vertex_id: "person"
    )

    with pytest.raises(NotFound):
        edge_store.create_edge(_edge(alice.id, 777))
    assert edge_store.list_edges() == []


# ---------------------------------------------------------------------------
# create_edges
# ---------------------------------------------------------------------------

def test_create_edges_preserves_order_and_types(edge_store, trio) -> None:
    alice, bob, acme = trio
    batch = [
        _edge(alice.id, bob.id, "knows"),
        _edge(bob.id, acme.id, "worksAt"),
        _edge(alice.id, acme.id, "worksAt"),
        _edge(bob.id, alice.id, "knows"),
    ]
    created = edge_store.create_edges(batch)

    assert [(e.from_vertex_id, e.to_vertex_id, e.label) for e in created] == [
        (b.from_vertex_id, b.to_vertex_id, b.label) for b in batch
    ]
    assert [(e.from_vertex_type, e.to_vertex_type) for e in created] == [
        ("person", "person"),
        ("person", "company"),
        ("person", "company"),
        ("person", "person"),
    ]
    assert len(edge_store.list_edges()) == 4


def test_create_edges_resolves_repeated_endpoints_once(edge_store, trio, statements) -> None:
    alice, bob, acme = trio
    statements.clear()

    edge_store.create_edges(
        [_edge(alice.id, bob.id), _edge(alice.id, acme.id), _edge(bob.id, acme.id)]
    )

    selects = [s for s in statements.matching("SELECT") if "FROM vertex" in s]
    assert len(selects) == 1


def test_create_edges_one_bad_endpoint_persists_nothing(edge_store, trio) -> None:
    alice, bob, acme = trio
    batch = [
        _edge(alice.id, bob.id),
        _edge(bob.id, acme.id),
        _edge(acme.id, 31337),
        _edge(bob.id, alice.id),
    ]

    with pytest.raises(ValidationError) as info:
        edge_store.create_edges(batch)

    [violation] = info.value.violations
    assert violation.index == 2
    assert violation.field == "to_vertex_id"
    assert violation.code == "not_found"
    assert edge_store.list_edges() == []


def test_create_edges_invalid_descriptor_fails_before_store(edge_store, trio, statements) -> None:
    alice, bob, _ = trio
    statements.clear()

    with pytest.raises(ValidationError):
        edge_store.create_edges([_edge(alice.id, bob.id), _edge(bob.id, bob.id)])
    assert statements.count == 0


def test_create_edges_rolls_back_when_insert_fails(
    edge_store, session_factory, trio, monkeypatch
) -> None:
    """A store error after the bulk insert ran leaves no edge behind."""
    alice, bob, acme = trio
    original = Edge.from_row.__func__
    seen: list[int] = []

    def failing_from_row(cls, row):
        seen.append(1)
        if len(seen) == 2:
            raise OperationalError("INSERT INTO edge", {}, Exception("disk I/O error"))
        return original(cls, row)

    monkeypatch.setattr(Edge, "from_row", classmethod(failing_from_row))

    with pytest.raises(DatabaseError):
        edge_store.create_edges(
            [_edge(alice.id, bob.id), _edge(bob.id, acme.id), _edge(alice.id, acme.id)]
        )

    with session_factory() as session:
        assert session.execute(select(func.count()).select_from(edge)).scalar_one() == 0


def test_oversized_endpoint_ids_fail_validation_without_query(edge_store, trio, statements) -> None:
    alice = trio[0]
    statements.clear()

    with pytest.raises(ValidationError) as single:
        edge_store.create_edge(_edge(alice.id, 2**63))
    with pytest.raises(ValidationError) as batch:
        edge_store.create_edges([_edge(alice.id, 2**63)])

    assert [(v.field, v.code) for v in single.value.violations] == [("to_vertex_id", "range")]
    assert [(v.index, v.code) for v in batch.value.violations] == [(0, "range")]
    assert statements.count == 0


def test_create_edges_empty_batch(edge_store, statements) -> None:
    assert edge_store.create_edges([]) == []
    assert statements.count == 0


# ---------------------------------------------------------------------------
# Read-back
# ---------------------------------------------------------------------------

def test_get_edge_by_id(edge_store, trio) -> None:
    alice, bob, _ = trio
    created = edge_store.create_edge(_edge(alice.id, bob.id))
    assert edge_store.get_edge_by_id(created.id) == created

    with pytest.raises(NotFound):
        edge_store.get_edge_by_id(created.id + 100)
    with pytest.raises(ValidationError):
        edge_store.get_edge_by_id(0)


def test_list_edges_filters_by_endpoint(edge_store, trio) -> None:
    alice, bob, acme = trio
    edge_store.create_edges(
        [_edge(alice.id, bob.id), _edge(alice.id, acme.id), _edge(bob.id, acme.id)]
    )

    assert len(edge_store.list_edges(from_vertex_id=alice.id)) == 2
    assert len(edge_store.list_edges(to_vertex_id=acme.id)) == 2
    assert len(edge_store.list_edges(from_vertex_id=alice.id, to_vertex_id=acme.id)) == 1


def test_deleting_a_vertex_cascades_to_its_edges(edge_store, vertex_store, trio) -> None:
    alice, bob, acme = trio
    edge_store.create_edges(
        [_edge(alice.id, bob.id), _edge(bob.id, alice.id), _edge(bob.id, acme.id)]
    )

    assert vertex_store.delete_vertex_by_id(alice.id) == 1

    assert edge_store.list_edges(from_vertex_id=alice.id) == []
    assert edge_store.list_edges(to_vertex_id=alice.id) == []
    remaining = edge_store.list_edges()
    assert [(e.from_vertex_id, e.to_vertex_id) for e in remaining] == [(bob.id, acme.id)]
