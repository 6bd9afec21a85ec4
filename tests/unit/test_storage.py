from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from proposal_registry.models import Proposal
from proposal_registry.services import InMemoryProposalStore, ProposalRecord, SqlAlchemyProposalStore

CREATED = datetime(2024, 7, 18, 9, 30, tzinfo=UTC)


def _record(proposal_id: str, **overrides: object) -> ProposalRecord:
    values: dict[str, object] = {
        "id": proposal_id,
        "owner": "alice",
        "title": "Title",
        "description": "Description",
        "voters": (),
        "yes_votes": 0,
        "no_votes": 0,
        "created_at": CREATED,
        "updated_at": None,
    }
    values.update(overrides)
    return ProposalRecord(**values)  # type: ignore[arg-type]


def test_sql_store_insert_and_get(db_session: Session) -> None:
    store = SqlAlchemyProposalStore(db_session)
    record = _record("00000000-0000-0000-0000-000000000001")

    assert store.insert(record) is None
    assert store.get(record.id) == record
    assert db_session.query(Proposal).count() == 1


def test_sql_store_insert_replaces_whole_record(db_session: Session) -> None:
    store = SqlAlchemyProposalStore(db_session)
    original = _record("00000000-0000-0000-0000-000000000002")
    store.insert(original)

    updated = replace(
        original,
        voters=("bob", "carol"),
        yes_votes=1,
        no_votes=1,
        updated_at=datetime(2024, 7, 19, tzinfo=UTC),
    )
    previous = store.insert(updated)

    assert previous == original
    assert store.get(original.id) == updated
    assert db_session.query(Proposal).count() == 1


def test_sql_store_remove(db_session: Session) -> None:
    store = SqlAlchemyProposalStore(db_session)
    record = _record("00000000-0000-0000-0000-000000000003")
    store.insert(record)

    assert store.remove(record.id) == record
    assert store.get(record.id) is None
    assert store.remove(record.id) is None


def test_sql_store_values_in_key_order(db_session: Session) -> None:
    store = SqlAlchemyProposalStore(db_session)
    for proposal_id in ("c", "a", "b"):
        store.insert(_record(proposal_id))

    assert [item.id for item in store.values()] == ["a", "b", "c"]


def test_in_memory_store_mirrors_map_semantics() -> None:
    store = InMemoryProposalStore()
    first = _record("b")
    second = _record("a")

    assert store.insert(first) is None
    assert store.insert(second) is None
    assert store.insert(replace(first, title="Changed")) == first
    assert [item.id for item in store.values()] == ["a", "b"]
    assert store.remove("missing") is None
    assert store.remove("a") == second

    store.clear()
    assert store.values() == []


def test_sql_store_locking_get_reloads_row(db_session: Session) -> None:
    store = SqlAlchemyProposalStore(db_session)
    record = _record("00000000-0000-0000-0000-000000000004")
    store.insert(record)
    assert store.get(record.id) == record

    # A write from elsewhere that bypasses this session's identity map.
    table = Proposal.__table__
    db_session.execute(
        update(table).where(table.c.id == record.id).values(voters=["bob"], yes_votes=1)
    )

    locked = store.get(record.id, for_update=True)
    assert locked is not None
    assert locked.voters == ("bob",)
    assert locked.yes_votes == 1
