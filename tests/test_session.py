from __future__ import annotations

import allure
import pytest

from script_runner.runner.errors import SessionError
from script_runner.runner.models import Relationship
from script_runner.runner.session import ProcessSession
from script_runner.runner.store import WorkItemStore

pytestmark = [
    allure.epic("Script Execution"),
    allure.feature("Process Session"),
]


def _store(*payloads: bytes) -> WorkItemStore:
    store = WorkItemStore({"owner": "team-a"})
    for payload in payloads:
        store.admit(payload)
    return store


def test_get_returns_items_in_fifo_order_then_none() -> None:
    store = _store(b"first", b"second")
    session = ProcessSession(store=store)

    first = session.get()
    second = session.get()

    assert first is not None and first.content == b"first"
    assert second is not None and second.content == b"second"
    assert session.get() is None


def test_commit_returns_transfers_in_call_order() -> None:
    session = ProcessSession(store=_store(b"a", b"b"))
    first = session.get()
    second = session.get()

    session.transfer(second, Relationship.FAILURE)
    session.transfer(first, "success")

    assert session.commit() == [(second, Relationship.FAILURE), (first, Relationship.SUCCESS)]


def test_write_and_attribute_changes_apply_to_item() -> None:
    session = ProcessSession(store=_store(b"hello"))
    item = session.get()

    session.write(item, session.read_text(item).upper())
    session.put_attribute(item, "count", 3)
    session.put_all_attributes(item, {"a": "1", "b": "2"})
    session.remove_attribute(item, "owner")
    session.transfer(item, Relationship.SUCCESS)
    session.commit()

    assert item.content == b"HELLO"
    assert item.size == 5
    assert item.attributes["count"] == "3"
    assert item.attributes["a"] == "1"
    assert "owner" not in item.attributes


def test_commit_rejects_items_left_without_transfer() -> None:
    session = ProcessSession(store=_store(b"x"))
    session.get()

    with pytest.raises(SessionError, match="neither transferred nor removed"):
        session.commit()


def test_removed_items_are_not_reported() -> None:
    session = ProcessSession(store=_store(b"x"))
    item = session.get()

    session.transfer(item, Relationship.SUCCESS)
    session.remove(item)

    assert session.commit() == []


def test_transfer_rejects_unknown_relationship() -> None:
    session = ProcessSession(store=_store(b"x"))
    item = session.get()

    with pytest.raises(SessionError, match="Unknown relationship"):
        session.transfer(item, "retry")


def test_foreign_items_are_rejected() -> None:
    store = _store(b"x")
    other = ProcessSession(store=_store(b"y")).get()
    session = ProcessSession(store=store)

    with pytest.raises(SessionError, match="does not belong"):
        session.transfer(other, Relationship.SUCCESS)


def test_create_child_inherits_attributes_and_lineage() -> None:
    session = ProcessSession(store=_store(b"parent"))
    parent = session.get()

    child = session.create(parent)
    copy = session.clone(parent)

    assert child.content == b""
    assert copy.content == b"parent"
    assert child.attributes["owner"] == "team-a"
    assert child.attributes["uuid"] != parent.attributes["uuid"]
    assert child.lineage_start_date == parent.lineage_start_date
    assert len({parent.id, child.id, copy.id}) == 3


def test_rollback_restores_taken_items_and_discards_created_ones() -> None:
    session = ProcessSession(store=_store(b"original"))
    item = session.get()
    session.write(item, b"changed")
    session.put_attribute(item, "touched", "yes")
    session.create(item)

    restored = session.rollback()

    assert restored == [item]
    assert item.content == b"original"
    assert "touched" not in item.attributes
    with pytest.raises(SessionError, match="already committed or rolled back"):
        session.get()
