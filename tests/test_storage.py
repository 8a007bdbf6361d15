import json
from datetime import date

import pytest

from core.mirror import LocalMirror
from core.occupancy import is_occupied
from core.storage import Store, UnsupportedOperation
from parsers.records import to_document
from reports.monthly import aggregate

from conftest import FakeRemote, make_booking, make_expense, make_item


def test_create_is_readable_immediately(store, remote):
    store.bookings.create(make_booking())

    assert [b.id for b in store.bookings.get_all()] == ["b1"]
    assert ("upsert", "bookings") in remote.calls
    assert remote.data["bookings"][0]["id"] == "b1"


def test_remote_failure_keeps_mirror_write(mirror):
    store = Store(mirror, FakeRemote(fail_on={"upsert", "delete"}))

    store.expenses.create(make_expense())
    assert len(store.expenses.get_all()) == 1

    store.expenses.delete("e1")
    assert store.expenses.get_all() == []


def test_works_without_remote(mirror):
    store = Store(mirror)
    store.bar_inventory.create(make_item())
    assert store.bar_inventory.get("i1").name == "Cerveza"


def test_update_only_for_editable_kinds(store):
    store.expenses.create(make_expense())
    with pytest.raises(UnsupportedOperation):
        store.expenses.update(make_expense(amount=1))

    store.bookings.create(make_booking())
    store.bookings.update(make_booking(total=2000, deposit=0))
    assert store.bookings.get("b1").remaining == 2000


def test_delete_unknown_id_is_harmless(store):
    store.bookings.create(make_booking())
    store.bookings.delete("nope")
    assert len(store.bookings.get_all()) == 1


def test_resync_replaces_mirror(store, remote):
    store.bookings.create(make_booking(id="local"))
    remote.data = {"bookings": [to_document(make_booking(id="remote"))]}

    result = store.resync_all()

    assert result.ok
    assert len(result.synced) == 5
    assert [b.id for b in store.bookings.get_all()] == ["remote"]


def test_resync_partial_failure_keeps_previous_content(mirror):
    remote = FakeRemote(fail_on={"expenses"})
    store = Store(mirror, remote)
    store.expenses.create(make_expense())  # el upsert falla, el espejo queda

    result = store.resync_all()

    assert not result.ok
    assert set(result.errors) == {"expenses"}
    assert len(store.expenses.get_all()) == 1


def test_resync_without_remote_reports_error(mirror):
    result = Store(mirror).resync_all()
    assert "*" in result.errors


def test_corrupt_mirror_reads_as_empty(tmp_path):
    path = tmp_path / "mirror.json"
    path.write_text("{no es json", encoding="utf-8")
    mirror = LocalMirror(str(path))

    assert mirror.load("bookings") == []
    assert Store(mirror).bookings.get_all() == []


def test_invalid_document_is_skipped(tmp_path):
    path = tmp_path / "mirror.json"
    good = to_document(make_booking())
    path.write_text(json.dumps({"bookings": [good, "basura"]}), encoding="utf-8")

    assert [b.id for b in Store(LocalMirror(str(path))).bookings.get_all()] == ["b1"]


def test_document_without_date_is_skipped(tmp_path):
    path = tmp_path / "mirror.json"
    good = to_document(make_booking())
    blank = dict(to_document(make_booking(id="b2")), check_in="")
    bad_expense = dict(to_document(make_expense()), date="mañana")
    path.write_text(json.dumps({"bookings": [good, blank], "expenses": [bad_expense]}), encoding="utf-8")
    store = Store(LocalMirror(str(path)))

    bookings = store.bookings.get_all()
    assert [b.id for b in bookings] == ["b1"]
    assert store.expenses.get_all() == []
    assert is_occupied(date(2024, 3, 10), "room-1", bookings)
    assert aggregate(date(2024, 3, 1), bookings, [], [], []).total_income == 1000


def test_mirror_replace_all_keeps_other_kinds(mirror):
    mirror.save("bookings", [{"id": "b1"}])
    mirror.save("expenses", [{"id": "e1"}])

    mirror.replace_all({"bookings": []})

    assert mirror.load("bookings") == []
    assert mirror.load("expenses") == [{"id": "e1"}]

    mirror.clear()
    assert mirror.load("expenses") == []
