from datetime import date

import pytest

from core.mirror import LocalMirror
from core.models import BarInventoryItem, BarTransaction, Booking, Expense, SenderoRecord
from core.storage import Store


class FakeRemote:
    """Remoto en memoria con el mismo contrato que SheetsRemote."""

    def __init__(self, data=None, fail_on=()):
        self.data = {k: list(v) for k, v in (data or {}).items()}
        self.fail_on = set(fail_on)
        self.calls = []

    def _check(self, op, kind):
        self.calls.append((op, kind))
        if op in self.fail_on or kind in self.fail_on:
            raise ConnectionError(f"remoto caído ({op} {kind})")

    def get_all(self, kind):
        self._check("get_all", kind)
        return list(self.data.get(kind, []))

    def upsert(self, kind, doc):
        self._check("upsert", kind)
        rows = [d for d in self.data.get(kind, []) if d["id"] != doc["id"]]
        rows.append(doc)
        self.data[kind] = rows

    def delete(self, kind, record_id):
        self._check("delete", kind)
        self.data[kind] = [d for d in self.data.get(kind, []) if d["id"] != record_id]


@pytest.fixture
def mirror(tmp_path):
    return LocalMirror(str(tmp_path / "mirror.json"))


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def store(mirror, remote):
    return Store(mirror, remote)


def make_booking(id="b1", unit_id="room-1", check_in=date(2024, 3, 10), check_out=date(2024, 3, 12),
                 total=1000.0, deposit=800.0, quantity=1, guest_name="Ana"):
    return Booking(
        id=id, unit_id=unit_id, check_in=check_in, check_out=check_out,
        guest_name=guest_name, guest_count=1, deposit=deposit,
        remaining=total - deposit, total=total, created_at=1, quantity=quantity,
    )


def make_expense(id="e1", day=date(2024, 3, 5), amount=300.0, description="Verdulería"):
    return Expense(id=id, date=day, description=description, amount=amount,
                   payment_method="cash", created_at=1)


def make_sendero(id="s1", day=date(2024, 3, 7), person_count=4, price=25.0):
    return SenderoRecord(id=id, employee="Juan", person_count=person_count,
                         price_per_person=price, hours=2.0, date=day, created_at=1)


def make_item(id="i1", stock=10, price=5.0, name="Cerveza"):
    return BarInventoryItem(id=id, name=name, category="Bebidas", initial_stock=stock,
                            current_stock=stock, price=price, created_at=1)


def make_sale(id="t1", item_id="i1", quantity=3, amount=15.0, day=date(2024, 3, 8)):
    return BarTransaction(id=id, type="income", amount=amount, description="Cerveza",
                          date=day, created_at=1, quantity=quantity,
                          is_from_inventory=True, inventory_item_id=item_id)
