from datetime import date

import pytest

from core.models import RecordKind
from parsers.records import (
    ValidationError,
    from_doc,
    parse_bar_transaction_form,
    parse_booking_form,
    parse_expense_form,
    parse_inventory_form,
    parse_sendero_form,
    to_document,
)

from conftest import make_booking, make_item, make_sale


def test_booking_form_computes_remaining_and_defaults():
    booking = parse_booking_form(
        {"check_in": "2024-03-10", "check_out": "2024-03-12", "total": "1000", "deposit": "250,5"},
        "room-1",
    )
    assert booking.unit_id == "room-1"
    assert booking.guest_name == "Anónimo"
    assert booking.deposit == 250.5
    assert booking.remaining == 749.5
    assert booking.nights == 2
    assert booking.guest_doc is None


def test_booking_form_edit_keeps_identity():
    existing = make_booking()
    edited = parse_booking_form(
        {"check_in": date(2024, 3, 10), "check_out": date(2024, 3, 14), "total": 1200, "deposit": 1200,
         "guest_name": "Ana Pérez"},
        existing.unit_id, existing,
    )
    assert edited.id == existing.id
    assert edited.created_at == existing.created_at
    assert edited.is_paid


def test_booking_form_collects_every_error():
    with pytest.raises(ValidationError) as exc:
        parse_booking_form({"check_in": "2024-03-12", "check_out": "2024-03-10", "deposit": "-1"}, "room-1")
    errors = exc.value.errors
    assert "La salida no puede ser anterior a la entrada" in errors
    assert 'El campo "Total" es obligatorio' in errors
    assert "La seña no puede ser negativa" in errors


def test_expense_form_requires_positive_amount():
    with pytest.raises(ValidationError):
        parse_expense_form({"description": "Gas", "amount": "0", "date": "2024-03-01"})
    expense = parse_expense_form({"description": "Gas", "amount": "12.5", "date": "01/03/2024",
                                  "payment_method": "transfer"})
    assert expense.date == date(2024, 3, 1)
    assert expense.payment_method == "transfer"


def test_expense_form_rejects_unknown_payment_method():
    with pytest.raises(ValidationError):
        parse_expense_form({"description": "Gas", "amount": 10, "date": "2024-03-01",
                            "payment_method": "crypto"})


def test_sendero_form():
    record = parse_sendero_form({"employee": "Juan", "person_count": "4", "price_per_person": "25",
                                 "hours": "2", "date": "2024-03-07"})
    assert record.revenue == 100

    with pytest.raises(ValidationError) as exc:
        parse_sendero_form({"employee": "", "person_count": 0, "price_per_person": 10,
                            "hours": 1, "date": "2024-03-07"})
    assert len(exc.value.errors) == 2


def test_inventory_form_edit_only_touches_current_stock():
    existing = make_item(stock=10)
    edited = parse_inventory_form({"name": "Cerveza", "stock": 4, "price": 6}, existing)
    assert edited.initial_stock == 10
    assert edited.current_stock == 4
    assert edited.category == "General"

    created = parse_inventory_form({"name": "Agua", "stock": 20, "price": 2, "category": "Bebidas"})
    assert created.initial_stock == created.current_stock == 20


def test_bar_form_links_inventory_only_for_income():
    sale = parse_bar_transaction_form({"type": "income", "description": "Cerveza", "amount": 15,
                                       "date": "2024-03-08", "quantity": 3,
                                       "is_from_inventory": True, "inventory_item_id": "i1"})
    assert sale.is_inventory_sale
    assert sale.quantity == 3

    expense = parse_bar_transaction_form({"type": "expense", "description": "Hielo", "amount": 5,
                                          "date": "2024-03-08", "is_from_inventory": True,
                                          "inventory_item_id": "i1"})
    assert not expense.is_from_inventory
    assert expense.inventory_item_id is None


def test_bar_form_rejects_bad_quantity_and_missing_item():
    with pytest.raises(ValidationError) as exc:
        parse_bar_transaction_form({"type": "income", "description": "Cerveza", "amount": 15,
                                    "date": "2024-03-08", "quantity": 0, "is_from_inventory": True})
    assert "La cantidad debe ser mayor a 0" in exc.value.errors
    assert "Seleccione un artículo del inventario" in exc.value.errors


def test_bar_form_edit_keeps_created_at():
    existing = make_sale()
    edited = parse_bar_transaction_form({"type": "income", "description": "Cerveza", "amount": 25,
                                         "date": "2024-03-08", "quantity": 5,
                                         "is_from_inventory": True, "inventory_item_id": "i1"},
                                        existing)
    assert edited.id == existing.id
    assert edited.created_at == existing.created_at


def test_sheet_row_is_parsed():
    row = {"id": "t9", "type": "income", "quantity": "2", "amount": "10,5", "description": "Café",
           "date": "2024-03-08", "created_at": "1710000000000", "is_from_inventory": "TRUE",
           "inventory_item_id": ""}
    tx = from_doc(RecordKind.BAR_TRANSACTIONS, row)
    assert tx.amount == 10.5
    assert tx.quantity == 2
    assert tx.is_from_inventory
    assert tx.inventory_item_id is None
    assert tx.date == date(2024, 3, 8)


def test_document_uses_iso_dates():
    doc = to_document(make_booking())
    assert doc["check_in"] == "2024-03-10"
    assert from_doc("bookings", doc) == make_booking()


def test_stored_document_needs_its_dates():
    with pytest.raises(ValueError):
        from_doc("bookings", dict(to_document(make_booking()), check_out=None))
    with pytest.raises(ValueError):
        from_doc(RecordKind.SENDERO, {"id": "s1", "employee": "Juan", "date": "31/02/2024"})
