"""
Conversión documento ↔ registro y validación de formularios.

Los documentos son dict planos (fila de Google Sheets, JSON del espejo
local o valores de un formulario): los números pueden venir como string
con coma decimal, las fechas como "YYYY-MM-DD", los booleanos como
"TRUE"/"FALSE".
"""

import logging
import time
import uuid
from dataclasses import asdict
from datetime import date, datetime
from typing import List, Optional

from core.models import (
    BarInventoryItem,
    BarTransaction,
    Booking,
    Expense,
    RecordKind,
    SenderoRecord,
)

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("cash", "transfer")
TRANSACTION_TYPES = ("income", "expense")


class ValidationError(ValueError):
    """Errores de formulario; `errors` lista todos los campos inválidos."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def new_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def _is_blank(val) -> bool:
    return val is None or str(val).strip() in ("", "nan", "None")


def _parse_date(val) -> Optional[date]:
    """Convierte YYYY-MM-DD (o dd/mm/YYYY) en date."""
    if _is_blank(val):
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(s[:10], fmt).date()
        except ValueError:
            continue
    return None


def _require_date(doc: dict, key: str) -> date:
    """Fecha obligatoria de un documento guardado; sin ella el documento no sirve."""
    day = _parse_date(doc.get(key))
    if day is None:
        raise ValueError(f"Fecha inválida en \"{key}\": {doc.get(key)!r}")
    return day


def _to_float(val, default: Optional[float] = 0.0) -> Optional[float]:
    if _is_blank(val):
        return default
    if isinstance(val, (int, float)):
        return float(val)
    try:
        return float(str(val).replace(",", ".").replace(" ", ""))
    except (ValueError, TypeError):
        return default


def _to_int(val, default: Optional[int] = 0) -> Optional[int]:
    f = _to_float(val, None)
    if f is None:
        return default
    return int(f)


def _to_bool(val) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("true", "1", "si", "sí", "yes")


def _to_str(val, default: Optional[str] = "") -> Optional[str]:
    if _is_blank(val):
        return default
    return str(val).strip()


# ─── Documento → registro ────────────────────────────────────────────────────

def booking_from_doc(doc: dict) -> Booking:
    return Booking(
        id=_to_str(doc.get("id")),
        unit_id=_to_str(doc.get("unit_id")),
        check_in=_require_date(doc, "check_in"),
        check_out=_require_date(doc, "check_out"),
        guest_name=_to_str(doc.get("guest_name")),
        guest_count=_to_int(doc.get("guest_count"), 1),
        quantity=_to_int(doc.get("quantity"), 1) or 1,
        guest_doc=_to_str(doc.get("guest_doc"), None),
        deposit=_to_float(doc.get("deposit")),
        remaining=_to_float(doc.get("remaining")),
        total=_to_float(doc.get("total")),
        notes=_to_str(doc.get("notes"), None),
        created_at=_to_int(doc.get("created_at")),
    )


def expense_from_doc(doc: dict) -> Expense:
    return Expense(
        id=_to_str(doc.get("id")),
        date=_require_date(doc, "date"),
        description=_to_str(doc.get("description")),
        amount=_to_float(doc.get("amount")),
        payment_method=_to_str(doc.get("payment_method"), "cash"),
        created_at=_to_int(doc.get("created_at")),
    )


def sendero_from_doc(doc: dict) -> SenderoRecord:
    return SenderoRecord(
        id=_to_str(doc.get("id")),
        employee=_to_str(doc.get("employee")),
        person_count=_to_int(doc.get("person_count")),
        price_per_person=_to_float(doc.get("price_per_person")),
        hours=_to_float(doc.get("hours")),
        date=_require_date(doc, "date"),
        created_at=_to_int(doc.get("created_at")),
    )


def inventory_item_from_doc(doc: dict) -> BarInventoryItem:
    return BarInventoryItem(
        id=_to_str(doc.get("id")),
        name=_to_str(doc.get("name")),
        category=_to_str(doc.get("category"), "General"),
        initial_stock=_to_int(doc.get("initial_stock")),
        current_stock=_to_int(doc.get("current_stock")),
        price=_to_float(doc.get("price")),
        created_at=_to_int(doc.get("created_at")),
    )


def bar_transaction_from_doc(doc: dict) -> BarTransaction:
    return BarTransaction(
        id=_to_str(doc.get("id")),
        type=_to_str(doc.get("type"), "income"),
        quantity=_to_int(doc.get("quantity"), None),
        amount=_to_float(doc.get("amount")),
        description=_to_str(doc.get("description")),
        date=_require_date(doc, "date"),
        created_at=_to_int(doc.get("created_at")),
        is_from_inventory=_to_bool(doc.get("is_from_inventory")),
        inventory_item_id=_to_str(doc.get("inventory_item_id"), None),
    )


FROM_DOC = {
    RecordKind.BOOKINGS: booking_from_doc,
    RecordKind.EXPENSES: expense_from_doc,
    RecordKind.SENDERO: sendero_from_doc,
    RecordKind.BAR_TRANSACTIONS: bar_transaction_from_doc,
    RecordKind.BAR_INVENTORY: inventory_item_from_doc,
}


def from_doc(kind, doc: dict):
    return FROM_DOC[RecordKind(kind)](doc)


def to_document(record) -> dict:
    """Registro → dict JSON-serializable (fechas en ISO)."""
    doc = asdict(record)
    for key, val in doc.items():
        if isinstance(val, date):
            doc[key] = val.strftime("%Y-%m-%d")
    return doc


# ─── Validación de formularios ───────────────────────────────────────────────

def parse_booking_form(form: dict, unit_id: str, existing: Optional[Booking] = None) -> Booking:
    """
    Valida el formulario de reserva. Al editar conserva id y created_at.
    `remaining` se recalcula como total - deposit.
    """
    errors = []
    check_in = _parse_date(form.get("check_in"))
    check_out = _parse_date(form.get("check_out"))
    total = _to_float(form.get("total"), None)
    deposit = _to_float(form.get("deposit"), 0.0)

    if check_in is None:
        errors.append('El campo "Entrada" es obligatorio')
    if check_out is None:
        errors.append('El campo "Salida" es obligatorio')
    if check_in and check_out and check_out < check_in:
        errors.append("La salida no puede ser anterior a la entrada")
    if total is None:
        errors.append('El campo "Total" es obligatorio')
    elif total < 0:
        errors.append("El total no puede ser negativo")
    if deposit < 0:
        errors.append("La seña no puede ser negativa")
    if errors:
        raise ValidationError(errors)

    return Booking(
        id=existing.id if existing else new_id(),
        unit_id=unit_id,
        check_in=check_in,
        check_out=check_out,
        guest_name=_to_str(form.get("guest_name")) or "Anónimo",
        guest_count=_to_int(form.get("guest_count"), 1) or 1,
        quantity=_to_int(form.get("quantity"), 1) or 1,
        guest_doc=_to_str(form.get("guest_doc"), None),
        deposit=deposit,
        remaining=total - deposit,
        total=total,
        notes=_to_str(form.get("notes"), None),
        created_at=existing.created_at if existing else now_ms(),
    )


def parse_expense_form(form: dict) -> Expense:
    errors = []
    description = _to_str(form.get("description"))
    amount = _to_float(form.get("amount"), None)
    day = _parse_date(form.get("date"))
    method = _to_str(form.get("payment_method"), "cash")

    if not description:
        errors.append('El campo "Descripción" es obligatorio')
    if amount is None or amount <= 0:
        errors.append('El campo "Monto" es obligatorio y debe ser mayor a 0')
    if day is None:
        errors.append('El campo "Fecha" es obligatorio')
    if method not in PAYMENT_METHODS:
        errors.append(f"Medio de pago no válido: {method}")
    if errors:
        raise ValidationError(errors)

    return Expense(
        id=new_id(), date=day, description=description, amount=amount,
        payment_method=method, created_at=now_ms(),
    )


def parse_sendero_form(form: dict) -> SenderoRecord:
    errors = []
    employee = _to_str(form.get("employee"))
    person_count = _to_int(form.get("person_count"), None)
    price = _to_float(form.get("price_per_person"), None)
    hours = _to_float(form.get("hours"), None)
    day = _parse_date(form.get("date"))

    if not employee:
        errors.append('El campo "Empleado" es obligatorio')
    if person_count is None or person_count < 1:
        errors.append('El campo "Cantidad de Personas" es obligatorio y debe ser mayor a 0')
    if price is None or price < 0:
        errors.append('El campo "Precio por Persona" es obligatorio y debe ser mayor o igual a 0')
    if hours is None or hours < 0:
        errors.append('El campo "Horas" es obligatorio y debe ser mayor o igual a 0')
    if day is None:
        errors.append('El campo "Fecha" es obligatorio')
    if errors:
        raise ValidationError(errors)

    return SenderoRecord(
        id=new_id(), employee=employee, person_count=person_count,
        price_per_person=price, hours=hours, date=day, created_at=now_ms(),
    )


def parse_inventory_form(form: dict, existing: Optional[BarInventoryItem] = None) -> BarInventoryItem:
    """Alta: initial_stock = current_stock. Edición: se toca solo current_stock."""
    errors = []
    name = _to_str(form.get("name"))
    stock = _to_int(form.get("stock"), None)
    price = _to_float(form.get("price"), None)

    if not name:
        errors.append('El campo "Nombre" es obligatorio')
    if stock is None or stock < 0:
        errors.append('El campo "Stock" es obligatorio y debe ser mayor o igual a 0')
    if price is None or price < 0:
        errors.append('El campo "Precio" es obligatorio y debe ser mayor o igual a 0')
    if errors:
        raise ValidationError(errors)

    category = _to_str(form.get("category")) or "General"
    if existing:
        return BarInventoryItem(
            id=existing.id, name=name, category=category,
            initial_stock=existing.initial_stock, current_stock=stock,
            price=price, created_at=existing.created_at,
        )
    return BarInventoryItem(
        id=new_id(), name=name, category=category, initial_stock=stock,
        current_stock=stock, price=price, created_at=now_ms(),
    )


def parse_bar_transaction_form(form: dict, existing: Optional[BarTransaction] = None) -> BarTransaction:
    """
    Movimiento del bar. Para ventas de inventario la descripción la pone el
    artículo elegido (form["description"] ya viene con el nombre).
    """
    errors = []
    tx_type = _to_str(form.get("type"), "income")
    description = _to_str(form.get("description"))
    amount = _to_float(form.get("amount"), None)
    day = _parse_date(form.get("date"))
    quantity = _to_int(form.get("quantity"), 1)
    from_inventory = tx_type == "income" and _to_bool(form.get("is_from_inventory", False))
    item_id = _to_str(form.get("inventory_item_id"), None) if from_inventory else None

    if tx_type not in TRANSACTION_TYPES:
        errors.append(f"Tipo no válido: {tx_type}")
    if from_inventory and not item_id:
        errors.append("Seleccione un artículo del inventario")
    if not description:
        errors.append('El campo "Descripción" es obligatorio')
    if amount is None:
        errors.append('El campo "Monto" es obligatorio')
    if day is None:
        errors.append('El campo "Fecha" es obligatorio')
    if quantity < 1:
        errors.append("La cantidad debe ser mayor a 0")
    if errors:
        raise ValidationError(errors)

    return BarTransaction(
        id=existing.id if existing else new_id(),
        type=tx_type,
        quantity=quantity,
        amount=amount,
        description=description,
        date=day,
        created_at=existing.created_at if existing else now_ms(),
        is_from_inventory=from_inventory,
        inventory_item_id=item_id,
    )
