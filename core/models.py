"""
Modelos de datos: unidades, reservas, gastos, sendero y bar.

Los registros se reemplazan enteros: editar = dataclasses.replace() con el
mismo id y guardar en lugar del anterior.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class RecordKind(str, Enum):
    BOOKINGS = "bookings"
    EXPENSES = "expenses"
    SENDERO = "sendero"
    BAR_TRANSACTIONS = "bar_transactions"
    BAR_INVENTORY = "bar_inventory"


SHARED_KINDS = ("tent", "motorhome")


@dataclass
class Room:
    """Una unidad alojable. Estática, viene de config.ROOMS."""
    id: str
    name: str
    kind: str               # "room" | "house" | "tent" | "motorhome"
    display_tag: str = ""   # color/etiqueta en el calendario

    @property
    def is_shared(self) -> bool:
        # carpas y motorhomes admiten varias reservas el mismo día
        return self.kind in SHARED_KINDS


@dataclass
class Booking:
    """Una reserva de una unidad."""
    id: str
    unit_id: str
    check_in: date
    check_out: date
    guest_name: str
    guest_count: int
    deposit: float          # seña
    remaining: float        # falta cobrar (= total - deposit, lo mantiene el formulario)
    total: float
    created_at: int         # epoch ms
    quantity: int = 1       # ocupantes de la parcela (carpas / motorhome)
    guest_doc: Optional[str] = None
    notes: Optional[str] = None

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def is_paid(self) -> bool:
        return self.remaining == 0


@dataclass
class Expense:
    """Un gasto del hostel. Solo alta y baja."""
    id: str
    date: date
    description: str
    amount: float
    payment_method: str     # "cash" | "transfer"
    created_at: int


@dataclass
class SenderoRecord:
    """Una salida guiada del sendero."""
    id: str
    employee: str
    person_count: int
    price_per_person: float
    hours: float
    date: date
    created_at: int

    @property
    def revenue(self) -> float:
        return self.person_count * self.price_per_person


@dataclass
class BarInventoryItem:
    id: str
    name: str
    category: str
    initial_stock: int
    current_stock: int
    price: float
    created_at: int


@dataclass
class BarTransaction:
    """Movimiento del bar. Si es una venta de inventario descuenta stock."""
    id: str
    type: str               # "income" | "expense"
    amount: float
    description: str
    date: date
    created_at: int
    quantity: Optional[int] = None
    is_from_inventory: bool = False
    inventory_item_id: Optional[str] = None

    @property
    def effective_quantity(self) -> int:
        return self.quantity or 1

    @property
    def is_inventory_sale(self) -> bool:
        return (
            self.type == "income"
            and bool(self.is_from_inventory)
            and bool(self.inventory_item_id)
        )
