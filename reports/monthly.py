"""
Resumen mensual: ingresos, gastos, ganancia neta y feed de movimientos.

Cada colección se filtra por su fecha (reservas por check_in, el resto por
date) dentro de [inicio, fin] del mes, comparando días calendario.
Todo se recalcula bajo demanda; no se guarda ningún agregado.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

import pandas as pd

from config import PAGE_SIZE, TREND_MONTHS
from core.dates import in_month, month_key, month_name, start_of_month, trailing_months
from core.models import BarTransaction, Booking, Expense, Room, SenderoRecord

CATEGORY_BOOKING = "Reserva"
CATEGORY_SENDERO = "Sendero"
CATEGORY_EXPENSE = "Gasto"


@dataclass
class MonthlySummary:
    month: date
    bookings: List[Booking] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    bar_transactions: List[BarTransaction] = field(default_factory=list)
    sendero_records: List[SenderoRecord] = field(default_factory=list)
    booking_income: float = 0.0
    sendero_income: float = 0.0
    total_income: float = 0.0
    pending_collection: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    bar_income: float = 0.0
    bar_expenses: float = 0.0

    @property
    def collected(self) -> float:
        """Cobrado de reservas (señas + pagos) = facturado - pendiente."""
        return self.booking_income - self.pending_collection

    @property
    def label(self) -> str:
        return month_name(self.month)


def aggregate(month, bookings: Iterable[Booking], expenses: Iterable[Expense],
              bar_transactions: Iterable[BarTransaction],
              sendero_records: Iterable[SenderoRecord]) -> MonthlySummary:
    month = start_of_month(month)

    m_bookings = sorted(
        (b for b in bookings if in_month(b.check_in, month)),
        key=lambda b: b.check_in,
    )
    m_expenses = [e for e in expenses if in_month(e.date, month)]
    m_bar = [t for t in bar_transactions if in_month(t.date, month)]
    m_sendero = [s for s in sendero_records if in_month(s.date, month)]

    booking_income = sum(b.total for b in m_bookings)
    sendero_income = sum(s.person_count * s.price_per_person for s in m_sendero)
    total_income = booking_income + sendero_income
    total_expenses = sum(e.amount for e in m_expenses)

    return MonthlySummary(
        month=month,
        bookings=m_bookings,
        expenses=m_expenses,
        bar_transactions=m_bar,
        sendero_records=m_sendero,
        booking_income=booking_income,
        sendero_income=sendero_income,
        total_income=total_income,
        pending_collection=sum(b.remaining for b in m_bookings),
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
        bar_income=sum(t.amount for t in m_bar if t.type == "income"),
        bar_expenses=sum(t.amount for t in m_bar if t.type == "expense"),
    )


# ─── Feed de movimientos ─────────────────────────────────────────────────────

@dataclass
class Movement:
    date: date
    category: str
    description: str
    amount: float

    @property
    def date_label(self) -> str:
        return self.date.strftime("%d/%m/%Y")


def format_number(amount: float) -> str:
    """1000.0 → "1000", 12.5 → "12.5" (como lo muestra la tabla)."""
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def movement_feed(summary: MonthlySummary, rooms: Optional[Iterable[Room]] = None) -> List[Movement]:
    """
    Una entrada por reserva (+total), salida de sendero (+ingreso) y gasto
    (-monto). Orden: fecha descendente; empates en el orden de origen.
    """
    room_names = {r.id: r.name for r in (rooms or [])}
    feed = []
    for b in summary.bookings:
        unit = room_names.get(b.unit_id, b.unit_id)
        feed.append(Movement(b.check_in, CATEGORY_BOOKING, f"{b.guest_name} - {unit}", b.total))
    for s in summary.sendero_records:
        feed.append(Movement(
            s.date, CATEGORY_SENDERO,
            f"{s.employee} - {s.person_count} personas", s.person_count * s.price_per_person,
        ))
    for e in summary.expenses:
        feed.append(Movement(e.date, CATEGORY_EXPENSE, e.description, -e.amount))
    # sorted() es estable
    return sorted(feed, key=lambda m: m.date, reverse=True)


def filter_movements(movements: List[Movement], query: str) -> List[Movement]:
    """Búsqueda sin mayúsculas sobre fecha, categoría, descripción y monto."""
    q = (query or "").strip().lower()
    if not q:
        return list(movements)
    result = []
    for m in movements:
        haystack = (m.date_label, m.category, m.description, format_number(m.amount))
        if any(q in str(field_value).lower() for field_value in haystack):
            result.append(m)
    return result


@dataclass
class Page:
    items: list
    page: int
    page_count: int
    total: int


def paginate(items: list, page: int, page_size: int = PAGE_SIZE) -> Page:
    """Páginas desde 1. Una página fuera de rango se ajusta al extremo más cercano."""
    if page_size < 1:
        raise ValueError("page_size debe ser mayor a 0")
    total = len(items)
    page_count = math.ceil(total / page_size)
    if page_count == 0:
        return Page(items=[], page=1, page_count=0, total=0)
    page = min(max(1, page), page_count)
    start = (page - 1) * page_size
    return Page(items=items[start:start + page_size], page=page, page_count=page_count, total=total)


def movements_frame(movements: List[Movement]) -> pd.DataFrame:
    """Feed como DataFrame, para la tabla y la exportación CSV/Excel."""
    rows = [{
        "Fecha": m.date_label,
        "Categoría": m.category,
        "Descripción": m.description,
        "Monto": round(m.amount, 2),
    } for m in movements]
    return pd.DataFrame(rows, columns=["Fecha", "Categoría", "Descripción", "Monto"])


# ─── Tendencia ───────────────────────────────────────────────────────────────

def growth_percent(current_income: float, previous_income: float) -> float:
    if previous_income > 0:
        return (current_income - previous_income) / previous_income * 100
    return 0.0


def trailing_summaries(reference, bookings, expenses, bar_transactions, sendero_records,
                       months: int = TREND_MONTHS) -> List[MonthlySummary]:
    """Últimos `months` meses, el más viejo primero."""
    bookings = list(bookings)
    expenses = list(expenses)
    bar_transactions = list(bar_transactions)
    sendero_records = list(sendero_records)
    return [
        aggregate(m, bookings, expenses, bar_transactions, sendero_records)
        for m in trailing_months(reference, months)
    ]


def trend_growth(summaries: List[MonthlySummary]) -> float:
    """Crecimiento del último mes respecto al anterior."""
    if len(summaries) < 2:
        return 0.0
    return growth_percent(summaries[-1].total_income, summaries[-2].total_income)


def average_income(summaries: List[MonthlySummary]) -> float:
    """Ingreso mensual promedio de la ventana."""
    if not summaries:
        return 0.0
    return sum(s.total_income for s in summaries) / len(summaries)


def window_profit(summaries: List[MonthlySummary]) -> float:
    return sum(s.net_profit for s in summaries)


def trend_frame(summaries: List[MonthlySummary]) -> pd.DataFrame:
    """ingresos / gastos / ganancia por mes, indexado por "YYYY-MM"."""
    df = pd.DataFrame(
        [{
            "periodo": month_key(s.month),
            "mes": s.label,
            "ingresos": s.total_income,
            "gastos": s.total_expenses,
            "ganancia": s.net_profit,
        } for s in summaries],
        columns=["periodo", "mes", "ingresos", "gastos", "ganancia"],
    )
    return df.set_index("periodo")


# ─── Bar ─────────────────────────────────────────────────────────────────────

@dataclass
class BarSummary:
    month: date
    transactions: List[BarTransaction]
    income: float
    expense: float

    @property
    def balance(self) -> float:
        return self.income - self.expense


def bar_summary(month, transactions: Iterable[BarTransaction]) -> BarSummary:
    month = start_of_month(month)
    m_tx = sorted(
        (t for t in transactions if in_month(t.date, month)),
        key=lambda t: t.date,
        reverse=True,
    )
    return BarSummary(
        month=month,
        transactions=m_tx,
        income=sum(t.amount for t in m_tx if t.type == "income"),
        expense=sum(t.amount for t in m_tx if t.type == "expense"),
    )
