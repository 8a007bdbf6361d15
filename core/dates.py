"""
Aritmética de fechas a nivel día calendario.

Todas las comparaciones se hacen sobre `date` (nunca sobre timestamps), así
una reserva "2024-03-10" es el día 10 local sin importar la zona horaria.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import List

import pandas as pd


def to_day(value) -> date:
    """
    Normaliza a `date`: acepta date, datetime, pandas.Timestamp o
    string ISO "YYYY-MM-DD" (también "YYYY-MM-DDTHH:MM..." → se toma el día).
    """
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()[:10]
        try:
            return datetime.strptime(s, "%Y-%m-%d").date()
        except ValueError:
            raise ValueError(f"Fecha no válida: {value!r}")
    raise TypeError(f"No se puede convertir a fecha: {value!r}")


def start_of_month(d) -> date:
    return to_day(d).replace(day=1)


def end_of_month(d) -> date:
    d = to_day(d)
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=last_day)


def add_months(d, n: int) -> date:
    """Suma n meses (negativo = resta), ajustando el día al último del mes."""
    d = to_day(d)
    month_index = d.year * 12 + (d.month - 1) + n
    year, month = divmod(month_index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(d.day, last_day))


MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]


def month_key(d) -> str:
    return to_day(d).strftime("%Y-%m")


def month_name(d) -> str:
    """ "marzo 2024" (sin depender del locale del sistema)."""
    d = to_day(d)
    return f"{MONTH_NAMES[d.month - 1]} {d.year}"


def within(day, start, end) -> bool:
    """start <= day <= end, por día calendario."""
    return to_day(start) <= to_day(day) <= to_day(end)


def in_month(day, month) -> bool:
    return within(day, start_of_month(month), end_of_month(month))


def trailing_months(reference, count: int = 12) -> List[date]:
    """Primer día de los últimos `count` meses, el más viejo primero."""
    ref = start_of_month(reference)
    return [add_months(ref, -i) for i in range(count - 1, -1, -1)]


def start_of_week(d) -> date:
    # semana de lunes a domingo
    d = to_day(d)
    return d - timedelta(days=d.weekday())


def end_of_week(d) -> date:
    return start_of_week(d) + timedelta(days=6)


def calendar_days(reference, view: str = "month") -> List[date]:
    """
    Días de la grilla del calendario.
      - "month": del lunes anterior (o igual) al día 1 al domingo posterior
        (o igual) al último día del mes
      - "week":  la semana lunes-domingo que contiene `reference`
    """
    if view == "month":
        start = start_of_week(start_of_month(reference))
        end = end_of_week(end_of_month(reference))
    elif view == "week":
        start = start_of_week(reference)
        end = end_of_week(reference)
    else:
        raise ValueError(f"Vista desconocida: {view}")
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def shift_period(reference, view: str, step: int) -> date:
    """Navegación: ±step meses (vista mensual) o semanas (vista semanal)."""
    if view == "month":
        return add_months(reference, step)
    return to_day(reference) + timedelta(weeks=step)
