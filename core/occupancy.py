"""
Ocupación de unidades por día.

Una unidad está ocupada el día `d` si alguna reserva suya cumple
check_in <= d < check_out, o bien check_in == check_out == d (reserva de
un solo día, sale el mismo día que entra).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List

import pandas as pd

from core.dates import to_day
from core.models import Booking, Room


def covers(booking: Booking, day) -> bool:
    d = to_day(day)
    start = to_day(booking.check_in)
    end = to_day(booking.check_out)
    if start == end:
        return d == start
    return start <= d < end


def bookings_on(day, unit_id: str, bookings: Iterable[Booking]) -> List[Booking]:
    """Reservas de la unidad que ocupan el día."""
    d = to_day(day)
    return [b for b in bookings if b.unit_id == unit_id and covers(b, d)]


def is_occupied(day, unit_id: str, bookings: Iterable[Booking]) -> bool:
    d = to_day(day)
    return any(b.unit_id == unit_id and covers(b, d) for b in bookings)


def occupied_quantity(day, unit_id: str, bookings: Iterable[Booking]) -> int:
    """Suma de `quantity` de las reservas del día (carpas/motorhome: "N ocupados")."""
    return sum((b.quantity or 1) for b in bookings_on(day, unit_id, bookings))


@dataclass
class RoomStatus:
    room: Room
    bookings: List[Booking] = field(default_factory=list)

    @property
    def occupied(self) -> bool:
        return bool(self.bookings)

    @property
    def quantity(self) -> int:
        return sum((b.quantity or 1) for b in self.bookings)


def day_overview(day, rooms: Iterable[Room], bookings: List[Booking]) -> List[RoomStatus]:
    """Estado de cada unidad en el día, en el orden de configuración."""
    return [RoomStatus(room=r, bookings=bookings_on(day, r.id, bookings)) for r in rooms]


def occupancy_grid(days: Iterable[date], rooms: List[Room], bookings: List[Booking]) -> pd.DataFrame:
    """
    Grilla días × unidades para el calendario.
    Unidades compartidas → cantidad ocupada; exclusivas → 0/1.
    """
    days = [to_day(d) for d in days]
    data = {}
    for r in rooms:
        column = []
        for d in days:
            if r.is_shared:
                column.append(occupied_quantity(d, r.id, bookings))
            else:
                column.append(1 if is_occupied(d, r.id, bookings) else 0)
        data[r.id] = column
    return pd.DataFrame(data, index=pd.Index(days, name="day"), columns=[r.id for r in rooms])
