"""
Contexto de sesión del panel: identidad, preferencias y navegación.

Todo se reinicia al hacer logout (reset()).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional

from core.dates import add_months, start_of_month


@dataclass
class UserPreferences:
    # última fecha usada en el formulario de gastos (se propone en el próximo alta)
    last_expense_date: Optional[date] = None

    def expense_date_default(self, today: date) -> date:
        return self.last_expense_date or today


@dataclass
class SessionContext:
    email: Optional[str] = None
    preferences: UserPreferences = field(default_factory=UserPreferences)
    # mes elegido en cada vista ("finanzas", "gastos", "bar", ...)
    selected_months: Dict[str, date] = field(default_factory=dict)
    calendar_reference: Optional[date] = None
    calendar_view: str = "month"
    synced: bool = False

    def month(self, view: str, today: date) -> date:
        return self.selected_months.get(view) or start_of_month(today)

    def shift_month(self, view: str, step: int, today: date) -> date:
        month = add_months(self.month(view, today), step)
        self.selected_months[view] = month
        return month

    def remember_expense_date(self, day: date) -> None:
        self.preferences.last_expense_date = day

    def reset(self) -> None:
        self.email = None
        self.preferences = UserPreferences()
        self.selected_months = {}
        self.calendar_reference = None
        self.calendar_view = "month"
        self.synced = False

    def on_identity_changed(self, identity) -> None:
        """Suscriptor de AuthGate: logout → reset."""
        if identity is None:
            self.reset()
        else:
            self.email = identity.email
