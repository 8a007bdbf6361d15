from datetime import date

from core.auth import Identity
from core.session import SessionContext

TODAY = date(2024, 3, 20)


def test_month_defaults_to_current_and_shifts_per_view():
    ctx = SessionContext()
    assert ctx.month("finanzas", TODAY) == date(2024, 3, 1)

    ctx.shift_month("finanzas", -1, TODAY)
    assert ctx.month("finanzas", TODAY) == date(2024, 2, 1)
    assert ctx.month("bar", TODAY) == date(2024, 3, 1)


def test_expense_date_is_remembered():
    ctx = SessionContext()
    assert ctx.preferences.expense_date_default(TODAY) == TODAY

    ctx.remember_expense_date(date(2024, 3, 2))
    assert ctx.preferences.expense_date_default(TODAY) == date(2024, 3, 2)


def test_logout_resets_everything():
    ctx = SessionContext()
    ctx.on_identity_changed(Identity(uid="u1", email="admin@hostel.com", id_token="t"))
    ctx.remember_expense_date(date(2024, 3, 2))
    ctx.shift_month("gastos", 2, TODAY)
    ctx.calendar_view = "week"
    ctx.synced = True
    assert ctx.email == "admin@hostel.com"

    ctx.on_identity_changed(None)

    assert ctx.email is None
    assert ctx.preferences.last_expense_date is None
    assert ctx.selected_months == {}
    assert ctx.calendar_view == "month"
    assert not ctx.synced
