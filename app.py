"""
Hostel - Panel de reservas, gastos, sendero y bar
Web app en Streamlit con Google Sheets como almacenamiento.
"""

import io
import logging
import os
import sys
from datetime import date, timedelta

import pandas as pd
import streamlit as st

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import LOG_LEVEL, MIRROR_PATH, PAGE_SIZE, ROOMS, TREND_MONTHS
from core.auth import AuthError, AuthGate, IdentityClient
from core.dates import calendar_days, month_name, shift_period
from core.ledger import BarLedger, InsufficientStockError, LedgerWriteError, sale_amount
from core.occupancy import day_overview, occupancy_grid
from core.session import SessionContext
from core.sheets import SheetsRemote, check_sheets_connection
from core.storage import Store, build_store
from parsers.records import (
    ValidationError,
    parse_bar_transaction_form,
    parse_booking_form,
    parse_expense_form,
    parse_inventory_form,
    parse_sendero_form,
)
from reports.monthly import (
    aggregate,
    average_income,
    bar_summary,
    filter_movements,
    movement_feed,
    movements_frame,
    paginate,
    trailing_summaries,
    trend_frame,
    trend_growth,
    window_profit,
)
from reports.pdf import bar_report_pdf, monthly_report_pdf, money, report_filename

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("hostel")

st.set_page_config(
    page_title="Hostel - Panel",
    page_icon="🏕️",
    layout="wide",
)

WEEKDAYS = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]
PAYMENT_LABELS = {"cash": "Efectivo", "transfer": "Transferencia"}
TYPE_LABELS = {"income": "Ingreso", "expense": "Egreso"}


# ── Recursos de sesión ──────────────────────────────────────────────────────
@st.cache_resource
def get_store() -> Store:
    remote = SheetsRemote() if check_sheets_connection() else None
    return build_store(MIRROR_PATH, remote)


def get_context() -> SessionContext:
    if "ctx" not in st.session_state:
        st.session_state.ctx = SessionContext()
    return st.session_state.ctx


def firebase_api_key() -> str:
    try:
        return st.secrets["firebase"]["api_key"]
    except Exception:
        return ""


@st.cache_resource
def get_identity_client() -> IdentityClient:
    # un solo httpx.Client para todas las sesiones
    return IdentityClient(firebase_api_key())


def get_auth_gate() -> AuthGate:
    if "auth_gate" not in st.session_state:
        gate = AuthGate(get_identity_client())
        gate.subscribe(get_context().on_identity_changed)
        st.session_state.auth_gate = gate
    return st.session_state.auth_gate


def df_to_excel_bytes(df: pd.DataFrame) -> bytes:
    """Convierte DataFrame en bytes XLSX para la descarga."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Datos")
    return buf.getvalue()


def show_errors(e: Exception):
    if isinstance(e, ValidationError):
        for msg in e.errors:
            st.error(msg)
    else:
        st.error(str(e))


def confirm_delete(key: str, label: str, on_confirm) -> None:
    """Botón de borrar con paso de confirmación; Cancelar no toca nada."""
    flag = f"confirm_{key}"
    if not st.session_state.get(flag):
        if st.button("🗑️ Eliminar", key=f"del_{key}"):
            st.session_state[flag] = True
            st.rerun()
        return
    st.warning(f"¿Eliminar {label}? Esta acción no se puede deshacer.")
    c1, c2 = st.columns(2)
    if c1.button("Confirmar", key=f"yes_{key}", type="primary"):
        st.session_state[flag] = False
        on_confirm()
        st.rerun()
    if c2.button("Cancelar", key=f"no_{key}"):
        st.session_state[flag] = False
        st.rerun()


def month_nav(ctx: SessionContext, view: str) -> date:
    today = date.today()
    c1, c2, c3 = st.columns([1, 3, 1])
    if c1.button("◀", key=f"prev_{view}"):
        ctx.shift_month(view, -1, today)
    if c3.button("▶", key=f"next_{view}"):
        ctx.shift_month(view, 1, today)
    month = ctx.month(view, today)
    c2.markdown(f"### {month_name(month).capitalize()}")
    return month


# ── Login ────────────────────────────────────────────────────────────────────
gate = get_auth_gate()
ctx = get_context()

if not gate.is_authenticated:
    st.title("🏕️ Hostel - Acceso")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Contraseña", type="password")
        if st.form_submit_button("Ingresar", type="primary"):
            try:
                gate.sign_in(email, password)
                st.rerun()
            except AuthError as e:
                st.error(e.message)
    st.stop()

store = get_store()
ledger = BarLedger(store.bar_transactions, store.bar_inventory)

# Sincronización inicial: espejo ← remoto (una vez por sesión)
if not ctx.synced:
    with st.spinner("Sincronizando datos..."):
        result = store.resync_all()
    ctx.synced = True
    if not result.ok:
        logger.warning("Sincronización inicial incompleta: %s", result.errors)
        st.warning("Sincronización incompleta: " + ", ".join(result.errors))


with st.sidebar:
    st.header("Estado conexión")
    if check_sheets_connection():
        st.success("✓ Google Sheets conectado")
    else:
        st.error("✗ Credenciales faltantes")
        st.caption("Configurar `.streamlit/secrets.toml`")
    st.caption(f"Usuario: {ctx.email or '—'}")
    if st.button("🔄 Sincronizar"):
        with st.spinner("Sincronizando..."):
            result = store.resync_all()
        if result.ok:
            st.success("Datos actualizados")
        else:
            st.warning("Con errores: " + ", ".join(result.errors))
    st.divider()
    if st.button("Cerrar sesión"):
        gate.sign_out()
        st.rerun()

st.title("🏕️ Hostel - Panel")

bookings = store.bookings.get_all()
expenses = store.expenses.get_all()
sendero_records = store.sendero.get_all()
bar_transactions = store.bar_transactions.get_all()
inventory_items = store.bar_inventory.get_all()

tab_cal, tab_fin, tab_exp, tab_stats, tab_sendero, tab_bar = st.tabs(
    ["📅 Calendario", "💰 Finanzas", "🛒 Gastos", "📊 Estadísticas", "🥾 Sendero", "🍺 Bar"]
)


# ============================================================
# TAB 1: CALENDARIO
# ============================================================
def booking_form(room, day: date, existing=None):
    key = existing.id if existing else f"new_{room.id}_{day.isoformat()}"
    with st.form(f"booking_{key}"):
        c1, c2 = st.columns(2)
        check_in = c1.date_input("Entrada", value=existing.check_in if existing else day, key=f"ci_{key}")
        check_out = c2.date_input(
            "Salida", value=existing.check_out if existing else day + timedelta(days=1), key=f"co_{key}"
        )
        guest_name = st.text_input("Huésped", value=existing.guest_name if existing else "", key=f"gn_{key}")
        c3, c4, c5 = st.columns(3)
        guest_count = c3.number_input(
            "Personas", min_value=1, step=1, value=existing.guest_count if existing else 1, key=f"gc_{key}"
        )
        quantity = 1
        if room.is_shared:
            quantity = c4.number_input(
                "Cantidad (parcelas)", min_value=1, step=1,
                value=existing.quantity if existing else 1, key=f"q_{key}",
            )
        guest_doc = c5.text_input("Documento", value=(existing.guest_doc or "") if existing else "", key=f"gd_{key}")
        c6, c7 = st.columns(2)
        total = c6.number_input("Total", min_value=0.0, value=float(existing.total) if existing else 0.0, key=f"t_{key}")
        deposit = c7.number_input("Seña", min_value=0.0, value=float(existing.deposit) if existing else 0.0, key=f"d_{key}")
        st.caption(f"Falta cobrar: {money(total - deposit)}")
        notes = st.text_area("Notas", value=(existing.notes or "") if existing else "", key=f"n_{key}")

        if st.form_submit_button("💾 Guardar", type="primary"):
            try:
                booking = parse_booking_form({
                    "check_in": check_in, "check_out": check_out, "guest_name": guest_name,
                    "guest_count": guest_count, "quantity": quantity, "guest_doc": guest_doc,
                    "total": total, "deposit": deposit, "notes": notes,
                }, room.id, existing)
            except ValidationError as e:
                show_errors(e)
            else:
                if existing:
                    store.bookings.update(booking)
                else:
                    store.bookings.create(booking)
                st.success("Reserva guardada")
                st.rerun()


with tab_cal:
    try:
        today = date.today()
        reference = ctx.calendar_reference or today

        c1, c2, c3, c4 = st.columns([2, 1, 1, 1])
        with c1:
            view = st.radio(
                "Vista", ["month", "week"], horizontal=True,
                index=0 if ctx.calendar_view == "month" else 1,
                format_func=lambda v: "Mes" if v == "month" else "Semana",
            )
            ctx.calendar_view = view
        if c2.button("◀ Anterior"):
            ctx.calendar_reference = shift_period(reference, view, -1)
            st.rerun()
        if c3.button("Hoy"):
            ctx.calendar_reference = today
            st.rerun()
        if c4.button("Siguiente ▶"):
            ctx.calendar_reference = shift_period(reference, view, 1)
            st.rerun()

        st.subheader(month_name(reference).capitalize())

        days = calendar_days(reference, view)
        grid = occupancy_grid(days, ROOMS, bookings)
        display = pd.DataFrame(index=[f"{WEEKDAYS[d.weekday()]} {d.strftime('%d/%m')}" for d in days])
        for room in ROOMS:
            values = grid[room.id].tolist()
            if room.is_shared:
                display[room.name] = [f"{v} ocupados" if v else "" for v in values]
            else:
                display[room.name] = ["●" if v else "" for v in values]
        st.dataframe(display, use_container_width=True)

        st.divider()
        st.subheader("Detalle del día")
        sel_day = st.date_input("Día", value=today, key="cal_day")
        for status in day_overview(sel_day, ROOMS, bookings):
            room = status.room
            if status.occupied:
                badge = f"{status.quantity} ocupados" if room.is_shared else "Ocupada"
            else:
                badge = "Libre"
            with st.expander(f"{room.name} · {badge}"):
                for b in status.bookings:
                    st.markdown(
                        f"**{b.guest_name}** · {b.check_in.strftime('%d/%m')} → {b.check_out.strftime('%d/%m')} · "
                        f"Total {money(b.total)} · Falta {money(b.remaining)}"
                    )
                    booking_form(room, sel_day, existing=b)
                    confirm_delete(f"booking_{b.id}", f"la reserva de {b.guest_name}",
                                   lambda b=b: store.bookings.delete(b.id))
                    st.divider()
                if not status.occupied or room.is_shared:
                    st.markdown("**Nueva reserva**")
                    booking_form(room, sel_day)
    except Exception as e:
        st.error(f"Error en el calendario: {e}")
        st.exception(e)


# ============================================================
# TAB 2: FINANZAS
# ============================================================
with tab_fin:
    try:
        month = month_nav(ctx, "finanzas")
        summary = aggregate(month, bookings, expenses, bar_transactions, sendero_records)

        k1, k2, k3, k4 = st.columns(4)
        k1.metric("Facturación", money(summary.total_income))
        k2.metric("Pendiente de cobro", money(summary.pending_collection))
        k3.metric("Gastos", money(summary.total_expenses))
        k4.metric("Ganancia neta", money(summary.net_profit))
        st.caption(
            f"Reservas: {money(summary.booking_income)} · Sendero: {money(summary.sendero_income)} · "
            f"Bar (informativo): {money(summary.bar_income - summary.bar_expenses)}"
        )

        st.download_button(
            "📄 Reporte PDF",
            monthly_report_pdf(summary, ROOMS),
            file_name=report_filename("reporte-hostel", month),
            mime="application/pdf",
        )

        st.divider()
        st.subheader("Movimientos")
        query = st.text_input("Buscar", key="fin_query")
        feed = filter_movements(movement_feed(summary, ROOMS), query)
        page_num = st.number_input("Página", min_value=1, step=1, value=1, key="fin_page")
        page = paginate(feed, int(page_num), PAGE_SIZE)
        if page.total == 0:
            st.info("No hay movimientos este mes.")
        else:
            st.dataframe(movements_frame(page.items), use_container_width=True, hide_index=True)
            st.caption(f"Página {page.page} de {page.page_count} · {page.total} movimientos")

            df_all = movements_frame(feed)
            col_csv, col_xlsx = st.columns(2)
            with col_csv:
                st.download_button(
                    "⬇️ Descargar CSV",
                    df_all.to_csv(index=False).encode("utf-8"),
                    file_name=f"movimientos_{month.strftime('%Y-%m')}.csv",
                    mime="text/csv",
                )
            with col_xlsx:
                st.download_button(
                    "⬇️ Descargar Excel",
                    df_to_excel_bytes(df_all),
                    file_name=f"movimientos_{month.strftime('%Y-%m')}.xlsx",
                    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                )
    except Exception as e:
        st.error(f"Error en finanzas: {e}")
        st.exception(e)


# ============================================================
# TAB 3: GASTOS
# ============================================================
with tab_exp:
    try:
        month = month_nav(ctx, "gastos")
        today = date.today()

        with st.form("expense_form", clear_on_submit=True):
            c1, c2, c3, c4 = st.columns([3, 1, 1, 1])
            description = c1.text_input("Descripción")
            amount = c2.number_input("Monto", min_value=0.0)
            exp_date = c3.date_input("Fecha", value=ctx.preferences.expense_date_default(today))
            method = c4.selectbox("Medio de pago", ["cash", "transfer"], format_func=PAYMENT_LABELS.get)
            if st.form_submit_button("➕ Agregar gasto", type="primary"):
                try:
                    expense = parse_expense_form({
                        "description": description, "amount": amount,
                        "date": exp_date, "payment_method": method,
                    })
                except ValidationError as e:
                    show_errors(e)
                else:
                    store.expenses.create(expense)
                    ctx.remember_expense_date(expense.date)
                    st.rerun()

        summary = aggregate(month, [], expenses, [], [])
        st.metric("Total del mes", money(summary.total_expenses))
        if not summary.expenses:
            st.info("No hay gastos este mes.")
        for e in sorted(summary.expenses, key=lambda e: e.date, reverse=True):
            c1, c2 = st.columns([4, 1])
            c1.markdown(
                f"{e.date.strftime('%d/%m/%Y')} · **{e.description}** · "
                f"{PAYMENT_LABELS.get(e.payment_method, e.payment_method)} · {money(e.amount)}"
            )
            with c2:
                confirm_delete(f"expense_{e.id}", "este gasto", lambda e=e: store.expenses.delete(e.id))
    except Exception as e:
        st.error(f"Error en gastos: {e}")
        st.exception(e)


# ============================================================
# TAB 4: ESTADÍSTICAS
# ============================================================
with tab_stats:
    try:
        summaries = trailing_summaries(
            date.today(), bookings, expenses, bar_transactions, sendero_records, TREND_MONTHS
        )
        current = summaries[-1]
        growth = trend_growth(summaries)

        k1, k2, k3 = st.columns(3)
        k1.metric("Ingresos del mes", money(current.total_income), f"{growth:.1f}%")
        k2.metric("Gastos del mes", money(current.total_expenses))
        k3.metric("Ganancia del mes", money(current.net_profit))

        k4, k5 = st.columns(2)
        k4.metric(f"Promedio mensual ({TREND_MONTHS} meses)", money(average_income(summaries)))
        k5.metric(f"Ganancia acumulada ({TREND_MONTHS} meses)", money(window_profit(summaries)))

        df_trend = trend_frame(summaries)
        st.subheader(f"Últimos {TREND_MONTHS} meses")
        st.bar_chart(df_trend.set_index("mes")[["ingresos", "gastos"]])
        st.dataframe(df_trend.round(2), use_container_width=True)
    except Exception as e:
        st.error(f"Error en estadísticas: {e}")
        st.exception(e)


# ============================================================
# TAB 5: SENDERO
# ============================================================
with tab_sendero:
    try:
        st.header("Sendero - Registro de actividades")
        with st.form("sendero_form", clear_on_submit=True):
            c1, c2, c3, c4, c5 = st.columns(5)
            employee = c1.text_input("Empleado")
            person_count = c2.number_input("Cantidad de personas", min_value=0, step=1)
            price = c3.number_input("Precio por persona", min_value=0.0)
            hours = c4.number_input("Horas", min_value=0.0, step=0.5)
            s_date = c5.date_input("Fecha", value=date.today())
            if st.form_submit_button("➕ Añadir registro", type="primary"):
                try:
                    record = parse_sendero_form({
                        "employee": employee, "person_count": person_count,
                        "price_per_person": price, "hours": hours, "date": s_date,
                    })
                except ValidationError as e:
                    st.error("Por favor, corrija los siguientes errores:")
                    show_errors(e)
                else:
                    store.sendero.create(record)
                    st.rerun()

        records = sorted(sendero_records, key=lambda r: r.date, reverse=True)
        k1, k2, k3 = st.columns(3)
        k1.metric("Personas", sum(r.person_count for r in records))
        k2.metric("Recaudado", money(sum(r.revenue for r in records)))
        k3.metric("Horas", f"{sum(r.hours for r in records):g}")

        if not records:
            st.info("No hay registros.")
        for r in records:
            c1, c2 = st.columns([4, 1])
            c1.markdown(
                f"{r.date.strftime('%d/%m/%Y')} · **{r.employee}** · {r.person_count} personas × "
                f"{money(r.price_per_person)} = {money(r.revenue)} · {r.hours:g} h"
            )
            with c2:
                confirm_delete(f"sendero_{r.id}", "este registro", lambda r=r: store.sendero.delete(r.id))
    except Exception as e:
        st.error(f"Error en sendero: {e}")
        st.exception(e)


# ============================================================
# TAB 6: BAR
# ============================================================
def bar_edit_form(tx):
    with st.form(f"bar_edit_{tx.id}"):
        c1, c2, c3, c4, c5 = st.columns(5)
        tx_type = c1.selectbox("Tipo", ["income", "expense"],
                               index=0 if tx.type == "income" else 1,
                               format_func=TYPE_LABELS.get, key=f"bt_{tx.id}")
        description = c2.text_input("Descripción", value=tx.description, key=f"bd_{tx.id}")
        quantity = c3.number_input("Cantidad", min_value=1, step=1, value=tx.effective_quantity, key=f"bq_{tx.id}")
        amount = c4.number_input("Monto", min_value=0.0, value=float(tx.amount), key=f"ba_{tx.id}")
        tx_date = c5.date_input("Fecha", value=tx.date, key=f"bf_{tx.id}")
        if st.form_submit_button("💾 Guardar"):
            try:
                new = parse_bar_transaction_form({
                    "type": tx_type, "description": description, "quantity": quantity,
                    "amount": amount, "date": tx_date,
                    "is_from_inventory": tx.is_from_inventory,
                    "inventory_item_id": tx.inventory_item_id,
                }, existing=tx)
                ledger.edit(tx, new)
            except (ValidationError, InsufficientStockError, LedgerWriteError) as e:
                show_errors(e)
            else:
                st.rerun()


with tab_bar:
    sub_acc, sub_sum, sub_inv = st.tabs(["Contabilidad", "Resumen", "Inventario"])

    with sub_acc:
        try:
            c1, c2 = st.columns(2)
            tx_type = c1.selectbox("Tipo", ["income", "expense"], format_func=TYPE_LABELS.get, key="bar_type")
            from_inventory = False
            item = None
            if tx_type == "income" and inventory_items:
                from_inventory = c2.checkbox("Venta de inventario", key="bar_from_inv")
            c3, c4, c5, c6 = st.columns(4)
            if from_inventory:
                items_by_id = {i.id: i for i in sorted(inventory_items, key=lambda i: i.name)}
                item_id = c3.selectbox(
                    "Artículo", list(items_by_id),
                    format_func=lambda i: f"{items_by_id[i].name} (stock {items_by_id[i].current_stock})",
                    key="bar_item",
                )
                item = items_by_id[item_id]
                description = item.name
            else:
                description = c3.text_input("Descripción", key="bar_desc")
            quantity = c4.number_input("Cantidad", min_value=1, step=1, value=1, key="bar_qty")
            default_amount = float(sale_amount(item, quantity)) if item else 0.0
            amount = c5.number_input("Monto", min_value=0.0, value=default_amount,
                                     key=f"bar_amount_{item.id if item else ''}_{quantity}")
            tx_date = c6.date_input("Fecha", value=date.today(), key="bar_date")

            if st.button("➕ Registrar", type="primary", key="bar_add"):
                try:
                    tx = parse_bar_transaction_form({
                        "type": tx_type, "description": description, "quantity": quantity,
                        "amount": amount, "date": tx_date,
                        "is_from_inventory": from_inventory,
                        "inventory_item_id": item.id if item else None,
                    })
                    ledger.create(tx)
                except (ValidationError, InsufficientStockError, LedgerWriteError) as e:
                    show_errors(e)
                else:
                    st.rerun()

            st.divider()
            for tx in sorted(bar_transactions, key=lambda t: t.date, reverse=True):
                sign = "+" if tx.type == "income" else "-"
                label = (
                    f"{tx.date.strftime('%d/%m/%Y')} · {TYPE_LABELS.get(tx.type, tx.type)} · "
                    f"{tx.description} × {tx.effective_quantity} · {sign}{money(tx.amount)}"
                )
                with st.expander(label):
                    bar_edit_form(tx)
                    confirm_delete(f"bar_{tx.id}", "este movimiento", lambda tx=tx: ledger.delete(tx))
        except Exception as e:
            st.error(f"Error en contabilidad del bar: {e}")
            st.exception(e)

    with sub_sum:
        try:
            month = month_nav(ctx, "bar")
            bs = bar_summary(month, bar_transactions)
            k1, k2, k3 = st.columns(3)
            k1.metric("Ingresos", money(bs.income))
            k2.metric("Egresos", money(bs.expense))
            k3.metric("Balance", money(bs.balance))
            st.download_button(
                "📄 Reporte PDF del bar",
                bar_report_pdf(bs),
                file_name=report_filename("reporte-bar", month),
                mime="application/pdf",
            )
        except Exception as e:
            st.error(f"Error en resumen del bar: {e}")
            st.exception(e)

    with sub_inv:
        try:
            with st.form("inventory_form", clear_on_submit=True):
                c1, c2, c3, c4 = st.columns(4)
                name = c1.text_input("Nombre")
                category = c2.text_input("Categoría", placeholder="General")
                stock = c3.number_input("Stock", min_value=0, step=1)
                price = c4.number_input("Precio", min_value=0.0)
                if st.form_submit_button("➕ Agregar artículo", type="primary"):
                    try:
                        new_item = parse_inventory_form(
                            {"name": name, "category": category, "stock": stock, "price": price}
                        )
                    except ValidationError as e:
                        show_errors(e)
                    else:
                        store.bar_inventory.create(new_item)
                        st.rerun()

            for inv in sorted(inventory_items, key=lambda i: i.name.lower()):
                with st.expander(f"{inv.name} · {inv.category} · stock {inv.current_stock}/{inv.initial_stock} · {money(inv.price)}"):
                    with st.form(f"inv_edit_{inv.id}"):
                        c1, c2, c3, c4 = st.columns(4)
                        e_name = c1.text_input("Nombre", value=inv.name, key=f"in_{inv.id}")
                        e_cat = c2.text_input("Categoría", value=inv.category, key=f"ic_{inv.id}")
                        e_stock = c3.number_input("Stock actual", min_value=0, step=1,
                                                  value=inv.current_stock, key=f"is_{inv.id}")
                        e_price = c4.number_input("Precio", min_value=0.0, value=float(inv.price), key=f"ip_{inv.id}")
                        if st.form_submit_button("💾 Guardar"):
                            try:
                                updated = parse_inventory_form(
                                    {"name": e_name, "category": e_cat, "stock": e_stock, "price": e_price},
                                    existing=inv,
                                )
                            except ValidationError as e:
                                show_errors(e)
                            else:
                                store.bar_inventory.update(updated)
                                st.rerun()
                    confirm_delete(f"inv_{inv.id}", f"el artículo {inv.name}",
                                   lambda inv=inv: store.bar_inventory.delete(inv.id))
        except Exception as e:
            st.error(f"Error en inventario: {e}")
            st.exception(e)
