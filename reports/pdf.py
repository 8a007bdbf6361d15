"""
Reportes PDF mensuales (reportlab).

  - monthly_report_pdf: reservas + gastos del mes y bloque resumen
    (facturado, gastos, ganancia neta, cobrado, pendiente)
  - bar_report_pdf:     movimientos del bar y balance del mes

Devuelven bytes listos para st.download_button.
"""

from datetime import datetime
from io import BytesIO
from typing import Iterable, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm, mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config import CURRENCY
from core.dates import month_name
from core.models import Room
from reports.monthly import BarSummary, MonthlySummary

HEADER_COLOR = colors.HexColor("#2980b9")


def money(amount: float) -> str:
    return f"{CURRENCY}{amount:,.2f}"


def report_filename(prefix: str, month) -> str:
    return f"{prefix}-{month.strftime('%m-%Y')}.pdf"


def _table(rows: List[list], col_widths=None) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
    ]))
    return table


def _header(elements: list, title: str, styles) -> None:
    elements.append(Paragraph(title, styles["Heading1"]))
    elements.append(Paragraph(
        f"Generado el: {datetime.now().strftime('%d/%m/%Y %H:%M')}", styles["Normal"]
    ))
    elements.append(Spacer(1, 0.5 * cm))


def _build(elements: list) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=15 * mm, bottomMargin=15 * mm,
                            leftMargin=15 * mm, rightMargin=15 * mm)
    doc.build(elements)
    return buffer.getvalue()


def summary_lines(summary: MonthlySummary) -> List[tuple]:
    """
    Bloque resumen del reporte. Facturado = Cobrado + Pendiente (solo
    reservas); el sendero va en su propia línea y entra en la ganancia.
    """
    return [
        ("Total Facturado (Reservas)", summary.booking_income),
        ("Ingresos Sendero", summary.sendero_income),
        ("Total Gastos", summary.total_expenses),
        ("Ganancia Neta", summary.net_profit),
        ("Total Cobrado (Señas + Pagos)", summary.collected),
        ("Total Pendiente de Cobro", summary.pending_collection),
    ]


def monthly_report_pdf(summary: MonthlySummary, rooms: Iterable[Room]) -> bytes:
    styles = getSampleStyleSheet()
    room_names = {r.id: r.name for r in rooms}
    elements = []
    _header(elements, f"Reporte de Facturación - {month_name(summary.month).upper()}", styles)

    rows = [["Entrada", "Salida", "Unidad", "Huésped", "Total", "Seña", "Falta", "Estado"]]
    for b in summary.bookings:
        rows.append([
            b.check_in.strftime("%d/%m"),
            b.check_out.strftime("%d/%m"),
            room_names.get(b.unit_id, "Desconocido"),
            b.guest_name,
            money(b.total),
            money(b.deposit),
            money(b.remaining),
            "PAGADO" if b.is_paid else "PENDIENTE",
        ])
    if len(rows) == 1:
        elements.append(Paragraph("No hay reservas este mes.", styles["Normal"]))
    else:
        elements.append(_table(rows))
    elements.append(Spacer(1, 0.5 * cm))

    if summary.expenses:
        elements.append(Paragraph("Gastos", styles["Heading2"]))
        exp_rows = [["Fecha", "Descripción", "Medio de pago", "Monto"]]
        for e in sorted(summary.expenses, key=lambda e: e.date):
            exp_rows.append([
                e.date.strftime("%d/%m"),
                e.description,
                "Efectivo" if e.payment_method == "cash" else "Transferencia",
                money(e.amount),
            ])
        elements.append(_table(exp_rows))
        elements.append(Spacer(1, 0.5 * cm))

    if summary.sendero_records:
        elements.append(Paragraph("Sendero", styles["Heading2"]))
        s_rows = [["Fecha", "Empleado", "Personas", "Precio", "Ingreso"]]
        for s in sorted(summary.sendero_records, key=lambda s: s.date):
            s_rows.append([
                s.date.strftime("%d/%m"),
                s.employee,
                str(s.person_count),
                money(s.price_per_person),
                money(s.revenue),
            ])
        elements.append(_table(s_rows))
        elements.append(Spacer(1, 0.5 * cm))

    elements.append(Paragraph("Resumen del Mes", styles["Heading2"]))
    rows = [[label, money(amount)] for label, amount in summary_lines(summary)]
    block = Table(rows, colWidths=[8 * cm, 4 * cm])
    block.setStyle(TableStyle([
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("FONTNAME", (0, 3), (-1, 3), "Helvetica-Bold"),
    ]))
    elements.append(block)
    return _build(elements)


def bar_report_pdf(summary: BarSummary) -> bytes:
    styles = getSampleStyleSheet()
    elements = []
    _header(elements, f"Reporte del Bar - {month_name(summary.month).upper()}", styles)

    rows = [["Fecha", "Tipo", "Descripción", "Cant.", "Monto"]]
    for t in summary.transactions:
        rows.append([
            t.date.strftime("%d/%m"),
            "Ingreso" if t.type == "income" else "Egreso",
            t.description,
            str(t.effective_quantity),
            money(t.amount),
        ])
    if len(rows) == 1:
        elements.append(Paragraph("No hay movimientos este mes.", styles["Normal"]))
    else:
        elements.append(_table(rows))
    elements.append(Spacer(1, 0.5 * cm))

    elements.append(Paragraph("Resumen del Mes", styles["Heading2"]))
    block = Table([
        ["Ingresos", money(summary.income)],
        ["Egresos", money(summary.expense)],
        ["Balance", money(summary.balance)],
    ], colWidths=[8 * cm, 4 * cm])
    block.setStyle(TableStyle([
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("FONTNAME", (0, 2), (-1, 2), "Helvetica-Bold"),
    ]))
    elements.append(block)
    return _build(elements)
