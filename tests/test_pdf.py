from datetime import date

from config import ROOMS
from core.models import BarTransaction
from reports.monthly import aggregate, bar_summary
from reports.pdf import bar_report_pdf, money, monthly_report_pdf, report_filename, summary_lines

from conftest import make_booking, make_expense, make_sendero

MARCH = date(2024, 3, 1)


def test_monthly_report_is_a_pdf():
    summary = aggregate(MARCH, [make_booking(), make_booking(id="b2", deposit=1000)],
                        [make_expense()], [], [])
    data = monthly_report_pdf(summary, ROOMS)
    assert data.startswith(b"%PDF")


def test_empty_month_still_renders():
    assert monthly_report_pdf(aggregate(MARCH, [], [], [], []), ROOMS).startswith(b"%PDF")


def test_bar_report_is_a_pdf():
    tx = [BarTransaction(id="x", type="income", amount=50, description="Vino",
                         date=date(2024, 3, 3), created_at=1)]
    assert bar_report_pdf(bar_summary(MARCH, tx)).startswith(b"%PDF")


def test_helpers():
    assert money(1234.5) == "$1,234.50"
    assert report_filename("reporte", MARCH) == "reporte-03-2024.pdf"


def test_summary_block_adds_up_with_sendero():
    summary = aggregate(MARCH, [make_booking(total=1000, deposit=800)], [make_expense(amount=300)],
                        [], [make_sendero(person_count=4, price=25)])
    lines = dict(summary_lines(summary))

    assert lines["Total Facturado (Reservas)"] == 1000
    assert lines["Ingresos Sendero"] == 100
    assert lines["Total Cobrado (Señas + Pagos)"] + lines["Total Pendiente de Cobro"] == 1000
    assert lines["Ganancia Neta"] == 1000 + 100 - 300
    assert monthly_report_pdf(summary, ROOMS).startswith(b"%PDF")
