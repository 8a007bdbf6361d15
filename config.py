"""
Configuración central: unidades, hojas y parámetros se cambian aquí.

Credenciales (service account, spreadsheet id, API key de Firebase) NO van
aquí: se leen de st.secrets (.streamlit/secrets.toml).
"""

import os

from core.models import Room

# Unidades del hostel (orden = orden de columnas del calendario)
ROOMS = [
    Room(id="room-1", name="Habitación 1", kind="room", display_tag="blue"),
    Room(id="room-2", name="Habitación 2", kind="room", display_tag="blue"),
    Room(id="room-3", name="Habitación 3", kind="room", display_tag="blue"),
    Room(id="room-4", name="Habitación 4", kind="room", display_tag="blue"),
    Room(id="room-5", name="Habitación 5", kind="room", display_tag="blue"),
    Room(id="room-6", name="Habitación 6", kind="room", display_tag="blue"),
    Room(id="house-1", name="Casa Principal", kind="house", display_tag="purple"),
    Room(id="camping-1", name="Zona Carpas", kind="tent", display_tag="amber"),
    Room(id="motorhome-1", name="Zona Motorhome", kind="motorhome", display_tag="orange"),
]

# Movimientos por página en Finanzas
PAGE_SIZE = 15

# Meses de la tendencia en Estadísticas
TREND_MONTHS = 12

# Espejo local (JSON) de las colecciones remotas
MIRROR_PATH = os.environ.get("HOSTEL_MIRROR_PATH", os.path.join(".data", "mirror.json"))

LOG_LEVEL = os.environ.get("HOSTEL_LOG_LEVEL", "INFO")

CURRENCY = "$"

# Tipo de registro → nombre de la hoja en Google Sheets
SHEET_NAMES = {
    "bookings":         "reservas",
    "expenses":         "gastos",
    "sendero":          "sendero",
    "bar_transactions": "bar_movimientos",
    "bar_inventory":    "bar_inventario",
}

# Columnas de cada hoja (la primera siempre es "id")
SHEET_COLUMNS = {
    "bookings": [
        "id", "unit_id", "check_in", "check_out", "guest_name", "guest_count",
        "quantity", "guest_doc", "deposit", "remaining", "total", "notes",
        "created_at",
    ],
    "expenses": [
        "id", "date", "description", "amount", "payment_method", "created_at",
    ],
    "sendero": [
        "id", "employee", "person_count", "price_per_person", "hours", "date",
        "created_at",
    ],
    "bar_transactions": [
        "id", "type", "quantity", "amount", "description", "date", "created_at",
        "is_from_inventory", "inventory_item_id",
    ],
    "bar_inventory": [
        "id", "name", "category", "initial_stock", "current_stock", "price",
        "created_at",
    ],
}

# Tipos de registro que admiten update (gastos y sendero: solo alta/baja)
UPDATABLE_KINDS = {"bookings", "bar_transactions", "bar_inventory"}

# Endpoint REST del proveedor de identidad (Firebase Identity Toolkit)
IDENTITY_BASE_URL = "https://identitytoolkit.googleapis.com/v1/"
IDENTITY_TIMEOUT = 10.0
