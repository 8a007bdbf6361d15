"""
Google Sheets como almacenamiento remoto (fuente de verdad).

Una hoja por tipo de registro (ver config.SHEET_NAMES), primera fila =
encabezados de config.SHEET_COLUMNS, una fila por documento identificado
por la columna "id". Sin control de versiones: gana el último que escribe.

Autenticación via Service Account (credenciales en Streamlit secrets):
  1. Crear un Service Account en Google Cloud
  2. Compartir el Google Sheet con el email del service account
  3. Poner las credenciales en .streamlit/secrets.toml
"""

import logging
from typing import List

import gspread
import streamlit as st

from config import SHEET_COLUMNS, SHEET_NAMES

logger = logging.getLogger(__name__)


@st.cache_resource
def get_gspread_client():
    """
    Cliente gspread autenticado via Service Account.
    Las credenciales vienen de st.secrets (Streamlit Cloud) o de
    .streamlit/secrets.toml en local.
    """
    creds_dict = dict(st.secrets["gcp_service_account"])
    return gspread.service_account_from_dict(creds_dict)


def check_sheets_connection() -> bool:
    try:
        _ = st.secrets["gcp_service_account"]
        _ = st.secrets["google_sheets"]["spreadsheet_id"]
        return True
    except Exception:
        return False


def _cell_value(val):
    """Valor para USER_ENTERED: None → "", bool → TRUE/FALSE."""
    if val is None:
        return ""
    if isinstance(val, bool):
        return "TRUE" if val else "FALSE"
    return val


class SheetsRemote:
    """Implementa get_all / upsert / delete sobre el spreadsheet configurado."""

    def __init__(self, spreadsheet_id: str = None, client=None):
        self.spreadsheet_id = spreadsheet_id or st.secrets["google_sheets"]["spreadsheet_id"]
        self._client = client
        self._worksheets = {}

    @property
    def client(self):
        if self._client is None:
            self._client = get_gspread_client()
        return self._client

    def get_sheet(self, kind: str):
        """Abre la hoja del tipo; la crea con encabezados si no existe."""
        if kind in self._worksheets:
            return self._worksheets[kind]
        sh = self.client.open_by_key(self.spreadsheet_id)
        name = SHEET_NAMES[kind]
        try:
            ws = sh.worksheet(name)
        except gspread.WorksheetNotFound:
            logger.info("Creando hoja %s", name)
            ws = sh.add_worksheet(title=name, rows=1000, cols=len(SHEET_COLUMNS[kind]))
            ws.append_row(SHEET_COLUMNS[kind])
        self._worksheets[kind] = ws
        return ws

    def get_all(self, kind: str) -> List[dict]:
        ws = self.get_sheet(kind)
        data = ws.get_all_records(expected_headers=SHEET_COLUMNS[kind])
        # gspread devuelve "" para celdas vacías
        return [row for row in data if str(row.get("id", "")).strip()]

    def _find_row(self, ws, record_id: str):
        ids = ws.col_values(1)
        for idx, val in enumerate(ids[1:], start=2):
            if str(val).strip() == record_id:
                return idx
        return None

    def _to_row(self, kind: str, doc: dict) -> list:
        return [_cell_value(doc.get(col)) for col in SHEET_COLUMNS[kind]]

    def upsert(self, kind: str, doc: dict) -> None:
        ws = self.get_sheet(kind)
        row = self._to_row(kind, doc)
        row_num = self._find_row(ws, str(doc["id"]))
        if row_num is None:
            ws.append_row(row, value_input_option="USER_ENTERED")
        else:
            last_col = gspread.utils.rowcol_to_a1(row_num, len(row))
            ws.update(range_name=f"A{row_num}:{last_col}", values=[row],
                      value_input_option="USER_ENTERED")

    def delete(self, kind: str, record_id: str) -> None:
        ws = self.get_sheet(kind)
        row_num = self._find_row(ws, record_id)
        if row_num is None:
            logger.warning("Borrado remoto: %s %s no encontrado", kind, record_id)
            return
        ws.delete_rows(row_num)
