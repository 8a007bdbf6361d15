"""
Conciliación stock del bar ↔ movimientos.

Una venta de inventario (type="income", is_from_inventory) descuenta
`quantity` unidades del artículo. Editarla ajusta la diferencia, borrarla
devuelve el stock. Las funciones on_* son puras: validan y devuelven el
StockChange a aplicar (o None). BarLedger hace las dos escrituras
(movimiento + stock) como una sola operación con compensación.
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from core.models import BarInventoryItem, BarTransaction

logger = logging.getLogger(__name__)


class InsufficientStockError(ValueError):
    def __init__(self, item_name: str, available: int):
        self.item_name = item_name
        self.available = available
        super().__init__(
            f"Stock insuficiente para {item_name}. Máximo disponible: {available}"
        )


class LedgerWriteError(RuntimeError):
    """Falló la segunda escritura; la primera ya fue compensada."""


@dataclass
class StockChange:
    item_id: str
    delta: int


def _find(items: Iterable[BarInventoryItem], item_id: Optional[str]) -> Optional[BarInventoryItem]:
    for item in items:
        if item.id == item_id:
            return item
    return None


def on_create(tx: BarTransaction, items: Iterable[BarInventoryItem]) -> Optional[StockChange]:
    if not (tx.type == "income" and tx.is_from_inventory):
        return None
    item = _find(items, tx.inventory_item_id)
    qty = tx.effective_quantity
    if item is None:
        raise InsufficientStockError(tx.description or "", 0)
    if qty > item.current_stock:
        raise InsufficientStockError(item.name, item.current_stock)
    return StockChange(item.id, -qty)


def on_edit(old: BarTransaction, new: BarTransaction,
            items: Iterable[BarInventoryItem]) -> Optional[StockChange]:
    """
    Solo si el movimiento original estaba ligado al inventario:
      - sigue siendo income → delta = old_qty - new_qty (valida contra stock + old_qty)
      - deja de ser income  → devuelve old_qty completo
    """
    if not (old.is_from_inventory and old.inventory_item_id):
        return None

    old_qty = old.effective_quantity
    new_qty = new.effective_quantity

    if new.type == "income":
        item = _find(items, old.inventory_item_id)
        available = (item.current_stock if item else 0) + old_qty
        if new_qty > available:
            raise InsufficientStockError(item.name if item else old.description, available)
        delta = old_qty - new_qty
    else:
        delta = old_qty

    if delta == 0:
        return None
    return StockChange(old.inventory_item_id, delta)


def on_delete(tx: BarTransaction) -> Optional[StockChange]:
    if not (tx.is_from_inventory and tx.inventory_item_id):
        return None
    return StockChange(tx.inventory_item_id, tx.effective_quantity)


def apply_change(item: BarInventoryItem, change: StockChange) -> BarInventoryItem:
    """Stock nunca baja de 0."""
    return replace(item, current_stock=max(0, item.current_stock + change.delta))


def normalize_edit(old: BarTransaction, new: BarTransaction) -> BarTransaction:
    """Conserva created_at y el vínculo al inventario solo si sigue siendo income."""
    if new.type == "income":
        return replace(
            new,
            created_at=old.created_at,
            is_from_inventory=old.is_from_inventory,
            inventory_item_id=old.inventory_item_id,
        )
    return replace(new, created_at=old.created_at, is_from_inventory=False, inventory_item_id=None)


def sale_amount(item: BarInventoryItem, quantity: int) -> float:
    """Importe sugerido al elegir un artículo del inventario."""
    return item.price * (quantity or 1)


class BarLedger:
    """
    Alta/edición/baja de movimientos del bar sobre dos repositorios
    (movimientos e inventario). Primero se escribe el movimiento, después el
    stock; si el stock falla se deshace el movimiento y se lanza
    LedgerWriteError.
    """

    def __init__(self, transactions, inventory):
        self.transactions = transactions
        self.inventory = inventory

    def _apply(self, change: Optional[StockChange], items) -> Optional[BarInventoryItem]:
        if change is None:
            return None
        item = _find(items, change.item_id)
        if item is None:
            logger.warning("Artículo %s no encontrado, stock sin ajustar", change.item_id)
            return None
        updated = apply_change(item, change)
        self.inventory.update(updated)
        return updated

    def _compensate(self, action, description: str):
        try:
            action()
        except Exception:
            logger.exception("Compensación fallida: %s", description)

    def create(self, tx: BarTransaction) -> BarTransaction:
        items = self.inventory.get_all()
        change = on_create(tx, items)
        if not (tx.type == "income" and tx.is_from_inventory):
            tx = replace(tx, is_from_inventory=False, inventory_item_id=None)

        self.transactions.create(tx)
        try:
            self._apply(change, items)
        except Exception as e:
            logger.exception("Error descontando stock del movimiento %s", tx.id)
            self._compensate(lambda: self.transactions.delete(tx.id), f"borrar {tx.id}")
            raise LedgerWriteError(f"No se pudo actualizar el stock: {e}") from e
        return tx

    def edit(self, old: BarTransaction, new: BarTransaction) -> BarTransaction:
        items = self.inventory.get_all()
        change = on_edit(old, new, items)
        new = normalize_edit(old, new)

        self.transactions.update(new)
        try:
            self._apply(change, items)
        except Exception as e:
            logger.exception("Error ajustando stock del movimiento %s", new.id)
            self._compensate(lambda: self.transactions.update(old), f"restaurar {old.id}")
            raise LedgerWriteError(f"No se pudo actualizar el stock: {e}") from e
        return new

    def delete(self, tx: BarTransaction) -> None:
        items = self.inventory.get_all()
        change = on_delete(tx)

        self.transactions.delete(tx.id)
        try:
            self._apply(change, items)
        except Exception as e:
            logger.exception("Error devolviendo stock del movimiento %s", tx.id)
            self._compensate(lambda: self.transactions.create(tx), f"recrear {tx.id}")
            raise LedgerWriteError(f"No se pudo actualizar el stock: {e}") from e
