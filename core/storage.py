"""
Contrato CRUD por tipo de registro: espejo local primero, remoto después.

- El espejo se escribe de forma síncrona (read-your-writes).
- El remoto (Google Sheets) se actualiza después; si falla se loguea y
  listo: no se reintenta ni se avisa al usuario. Espejo y remoto pueden
  divergir hasta el próximo resync_all().
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from config import UPDATABLE_KINDS
from core.mirror import LocalMirror
from core.models import RecordKind
from parsers.records import from_doc, to_document

logger = logging.getLogger(__name__)


class UnsupportedOperation(RuntimeError):
    pass


class Repository:
    def __init__(self, kind, mirror: LocalMirror, remote=None):
        self.kind = RecordKind(kind).value
        self.mirror = mirror
        self.remote = remote

    def _docs(self) -> List[dict]:
        return self.mirror.load(self.kind)

    def get_all(self) -> list:
        records = []
        for doc in self._docs():
            try:
                records.append(from_doc(self.kind, doc))
            except Exception:
                logger.exception("Documento %s inválido, se ignora: %r", self.kind, doc)
        return records

    def get(self, record_id: str):
        for record in self.get_all():
            if record.id == record_id:
                return record
        return None

    def _remote_call(self, method: str, *args) -> None:
        if self.remote is None:
            return
        try:
            getattr(self.remote, method)(self.kind, *args)
        except Exception:
            logger.exception("Error remoto (%s %s)", method, self.kind)

    def create(self, record) -> None:
        doc = to_document(record)
        docs = [d for d in self._docs() if d.get("id") != record.id]
        docs.append(doc)
        self.mirror.save(self.kind, docs)
        self._remote_call("upsert", doc)

    def update(self, record) -> None:
        if self.kind not in UPDATABLE_KINDS:
            raise UnsupportedOperation(f"{self.kind}: solo alta y baja")
        doc = to_document(record)
        docs = [doc if d.get("id") == record.id else d for d in self._docs()]
        self.mirror.save(self.kind, docs)
        self._remote_call("upsert", doc)

    def delete(self, record_id: str) -> None:
        docs = [d for d in self._docs() if d.get("id") != record_id]
        self.mirror.save(self.kind, docs)
        self._remote_call("delete", record_id)


@dataclass
class SyncResult:
    synced: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class Store:
    """Las cinco colecciones sobre un mismo espejo/remoto."""

    def __init__(self, mirror: LocalMirror, remote=None):
        self.mirror = mirror
        self.remote = remote
        self.bookings = Repository(RecordKind.BOOKINGS, mirror, remote)
        self.expenses = Repository(RecordKind.EXPENSES, mirror, remote)
        self.sendero = Repository(RecordKind.SENDERO, mirror, remote)
        self.bar_transactions = Repository(RecordKind.BAR_TRANSACTIONS, mirror, remote)
        self.bar_inventory = Repository(RecordKind.BAR_INVENTORY, mirror, remote)

    def repositories(self) -> List[Repository]:
        return [self.bookings, self.expenses, self.sendero, self.bar_transactions, self.bar_inventory]

    def resync_all(self) -> SyncResult:
        """
        espejo ← snapshot(remoto). Los tipos que fallan conservan el
        contenido anterior del espejo y se informan en SyncResult.errors.
        """
        result = SyncResult()
        if self.remote is None:
            result.errors["*"] = "Almacenamiento remoto no configurado"
            return result

        snapshot = {}
        for repo in self.repositories():
            try:
                snapshot[repo.kind] = self.remote.get_all(repo.kind)
                result.synced.append(repo.kind)
            except Exception as e:
                logger.exception("Error sincronizando %s", repo.kind)
                result.errors[repo.kind] = str(e)

        if snapshot:
            self.mirror.replace_all(snapshot)
        logger.info("Sincronización completa: %d ok, %d errores",
                    len(result.synced), len(result.errors))
        return result


def build_store(mirror_path: str, remote=None) -> Store:
    return Store(LocalMirror(mirror_path), remote)
