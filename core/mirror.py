"""
Espejo local de las colecciones remotas (un único archivo JSON).

Lectura tolerante: archivo inexistente o corrupto → colección vacía.
La escritura reemplaza el archivo entero (write + rename).
"""

import json
import logging
import os
from typing import Dict, List

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class LocalMirror:
    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, List[dict]]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Error leyendo el espejo local %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Espejo local con formato inesperado, se ignora: %s", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, List[dict]]) -> None:
        folder = os.path.dirname(self.path)
        tmp_path = f"{self.path}.tmp"
        try:
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=1)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"No se pudo escribir el espejo local: {e}") from e

    def load(self, kind: str) -> List[dict]:
        docs = self._read().get(kind, [])
        if not isinstance(docs, list):
            logger.warning("Colección %s corrupta en el espejo local", kind)
            return []
        return docs

    def save(self, kind: str, docs: List[dict]) -> None:
        data = self._read()
        data[kind] = docs
        self._write(data)

    def replace_all(self, snapshot: Dict[str, List[dict]]) -> None:
        """espejo = snapshot(remoto): reemplaza las colecciones recibidas."""
        data = self._read()
        data.update(snapshot)
        self._write(data)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
