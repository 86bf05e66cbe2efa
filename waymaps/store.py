from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Dict, List, Optional

from waymaps.config import DEFAULT_STORE_PATH
from waymaps.errors import StoreError
from waymaps.model import PersistentMap

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class MapStore:
    """JSON-backed collection of maps with at most one selected map."""

    DEFAULT_STORE_PATH = DEFAULT_STORE_PATH

    def __init__(self, path: Path | str = DEFAULT_STORE_PATH) -> None:
        self.path = Path(path)
        self._maps: Dict[str, PersistentMap] = {}
        self._selected: Optional[str] = None

    @classmethod
    def load(cls, path: Path | str = DEFAULT_STORE_PATH) -> "MapStore":
        store = cls(path)
        if not store.path.exists():
            logger.info("No map store at %s, starting empty", store.path)
            return store
        try:
            data = json.loads(store.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(f"Failed to read map store: {store.path}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Malformed map store: {store.path}")
        try:
            for entry in data.get("maps", []):
                pmap = PersistentMap.from_dict(entry)
                store._maps[pmap.name] = pmap
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Malformed map store: {store.path}") from exc
        selected = data.get("selected")
        store._selected = selected if selected in store._maps else None
        logger.info("Loaded %d map(s) from %s", len(store._maps), store.path)
        return store

    def store(self) -> None:
        payload = {
            "version": STORE_VERSION,
            "selected": self._selected,
            "maps": [pmap.to_dict() for pmap in self._maps.values()],
        }
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".mapstore-", suffix=".json", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StoreError(f"Failed to write map store: {self.path}") from exc
        logger.debug("Stored %d map(s) to %s", len(self._maps), self.path)

    @property
    def map_names(self) -> List[str]:
        return list(self._maps)

    def add_map(self, name: str) -> PersistentMap:
        pmap = self._maps.get(name)
        if pmap is None:
            pmap = PersistentMap(name)
            self._maps[name] = pmap
        return pmap

    def get_map(self, name: Optional[str]) -> Optional[PersistentMap]:
        if name is None:
            return None
        return self._maps.get(name)

    def delete_map(self, name: str) -> bool:
        if name not in self._maps:
            return False
        del self._maps[name]
        if self._selected == name:
            self._selected = None
        return True

    def select_map(self, name: Optional[str]) -> None:
        if name is not None and name not in self._maps:
            raise KeyError(f"Unknown map: {name}")
        self._selected = name

    @property
    def selected_map_name(self) -> Optional[str]:
        return self._selected

    @property
    def selected_map(self) -> Optional[PersistentMap]:
        return self.get_map(self._selected)
