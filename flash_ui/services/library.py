# saved components and named collections
# each collection is stored as one serialized JSON list and rewritten whole on every change
# (read-modify-write); with no path the lists only live in memory

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from flash_ui.schemas.library import Collection, SavedComponent

logger = logging.getLogger(__name__)

COMPONENTS_KEY = "flash-ui-library"
COLLECTIONS_KEY = "flash-ui-collections"

M = TypeVar("M", bound=BaseModel)


class LibraryStore:
    def __init__(self, path: Optional[str | Path] = None) -> None:
        """
        self._path: directory holding one <key>.json file per collection, or None for memory only.
        self._memory: serialized lists keyed like the files, used when there is no path.
        """
        self._path = Path(path) if path else None
        self._memory: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        if self._path is not None:
            self._path.mkdir(parents=True, exist_ok=True)

    # raw key-value access
    def _read(self, key: str) -> Optional[str]:
        if self._path is None:
            return self._memory.get(key)
        f = self._path / f"{key}.json"
        if not f.exists():
            return None
        return f.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        if self._path is None:
            self._memory[key] = value
            return
        f = self._path / f"{key}.json"
        tmp = f.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(f)

    def _load(self, key: str, model: Type[M]) -> List[M]:
        raw = self._read(key)
        if not raw:
            return []
        try:
            return [model.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, ValidationError):
            # unreadable storage reads as empty, like a fresh library
            logger.warning("could not read %s, treating it as empty", key)
            return []

    def _dump(self, key: str, items: List[M]) -> None:
        self._write(key, json.dumps([item.model_dump() for item in items]))

    # components
    async def list_components(self) -> List[SavedComponent]:
        async with self._lock:
            return self._load(COMPONENTS_KEY, SavedComponent)

    async def save_component(self, component: SavedComponent) -> SavedComponent:
        async with self._lock:
            items = self._load(COMPONENTS_KEY, SavedComponent)
            for i, existing in enumerate(items):
                if existing.id == component.id:
                    items[i] = component
                    break
            else:
                items.append(component)
            self._dump(COMPONENTS_KEY, items)
            return component

    async def remove_component(self, component_id: str) -> bool:
        async with self._lock:
            items = self._load(COMPONENTS_KEY, SavedComponent)
            kept = [c for c in items if c.id != component_id]
            self._dump(COMPONENTS_KEY, kept)
            return len(kept) != len(items)

    # collections
    async def list_collections(self) -> List[Collection]:
        async with self._lock:
            return self._load(COLLECTIONS_KEY, Collection)

    async def save_collection(self, collection: Collection) -> Collection:
        async with self._lock:
            items = self._load(COLLECTIONS_KEY, Collection)
            for i, existing in enumerate(items):
                if existing.id == collection.id:
                    items[i] = collection
                    break
            else:
                items.append(collection)
            self._dump(COLLECTIONS_KEY, items)
            return collection

    async def delete_collection(self, collection_id: str) -> bool:
        async with self._lock:
            items = self._load(COLLECTIONS_KEY, Collection)
            kept = [c for c in items if c.id != collection_id]
            self._dump(COLLECTIONS_KEY, kept)

            # drop the collection from every component that referenced it
            components = self._load(COMPONENTS_KEY, SavedComponent)
            for comp in components:
                comp.collection_ids = [cid for cid in comp.collection_ids if cid != collection_id]
            self._dump(COMPONENTS_KEY, components)
            return len(kept) != len(items)
