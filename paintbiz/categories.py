# paintbiz/categories.py
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger("paintbiz.categories")

DEFAULT_CATEGORIES = (
    "Interior painting",
    "Exterior painting",
    "Repaint",
    "Sculpture/Idol painting",
)

STORAGE_KEY = "paintbiz_categories"


# ──────────────────────────────────────────────────────────────────────────────
# Key-value storage (local storage stand-ins)
# ──────────────────────────────────────────────────────────────────────────────
class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """All keys live in one JSON object file, like a browser's local storage."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        return raw if isinstance(raw, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)


# ──────────────────────────────────────────────────────────────────────────────
# Category list: fixed defaults first, then user-added customs
# ──────────────────────────────────────────────────────────────────────────────
class CategoryStore:
    def __init__(
        self,
        storage: KeyValueStore,
        key: str = STORAGE_KEY,
        defaults: Iterable[str] = DEFAULT_CATEGORIES,
    ):
        self.storage = storage
        self.key = key
        self.defaults = tuple(defaults)
        self._categories: Optional[List[str]] = None

    @property
    def categories(self) -> List[str]:
        if self._categories is None:
            return self.load()
        return list(self._categories)

    def load(self) -> List[str]:
        """Defaults in canonical order followed by the stored customs. Never raises."""
        customs: List[str] = []
        raw = self.storage.get(self.key)
        if raw:
            try:
                saved = json.loads(raw)
            except ValueError as e:
                logger.warning(f"Ignoring malformed {self.key!r}: {e}")
                saved = []
            if not isinstance(saved, list):
                logger.warning(f"Ignoring {self.key!r}: expected a list, got {type(saved).__name__}")
                saved = []
            for name in saved:
                if isinstance(name, str) and name not in self.defaults and name not in customs:
                    customs.append(name)
        self._categories = [*self.defaults, *customs]
        return list(self._categories)

    def add_custom(self, name: str) -> List[str]:
        current = self.categories
        if not name or not name.strip() or name in current:
            return current
        current.append(name)
        self._categories = current
        self._save()
        return list(current)

    def _save(self) -> None:
        # defaults are never persisted so they can't collide on reload
        custom_only = [c for c in self._categories if c not in self.defaults]
        self.storage.set(self.key, json.dumps(custom_only))
