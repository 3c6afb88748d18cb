"""Key-value stores backing the registry.

The registry needs two independent namespaces, ``"app"`` for installation
records and ``"state"`` for per-application state blobs. Anything with the
:class:`KeyValueStore` methods will do; two adapters are provided:

- :class:`MemoryStorage` -- a plain dict, for tests and embedding.
- :class:`JsonFileStorage` -- one JSON document per namespace under a data
  directory (``~/.apprepo/`` by default), used by the CLI and web API.

Values must be JSON-serializable. Both adapters hand out copies, so a
caller mutating a loaded value never changes what is stored.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional, Protocol

from apprepo.exceptions import StorageError

APP_NAMESPACE = "app"
STATE_NAMESPACE = "state"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def put(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryStorage:
    """In-memory store; keys enumerate in insertion order."""

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStorage:
    """File-based storage for one namespace.

    Storage path: ``<base_dir>/<namespace>.json``, a single JSON object
    mapping keys to values. The file is read on every access and rewritten
    on every mutation.
    """

    def __init__(self, base_dir: str | Path, namespace: str) -> None:
        self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self.namespace = namespace
        self._path = self._base / f"{namespace}.json"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise StorageError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not contain a JSON object")
        return data

    def _write_json(self, data: dict[str, Any]) -> None:
        tmp = self._path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    # ------------------------------------------------------------------
    # KeyValueStore
    # ------------------------------------------------------------------

    def get(self, key: str) -> Any:
        return self._read_json().get(key)

    def put(self, key: str, value: Any) -> None:
        data = self._read_json()
        data[key] = value
        self._write_json(data)

    def remove(self, key: str) -> None:
        data = self._read_json()
        if key in data:
            del data[key]
            self._write_json(data)

    def keys(self) -> list[str]:
        return list(self._read_json())


def default_data_dir() -> Path:
    """``$APPREPO_DATA_DIR`` if set, else ``~/.apprepo``."""
    configured = os.environ.get("APPREPO_DATA_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".apprepo"


def open_storage(data_dir: Optional[str | Path], namespace: str) -> JsonFileStorage:
    """Open the file-backed store for *namespace* under *data_dir*."""
    base = Path(data_dir).expanduser() if data_dir else default_data_dir()
    return JsonFileStorage(base, namespace)
