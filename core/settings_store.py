"""
Persisted user preferences: trend classification settings and sensor thresholds.

Settings live in a string-keyed store as JSON blobs (the same layout the
dashboard keeps in browser storage). Every load is a fresh read; anything
missing, unparsable or of the wrong shape falls back to the defaults from
`core.config` instead of raising.
"""
import json
import logging
import math
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError

from .config import DEFAULT_THRESHOLDS, THRESHOLDS_KEY, TREND_SETTINGS_KEY
from .models import FieldThreshold, Thresholds, TrendSettings

logger = logging.getLogger(__name__)

# One lock per settings file, shared by every store instance in the process
_FILE_LOCKS: Dict[str, threading.Lock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = os.path.abspath(path)
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(key, threading.Lock())


class SettingsStore(ABC):
    """Minimal get/set string store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...


class InMemorySettingsStore(SettingsStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileSettingsStore(SettingsStore):
    """All keys kept in a single JSON object on disk; writes replace the file atomically."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = _lock_for(self._path)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=self._path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                json.dump(data, tmp, indent=2)
            try:
                os.replace(tmp.name, self._path)
            except OSError:
                os.unlink(tmp.name)
                raise

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Settings file %s unreadable, ignoring it: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}


# ----------------------------------------------------------------------------
# Trend settings
# ----------------------------------------------------------------------------

def load_trend_settings(store: SettingsStore) -> TrendSettings:
    """Stored trend thresholds; individual missing fields take their defaults."""
    raw = store.get(TREND_SETTINGS_KEY)
    if not raw:
        return TrendSettings()

    try:
        saved = json.loads(raw)
        if not isinstance(saved, dict):
            raise ValueError(f"expected an object, got {type(saved).__name__}")
        return TrendSettings.model_validate({k: v for k, v in saved.items() if v is not None})
    except (ValueError, ValidationError) as exc:
        # json.JSONDecodeError is a ValueError
        logger.warning("Stored trend settings are invalid, using defaults: %s", exc)
        return TrendSettings()


def save_trend_settings(store: SettingsStore, settings: TrendSettings) -> None:
    store.set(TREND_SETTINGS_KEY, settings.model_dump_json(by_alias=True))


# ----------------------------------------------------------------------------
# Sensor thresholds
# ----------------------------------------------------------------------------

def _as_number(v) -> Optional[float]:
    if v is None or v == "":
        return None
    try:
        n = float(v)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def migrate_thresholds(saved: Union[str, dict, None]) -> Thresholds:
    """
    Normalize a saved thresholds blob field by field.

    Unparsable bounds and zero bounds are replaced by the default for that bound,
    so older or hand-edited blobs always load into a complete Thresholds.
    """
    data = json.loads(saved) if isinstance(saved, str) else (saved or {})
    if not isinstance(data, dict):
        data = {}

    fields = {}
    for name, defaults in DEFAULT_THRESHOLDS.items():
        entry = data.get(name)
        entry = entry if isinstance(entry, dict) else {}
        fields[name] = FieldThreshold(
            min=_as_number(entry.get("min")) or defaults["min"],
            max=_as_number(entry.get("max")) or defaults["max"],
        )
    return Thresholds(**fields)


def load_thresholds(store: SettingsStore) -> Thresholds:
    raw = store.get(THRESHOLDS_KEY)
    if not raw:
        return Thresholds()
    try:
        return migrate_thresholds(raw)
    except ValueError as exc:
        logger.warning("Stored thresholds are invalid, using defaults: %s", exc)
        return Thresholds()


def validate_thresholds(thresholds: Thresholds) -> Optional[str]:
    """Error message for the first band whose max is below its min, else None."""
    for name in DEFAULT_THRESHOLDS:
        band: FieldThreshold = getattr(thresholds, name)
        if band.maximum < band.minimum:
            return f"For {name}, max must be greater than min."
    return None


def save_thresholds(store: SettingsStore, thresholds: Thresholds) -> None:
    error = validate_thresholds(thresholds)
    if error:
        raise ValueError(error)
    store.set(THRESHOLDS_KEY, thresholds.model_dump_json(by_alias=True))
