"""
Maintenance log for the bin: when it was last watered, fed and turned.

Each action's last timestamp (epoch ms) sits under its own key in the
settings store. A reminder is due once the action is older than its
interval, or was never logged.
"""
import logging
import math
import time
from typing import Dict, Optional

from .config import MAINTENANCE_KEYS, REMINDER_INTERVALS_MS
from .models import MaintenanceLog, MaintenanceStatus
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)

MAINTENANCE_ACTIONS = tuple(MAINTENANCE_KEYS)


def _as_timestamp(raw: Optional[str]) -> Optional[int]:
    # unset, unparsable and zero all mean "never logged"
    try:
        ts = float(raw) if raw else 0.0
    except (TypeError, ValueError):
        return None
    return int(ts) if math.isfinite(ts) and ts > 0 else None


def load_maintenance_log(store: SettingsStore) -> MaintenanceLog:
    return MaintenanceLog(**{
        action: _as_timestamp(store.get(key)) for action, key in MAINTENANCE_KEYS.items()
    })


def log_action(store: SettingsStore, action: str, now_ms: Optional[int] = None) -> int:
    """Record `action` as done at `now_ms` (default: now) and return the stored timestamp."""
    if action not in MAINTENANCE_KEYS:
        raise ValueError(f"unknown maintenance action {action!r}, expected one of {list(MAINTENANCE_ACTIONS)}")
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    store.set(MAINTENANCE_KEYS[action], str(now_ms))
    logger.info("Logged maintenance action %s at %d", action, now_ms)
    return now_ms


def reminders_due(log: MaintenanceLog, now_ms: Optional[int] = None) -> Dict[str, bool]:
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    due = {}
    for action, interval in REMINDER_INTERVALS_MS.items():
        last = getattr(log, action)
        due[action] = last is None or (now_ms - last) > interval
    return due


def maintenance_status(store: SettingsStore, now_ms: Optional[int] = None) -> MaintenanceStatus:
    """Last action times and which reminders are due."""
    log = load_maintenance_log(store)
    return MaintenanceStatus(last=log, due=reminders_due(log, now_ms))
