"""Persistence backends for the notification preference record."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from notify_policy.config import Settings
from notify_policy.models import NotificationPreferenceRecord
from notify_policy.schemas import GroupMuteState, NotificationPreferences
from notify_policy.services.preferences import default_record, merge_with_defaults

logger = logging.getLogger(__name__)


def decode_record(raw: Any, source: str = "store") -> NotificationPreferences:
    """Turn a raw persisted value into a full record.

    Missing, unparseable or invalid data yields the default record; this
    never raises. Invalid group mute entries are dropped on their own so
    the rest of the record survives.
    """
    if raw is None or raw == "":
        return default_record()

    data = raw
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(
                "Discarding unparseable notification preferences",
                extra={"source": source},
            )
            return default_record()

    if not isinstance(data, dict):
        logger.warning(
            "Discarding non-object notification preferences",
            extra={"source": source, "value_type": type(data).__name__},
        )
        return default_record()

    merged = merge_with_defaults(data)
    merged["groupSettings"] = _valid_group_settings(merged.get("groupSettings"), source)
    try:
        return NotificationPreferences.model_validate(merged)
    except ValidationError as exc:
        logger.warning(
            "Discarding invalid notification preferences",
            extra={"source": source, "error_count": exc.error_count()},
        )
        return default_record()


def _valid_group_settings(raw: Any, source: str) -> dict[str, Any]:
    """Keep the group entries that validate; drop the rest one by one."""
    if not isinstance(raw, dict):
        logger.warning(
            "Discarding non-object group settings",
            extra={"source": source, "value_type": type(raw).__name__},
        )
        return {}

    valid = {}
    for group_id, entry in raw.items():
        try:
            GroupMuteState.model_validate(entry)
        except ValidationError as exc:
            logger.warning(
                "Discarding invalid group mute entry",
                extra={
                    "source": source,
                    "group_id": group_id,
                    "error_count": exc.error_count(),
                },
            )
            continue
        valid[group_id] = entry
    return valid


class PreferenceStore:
    """Interface for loading and saving one user's preference record."""

    name = "store"

    def load(self) -> NotificationPreferences:
        """Return the stored record merged with defaults."""
        return decode_record(self._read_raw(), source=self.name)

    def save(self, prefs: NotificationPreferences) -> None:
        """Persist the full record, replacing any previous value."""
        self._write_raw(prefs.to_record())

    def _read_raw(self) -> Any:
        raise NotImplementedError

    def _write_raw(self, record: dict) -> None:
        raise NotImplementedError


class InMemoryPreferenceStore(PreferenceStore):
    """Keeps the serialized record in process memory.

    Nothing survives a restart; use it for tests and single-user local runs.
    """

    name = "memory"

    def __init__(self, raw: Any = None) -> None:
        self.raw = raw

    def _read_raw(self) -> Any:
        return self.raw

    def _write_raw(self, record: dict) -> None:
        self.raw = json.dumps(record)


class JsonFilePreferenceStore(PreferenceStore):
    """Local device store: one JSON document per user."""

    name = "file"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @classmethod
    def for_user(cls, directory: str | Path, user_id: int | str):
        return cls(Path(directory) / f"{user_id}.json")

    def _read_raw(self) -> Any:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning(
                "Could not read notification preferences file",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return None

    def _write_raw(self, record: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(record, handle, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            Path(tmp_path).unlink(missing_ok=True)
            raise


class SqlPreferenceStore(PreferenceStore):
    """Stores the record as a JSON column on a per-user row."""

    name = "database"

    def __init__(self, db: Session, user_id: int) -> None:
        self._db = db
        self._user_id = user_id

    def _row(self) -> NotificationPreferenceRecord | None:
        return self._db.execute(
            select(NotificationPreferenceRecord).where(
                NotificationPreferenceRecord.user_id == self._user_id
            )
        ).scalar_one_or_none()

    def _read_raw(self) -> Any:
        row = self._row()
        return row.preferences if row else None

    def _write_raw(self, record: dict) -> None:
        row = self._row()
        if row is None:
            row = NotificationPreferenceRecord(user_id=self._user_id)
            self._db.add(row)
        row.preferences = record
        self._db.commit()


# One store per user id for the life of the process, never evicted. The
# memory backend is meant for tests and single-user local runs.
_memory_stores: dict[str, InMemoryPreferenceStore] = {}


def get_preference_store(
    settings: Settings,
    user_id: int | str,
    db: Session | None = None,
) -> PreferenceStore:
    """Return the preference store configured for this deployment."""
    backend = settings.preference_backend
    if backend == "memory":
        return _memory_stores.setdefault(str(user_id), InMemoryPreferenceStore())
    if backend == "file":
        return JsonFilePreferenceStore.for_user(settings.preference_dir, user_id)
    if db is None:
        raise ValueError("Database preference store requires a session")
    return SqlPreferenceStore(db, int(user_id))
