"""Preparation record store.

One JSON document holds every preparation (keyed by id) and every user
profile (keyed by user id):

    {"preparations": {id: record}, "user_profiles": {user_id: profile}}

Writes go to disk atomically (tmp file + replace) under a process lock.
``path=None`` keeps everything in memory. Every preparation read/write takes
the caller's user id; another user's record answers exactly like a missing one.
"""

from __future__ import annotations

import copy
import datetime
import json
import logging
import threading
import uuid
from pathlib import Path

from interviewace.errors import Forbidden, NotFound, ValidationError
from interviewace.report_model import DEFAULT_TITLE
from interviewace.step_schemas import STEP_NUMBERS, is_populated, merge_step, validate_step

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "job_url")


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _empty() -> dict:
    return {"preparations": {}, "user_profiles": {}}


class PreparationStore:

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._data = self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> dict:
        if self.path and self.path.exists():
            try:
                with open(self.path) as f:
                    data = json.load(f)
                data.setdefault("preparations", {})
                data.setdefault("user_profiles", {})
                return data
            except (json.JSONDecodeError, OSError):
                logger.warning("Corrupt %s, starting fresh", self.path.name)
        return _empty()

    def _save(self):
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w") as f:
            json.dump(self._data, f, indent=2)
        tmp.replace(self.path)

    def _commit(self, table: str, key: str, value: dict | None):
        """Store ``value`` under ``key`` (``None`` deletes) and persist; a failed write restores the old entry."""
        entries = self._data[table]
        previous = entries.get(key)
        if value is None:
            entries.pop(key, None)
        else:
            entries[key] = value
        try:
            self._save()
        except Exception:
            if previous is None:
                entries.pop(key, None)
            else:
                entries[key] = previous
            raise

    # ------------------------------------------------------------------
    # Preparations
    # ------------------------------------------------------------------

    def _owned(self, prep_id: str, user_id: str) -> dict:
        record = self._data["preparations"].get(prep_id)
        if record is None:
            raise NotFound(f"Preparation {prep_id} does not exist")
        if record.get("user_id") != user_id:
            logger.warning("User %s tried to access preparation %s owned by someone else", user_id, prep_id)
            raise Forbidden(f"Preparation {prep_id} belongs to another user")
        return record

    @staticmethod
    def _refresh_completion(record: dict):
        record["is_complete"] = all(is_populated(record.get(f"step_{n}_data")) for n in STEP_NUMBERS)

    def create(self, user_id: str, title: str = "", job_url: str | None = None, steps: dict | None = None) -> dict:
        """New preparation with all six slots empty unless ``steps`` fills some."""
        if not user_id:
            raise ValidationError.for_field("user_id", "is required")
        record = {
            "id": uuid.uuid4().hex,
            "user_id": user_id,
            "title": (title or "").strip() or DEFAULT_TITLE,
            "job_url": job_url or None,
            "is_complete": False,
            "created_at": _now(),
            "updated_at": None,
        }
        for n in STEP_NUMBERS:
            record[f"step_{n}_data"] = {}
        for key, data in (steps or {}).items():
            step = _step_number(key)
            record[f"step_{step}_data"] = validate_step(step, data)
        record["updated_at"] = record["created_at"]
        self._refresh_completion(record)
        with self._lock:
            self._commit("preparations", record["id"], record)
        logger.info("Created preparation %s for user %s", record["id"], user_id)
        return copy.deepcopy(record)

    def list_for_user(self, user_id: str) -> list:
        with self._lock:
            records = [copy.deepcopy(r) for r in self._data["preparations"].values() if r.get("user_id") == user_id]
        records.sort(key=lambda r: r.get("updated_at") or "", reverse=True)
        return records

    def get(self, prep_id: str, user_id: str) -> dict:
        with self._lock:
            return copy.deepcopy(self._owned(prep_id, user_id))

    def update(self, prep_id: str, user_id: str, **fields) -> dict:
        """Change title/job_url. ``user_id`` and slots cannot be changed here."""
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown fields",
                details=[{"field": f, "message": "cannot be updated"} for f in sorted(unknown)],
            )
        with self._lock:
            record = copy.deepcopy(self._owned(prep_id, user_id))
            if "title" in fields:
                title = fields["title"]
                if not isinstance(title, str) or not title.strip():
                    raise ValidationError.for_field("title", "must be a non-empty string")
                record["title"] = title.strip()
            if "job_url" in fields:
                job_url = fields["job_url"]
                if job_url is not None and not isinstance(job_url, str):
                    raise ValidationError.for_field("job_url", "must be a string")
                record["job_url"] = job_url or None
            record["updated_at"] = _now()
            self._commit("preparations", prep_id, record)
            return copy.deepcopy(record)

    def save_step(self, prep_id: str, user_id: str, step: int, data, merge: bool = False) -> dict:
        """Replace one slot (or merge its string lists when ``merge``); last write wins."""
        normalised = validate_step(step, data, partial=merge)
        key = f"step_{step}_data"
        with self._lock:
            record = copy.deepcopy(self._owned(prep_id, user_id))
            if merge:
                record[key] = merge_step(step, record.get(key) or {}, normalised)
            else:
                record[key] = normalised
            self._refresh_completion(record)
            record["updated_at"] = _now()
            self._commit("preparations", prep_id, record)
            logger.info("Saved %s of preparation %s (merge=%s)", key, prep_id, merge)
            return copy.deepcopy(record)

    def delete(self, prep_id: str, user_id: str):
        with self._lock:
            self._owned(prep_id, user_id)
            self._commit("preparations", prep_id, None)
        logger.info("Deleted preparation %s", prep_id)

    def stats(self, user_id: str, now: datetime.datetime | None = None) -> dict:
        now = now or datetime.datetime.now(datetime.timezone.utc)
        month_prefix = now.strftime("%Y-%m")
        records = self.list_for_user(user_id)
        return {
            "totalPreparations": len(records),
            "completedPreparations": sum(1 for r in records if r.get("is_complete")),
            "preparationsThisMonth": sum(1 for r in records if (r.get("created_at") or "").startswith(month_prefix)),
        }

    # ------------------------------------------------------------------
    # User profiles
    # ------------------------------------------------------------------

    def get_profile(self, user_id: str) -> dict:
        with self._lock:
            profile = self._data["user_profiles"].get(user_id)
            if profile is None:
                return {"id": user_id, "email": "", "is_premium": False}
            return copy.deepcopy(profile)

    def upsert_profile(self, user_id: str, **fields) -> dict:
        with self._lock:
            current = self._data["user_profiles"].get(user_id)
            if current:
                profile = copy.deepcopy(current)
            else:
                profile = {"id": user_id, "email": "", "is_premium": False, "created_at": _now()}
            profile.update(fields)
            self._commit("user_profiles", user_id, profile)
            return copy.deepcopy(profile)

    def set_premium(self, user_id: str, is_premium: bool = True) -> dict:
        profile = self.upsert_profile(user_id, is_premium=bool(is_premium))
        logger.info("User %s premium=%s", user_id, profile["is_premium"])
        return profile


def _step_number(key) -> int:
    """``3``, ``"3"`` or ``"step_3_data"`` -> 3."""
    text = str(key)
    if text.startswith("step_") and text.endswith("_data"):
        text = text[len("step_"):-len("_data")]
    try:
        step = int(text)
    except ValueError:
        raise ValidationError.for_field(str(key), "unknown step") from None
    if step not in STEP_NUMBERS:
        raise ValidationError.for_field(str(key), "unknown step")
    return step
