from __future__ import annotations

"""Namespaced JSON key-value store backed by a single file.

The file holds one JSON object mapping namespaced keys ("upsc_history", ...)
to JSON-encoded strings, so one corrupt value only loses that key. Keys
without this store's namespace are left untouched.
"""

import errno
import json
import os
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from ..app.explain import trace as xtrace
from ..engine.scoring import Result
from ..errors import StorageQuotaError
from .schema import (
    APP_KEYS,
    HISTORY_CAP,
    HISTORY_KEY,
    MISTAKES_CAP,
    MISTAKES_KEY,
    SESSION_KEY,
    SETTINGS_KEY,
    VISITED_KEY,
    MistakeEntry,
    ResultRecord,
)

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024
DEFAULT_SETTINGS = {"theme": "light"}


def _warn(msg: str) -> None:
    print(f"[WARN] {msg}", file=sys.stderr)


class Store:
    def __init__(
        self,
        path: Union[str, Path],
        *,
        namespace: str = "upsc_",
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
        history_cap: int = HISTORY_CAP,
        mistakes_cap: int = MISTAKES_CAP,
        trim_history_to: int = 10,
    ) -> None:
        self.path = Path(path)
        self.namespace = namespace
        self.quota_bytes = int(quota_bytes)
        self.history_cap = int(history_cap)
        self.mistakes_cap = int(mistakes_cap)
        self.trim_history_to = int(trim_history_to)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Store":
        st = cfg.get("storage", {})
        return cls(
            st.get("path", "./upsc_store.json"),
            namespace=st.get("namespace", "upsc_"),
            quota_bytes=st.get("quota_bytes", DEFAULT_QUOTA_BYTES),
            history_cap=st.get("history_cap", HISTORY_CAP),
            mistakes_cap=st.get("mistakes_cap", MISTAKES_CAP),
            trim_history_to=st.get("trim_history_to", 10),
        )

    # --- raw document ---

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _read_doc(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _warn(f"Storage read error ({self.path}): {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_doc(self, doc: Mapping[str, str]) -> None:
        """Write the whole document atomically; raises StorageQuotaError when over budget."""
        text = json.dumps(doc, separators=(",", ":"))
        size = len(text.encode("utf-8"))
        if size > self.quota_bytes:
            raise StorageQuotaError(f"store would grow to {size} bytes (quota {self.quota_bytes})")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except OSError as e:
            try:
                tmp.unlink()
            except OSError:
                pass
            if e.errno in (errno.ENOSPC, errno.EDQUOT):
                raise StorageQuotaError(str(e))
            raise

    # --- key/value API ---

    def get(self, key: str, fallback: Any = None) -> Any:
        """Parsed value for key, or fallback when absent or unreadable. Never raises."""
        raw = self._read_doc().get(self._key(key))
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            _warn(f"Storage value for '{key}' is corrupt: {e}")
            return fallback

    def set(self, key: str, value: Any) -> bool:
        """Serialize and write. On quota failure trims history and retries once.

        Returns False instead of raising when the write could not be made.
        """
        try:
            encoded = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            _warn(f"Storage write error for '{key}': {e}")
            return False
        doc = self._read_doc()
        doc[self._key(key)] = encoded
        try:
            self._write_doc(doc)
            return True
        except StorageQuotaError as e:
            xtrace("storage_quota", {"key": key, "reason": str(e)})
        except OSError as e:
            _warn(f"Storage write error for '{key}': {e}")
            return False

        self._trim_history(doc)
        try:
            self._write_doc(doc)
            _warn(f"Storage full; history trimmed to {self.trim_history_to} entries")
            return True
        except (StorageQuotaError, OSError) as e:
            _warn(f"Storage write failed after trimming history: {e}")
            return False

    def _trim_history(self, doc: Dict[str, str]) -> None:
        hkey = self._key(HISTORY_KEY)
        source = doc.get(hkey)
        try:
            history = json.loads(source) if source else []
        except ValueError:
            history = []
        if not isinstance(history, list):
            history = []
        doc[hkey] = json.dumps(history[: self.trim_history_to], default=str)

    def remove(self, key: str) -> bool:
        doc = self._read_doc()
        if doc.pop(self._key(key), None) is None:
            return True
        try:
            self._write_doc(doc)
            return True
        except (StorageQuotaError, OSError) as e:
            _warn(f"Storage write error removing '{key}': {e}")
            return False

    def clear_all(self) -> bool:
        """Remove this application's keys only; foreign keys in the file survive."""
        doc = self._read_doc()
        for k in APP_KEYS:
            doc.pop(self._key(k), None)
        try:
            self._write_doc(doc)
            return True
        except (StorageQuotaError, OSError) as e:
            _warn(f"Storage write error clearing data: {e}")
            return False

    # --- history ---

    def history(self) -> List[Dict[str, Any]]:
        data = self.get(HISTORY_KEY, [])
        return data if isinstance(data, list) else []

    def _new_result_id(self, taken: Iterable[str]) -> str:
        taken = set(taken)
        while True:
            rid = f"result_{int(time.time() * 1000)}_{uuid4().hex[:7]}"
            if rid not in taken:
                return rid

    def save_result(self, result: Union[Result, Mapping[str, Any]]) -> Optional[str]:
        """Stamp, prepend and cap history. Returns the new id, or None on failure."""
        payload = result.to_dict() if isinstance(result, Result) else dict(result)
        history = self.history()
        payload["id"] = self._new_result_id(h.get("id", "") for h in history if isinstance(h, dict))
        payload["savedAt"] = datetime.now(timezone.utc)
        try:
            record = ResultRecord.model_validate(payload)
        except PydanticValidationError as e:
            _warn(f"Refusing to save malformed result: {e}")
            return None
        history.insert(0, record.model_dump(mode="json"))
        limited = history[: self.history_cap]
        if not self.set(HISTORY_KEY, limited):
            return None
        xtrace("result_saved", {"id": record.id, "history": len(limited)})
        return record.id

    # --- mistakes ---

    def mistakes(self) -> List[Dict[str, Any]]:
        data = self.get(MISTAKES_KEY, [])
        return data if isinstance(data, list) else []

    def save_mistakes(self, new_mistakes: Iterable[Mapping[str, Any]]) -> bool:
        """Merge new mistakes in front of the bank, dedupe by text, cap the size."""
        fresh: List[Dict[str, Any]] = []
        for m in new_mistakes:
            try:
                fresh.append(MistakeEntry.model_validate(dict(m)).model_dump(mode="json"))
            except PydanticValidationError as e:
                _warn(f"Skipping malformed mistake entry: {e}")
        merged: List[Dict[str, Any]] = []
        seen = set()
        for entry in fresh + self.mistakes():
            text = entry.get("text") if isinstance(entry, dict) else None
            if text is None or text in seen:
                continue
            seen.add(text)
            merged.append(entry)
        return self.set(MISTAKES_KEY, merged[: self.mistakes_cap])

    # --- settings, first visit, resumable session ---

    def settings(self) -> Dict[str, Any]:
        data = self.get(SETTINGS_KEY, None)
        return {**DEFAULT_SETTINGS, **data} if isinstance(data, dict) else dict(DEFAULT_SETTINGS)

    def mark_visited(self) -> bool:
        return self.set(VISITED_KEY, True)

    def visited(self) -> bool:
        return bool(self.get(VISITED_KEY, False))

    def save_session(self, snapshot: Mapping[str, Any]) -> bool:
        return self.set(SESSION_KEY, dict(snapshot))

    def load_session(self) -> Optional[Dict[str, Any]]:
        data = self.get(SESSION_KEY, None)
        return data if isinstance(data, dict) else None

    def clear_session(self) -> bool:
        return self.remove(SESSION_KEY)
