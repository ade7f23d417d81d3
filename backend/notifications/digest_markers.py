"""
Per-day "digest has fired" markers, persisted to a local JSON file.

The file belongs to the single process running the digest scheduler. Two
processes with separate marker files can each fire on the same day.
"""

import json
import os
import tempfile
import threading
from datetime import date, timedelta

from config.notification_settings import DIGEST_MARKER_PATH, DIGEST_MARKER_RETENTION_DAYS


class DigestMarkerStore:
    """Keyed store of ISO date -> fired flag."""

    def __init__(self, path: str = DIGEST_MARKER_PATH):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> dict[str, bool]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"  ⚠️  Unreadable digest marker file {self.path}, starting empty: {e}")
            return {}
        return {str(k): bool(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _save(self, markers: dict[str, bool]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        # Write-then-rename
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".digest_markers_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(markers, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def has_fired(self, day: date) -> bool:
        with self._lock:
            return self._load().get(day.isoformat(), False)

    def mark_fired(self, day: date) -> None:
        with self._lock:
            markers = self._load()
            markers[day.isoformat()] = True
            self._save(markers)

    def cleanup(self, today: date, retention_days: int = DIGEST_MARKER_RETENTION_DAYS) -> int:
        """Drop markers older than the retention window. Returns the number removed."""
        cutoff = today - timedelta(days=retention_days)
        with self._lock:
            markers = self._load()
            kept = {}
            for key, value in markers.items():
                try:
                    keep = date.fromisoformat(key) >= cutoff
                except ValueError:
                    keep = False  # unparseable keys are garbage
                if keep:
                    kept[key] = value

            removed = len(markers) - len(kept)
            if removed:
                self._save(kept)
            return removed
