"""Persistent question -> answer cache.

The whole mapping lives in memory and is rewritten to disk on every ``set``.
Keys are matched after trimming and case folding, but the spelling that was
stored first is the one written to the file.
"""

import json
import os
import tempfile
import threading

from .logui import debug, warn


def normalize_key(question: str) -> str:
    return (question or "").strip().casefold()


class ResponseCache:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._answers: dict[str, str] = {}
        self._keys: dict[str, str] = {}
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except Exception as e:
            warn(f"Cache load failed ({os.path.basename(self.path)}): {e}")
            return
        if not isinstance(payload, dict):
            warn(f"Cache file ignored, not a JSON object: {self.path}")
            return
        with self._lock:
            for question, answer in payload.items():
                if isinstance(question, str) and isinstance(answer, str):
                    self._put(question, answer)
        debug(f"Cache loaded: {len(self._answers)} entries")

    def _put(self, question: str, answer: str):
        norm = normalize_key(question)
        stored = self._keys.get(norm)
        if stored is None:
            stored = question.strip()
            self._keys[norm] = stored
        self._answers[stored] = answer

    def _save(self):
        folder = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(folder, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".cache-", suffix=".tmp", dir=folder)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._answers, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except Exception as e:
            warn(f"Cache save failed: {e}")
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def get(self, question: str) -> str | None:
        with self._lock:
            stored = self._keys.get(normalize_key(question))
            if stored is None:
                return None
            return self._answers.get(stored)

    def set(self, question: str, answer: str):
        with self._lock:
            self._put(question, answer)
            self._save()

    def __contains__(self, question) -> bool:
        return self.get(question) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._answers)
