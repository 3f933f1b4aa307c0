"""Per-subject progress: best scores, aggregate stats and the missed-question log.

All reads come from an in-memory mirror. Every mutation updates the mirror
and writes the same value straight through to the key/value store. A failed
write is logged and otherwise ignored; the mirror stays authoritative for the
rest of the process.
"""
import json
import logging
import sqlite3

from quiz_trainer.models import CompletionRecord, SubjectStats

logger = logging.getLogger(__name__)

THEME_KEY = "quiz_theme"
THEMES = ("dark", "light")
DEFAULT_THEME = "dark"


def storage_key(subject_id: str, kind: str) -> str:
    return f"quiz_{subject_id}_{kind}"


class ProgressStore:
    def __init__(self, store):
        self.store = store
        self._variants: dict[str, dict[str, CompletionRecord]] = {}
        self._stats: dict[str, SubjectStats] = {}
        self._wrong: dict[str, list[str]] = {}
        self._theme: str | None = None

    # --- persistence helpers ---

    def _load(self, key: str, allow_plain: bool = False):
        """Decode the JSON stored under key. With allow_plain, a value that is not
        JSON comes back as the raw string instead of being discarded."""
        try:
            raw = self.store.get(key)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Could not read %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            if allow_plain:
                return raw
            logger.warning("Ignoring malformed value stored under %s", key)
            return None

    def _save(self, key: str, value) -> None:
        try:
            self.store.set(key, json.dumps(value, ensure_ascii=False))
        except (sqlite3.Error, OSError) as e:
            logger.warning("Failed to persist %s: %s", key, e)

    # --- reads ---

    def get_completed_variants(self, subject_id: str) -> dict[str, CompletionRecord]:
        if subject_id not in self._variants:
            key = storage_key(subject_id, "variants")
            records = {}
            data = self._load(key)
            if isinstance(data, dict):
                try:
                    records = {k: CompletionRecord.from_dict(v) for k, v in data.items()}
                except (KeyError, TypeError, ValueError):
                    logger.warning("Ignoring malformed value stored under %s", key)
                    records = {}
            self._variants[subject_id] = records
        return self._variants[subject_id]

    def get_stats(self, subject_id: str) -> SubjectStats:
        if subject_id not in self._stats:
            key = storage_key(subject_id, "stats")
            stats = SubjectStats()
            data = self._load(key)
            if isinstance(data, dict):
                try:
                    stats = SubjectStats.from_dict(data)
                except (KeyError, TypeError, ValueError):
                    logger.warning("Ignoring malformed value stored under %s", key)
            self._stats[subject_id] = stats
        return self._stats[subject_id]

    def get_wrong_answers(self, subject_id: str) -> list[str]:
        if subject_id not in self._wrong:
            data = self._load(storage_key(subject_id, "wrong"))
            wrong = []
            if isinstance(data, list):
                for text in data:
                    if isinstance(text, str) and text not in wrong:
                        wrong.append(text)
            self._wrong[subject_id] = wrong
        return self._wrong[subject_id]

    # --- mutators ---

    def _persist_variants(self, subject_id: str) -> None:
        records = self.get_completed_variants(subject_id)
        self._save(storage_key(subject_id, "variants"),
                   {k: r.to_dict() for k, r in records.items()})

    def record_completion(self, subject_id: str, variant_key: str, record: CompletionRecord) -> bool:
        """Keep record only if it beats the stored percentage. Returns True if stored."""
        records = self.get_completed_variants(subject_id)
        existing = records.get(variant_key)
        if existing is not None and record.percentage <= existing.percentage:
            return False
        records[variant_key] = record
        self._persist_variants(subject_id)
        return True

    def add_stats(self, subject_id: str, questions: int, correct: int, time_ms: int) -> SubjectStats:
        stats = self.get_stats(subject_id)
        stats.total_attempts += 1
        stats.total_questions += questions
        stats.total_correct += correct
        stats.total_time_ms += time_ms
        self._save(storage_key(subject_id, "stats"), stats.to_dict())
        return stats

    def add_wrong_answers(self, subject_id: str, texts) -> None:
        wrong = self.get_wrong_answers(subject_id)
        for text in texts:
            if text not in wrong:
                wrong.append(text)
        self._save(storage_key(subject_id, "wrong"), wrong)

    def remove_wrong_answer(self, subject_id: str, text: str) -> None:
        wrong = self.get_wrong_answers(subject_id)
        wrong[:] = [t for t in wrong if t != text]
        self._save(storage_key(subject_id, "wrong"), wrong)

    def reset_subject(self, subject_id: str) -> None:
        """Zero best scores, stats and the missed-question log for one subject."""
        self._variants[subject_id] = {}
        self._stats[subject_id] = SubjectStats()
        self._wrong[subject_id] = []
        self._save(storage_key(subject_id, "variants"), {})
        self._save(storage_key(subject_id, "stats"), SubjectStats().to_dict())
        self._save(storage_key(subject_id, "wrong"), [])
        logger.info("Reset progress for subject %s", subject_id)

    # --- theme ---

    def get_theme(self) -> str:
        if self._theme is None:
            theme = self._load(THEME_KEY, allow_plain=True)
            self._theme = theme if theme in THEMES else DEFAULT_THEME
        return self._theme

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme!r}")
        self._theme = theme
        self._save(THEME_KEY, theme)

    def toggle_theme(self) -> str:
        self.set_theme("light" if self.get_theme() == "dark" else "dark")
        return self._theme
