from __future__ import annotations

import random
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from vocab_quiz.models import VocabRecord

SCHEMA = """
CREATE TABLE IF NOT EXISTS words (
    uid INTEGER PRIMARY KEY NOT NULL,
    word TEXT NOT NULL,
    last_quizzed TEXT NOT NULL,
    score INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_words_word ON words(word);

CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    started_at TEXT NOT NULL,
    ended_at TEXT,
    questions_total INTEGER DEFAULT 0,
    questions_correct INTEGER DEFAULT 0,
    questions_skipped INTEGER DEFAULT 0
);
"""

SECONDS_PER_DAY = 86400


class StoreFailure(Exception):
    """A vocabulary store operation could not be completed."""


def _parse_time(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _row_to_record(row: sqlite3.Row) -> VocabRecord:
    return VocabRecord(
        uid=row["uid"],
        word=row["word"],
        score=row["score"],
        last_quizzed=_parse_time(row["last_quizzed"]),
    )


def priority(record: VocabRecord, now: datetime) -> float:
    """Review priority: score scaled by days since the word was last practiced.

    A wrong answer raises the score and a right one lowers it, so a high
    score means the word still needs work.  Staleness multiplies that need.
    """
    idle_days = max((now - record.last_quizzed).total_seconds(), 0.0) / SECONDS_PER_DAY
    return record.score * (1.0 + idle_days)


class Database:
    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        with self._failures("open"):
            self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    @contextmanager
    def _failures(self, operation: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as e:
            raise StoreFailure(f"{operation}: {e}") from e

    # ── Words ─────────────────────────────────────────────────────────────

    def add_word(self, word: str, score: int = 500) -> VocabRecord:
        now = datetime.now(timezone.utc)
        with self._failures("add_word"):
            cur = self.conn.execute(
                "INSERT INTO words (word, last_quizzed, score) VALUES (?, ?, ?)",
                (word, now.isoformat(), score),
            )
            self.conn.commit()
        return VocabRecord(uid=cur.lastrowid, word=word, score=score, last_quizzed=now)

    def remove_word(self, word: str) -> bool:
        """Delete a saved word. Returns True if anything was removed."""
        with self._failures("remove_word"):
            cur = self.conn.execute("DELETE FROM words WHERE word = ?", (word,))
            self.conn.commit()
        return cur.rowcount > 0

    def get_word(self, word: str) -> VocabRecord | None:
        with self._failures("get_word"):
            row = self.conn.execute(
                "SELECT * FROM words WHERE word = ? ORDER BY uid LIMIT 1", (word,)
            ).fetchone()
        return _row_to_record(row) if row else None

    def get_word_by_uid(self, uid: int) -> VocabRecord | None:
        with self._failures("get_word_by_uid"):
            row = self.conn.execute(
                "SELECT * FROM words WHERE uid = ?", (uid,)
            ).fetchone()
        return _row_to_record(row) if row else None

    def get_all_words(self) -> list[VocabRecord]:
        with self._failures("get_all_words"):
            rows = self.conn.execute(
                "SELECT * FROM words ORDER BY score DESC, word ASC"
            ).fetchall()
        return [_row_to_record(r) for r in rows]

    def get_word_count(self) -> int:
        with self._failures("get_word_count"):
            row = self.conn.execute("SELECT COUNT(*) FROM words").fetchone()
        return row[0]

    def select_by_priority(self, count: int, now: datetime | None = None) -> list[VocabRecord]:
        """The *count* saved words most in need of practice.

        Ordered by priority (highest first); ties go to the word practiced
        longest ago, then to the oldest entry.
        """
        if count <= 0:
            return []
        now = now or datetime.now(timezone.utc)
        records = self.get_all_words()
        records.sort(key=lambda r: (-priority(r, now), r.last_quizzed, r.uid))
        return records[:count]

    def find_words_excluding(
        self,
        exclude: Iterable[str],
        count: int,
        rng: random.Random | None = None,
    ) -> list[VocabRecord]:
        """Random sample of up to *count* saved words whose spelling is not in *exclude*.

        Spellings are compared case-insensitively.
        """
        if count <= 0:
            return []
        excluded = {w.strip().lower() for w in exclude}
        candidates = [
            r for r in self.get_all_words()
            if r.word.strip().lower() not in excluded
        ]
        rng = rng or random.Random()
        return rng.sample(candidates, min(count, len(candidates)))

    def mark_quizzed(self, uid: int, when: datetime | None = None) -> bool:
        when = when or datetime.now(timezone.utc)
        with self._failures("mark_quizzed"):
            cur = self.conn.execute(
                "UPDATE words SET last_quizzed = ? WHERE uid = ?",
                (when.isoformat(), uid),
            )
            self.conn.commit()
        return cur.rowcount > 0

    def update_score(self, uid: int, score: int) -> bool:
        with self._failures("update_score"):
            cur = self.conn.execute(
                "UPDATE words SET score = ? WHERE uid = ?", (score, uid)
            )
            self.conn.commit()
        return cur.rowcount > 0

    def add_score(self, word: str, delta: int) -> bool:
        """Add *delta* to a saved word's score. Returns False if the word is not saved."""
        with self._failures("add_score"):
            cur = self.conn.execute(
                "UPDATE words SET score = score + ? WHERE word = ?", (delta, word)
            )
            self.conn.commit()
        return cur.rowcount > 0

    # ── Sessions ──────────────────────────────────────────────────────────

    def start_session(self) -> int:
        now = datetime.now(timezone.utc).isoformat()
        with self._failures("start_session"):
            cur = self.conn.execute(
                "INSERT INTO sessions (started_at) VALUES (?)", (now,)
            )
            self.conn.commit()
        return cur.lastrowid

    def end_session(self, session_id: int, total: int, correct: int, skipped: int = 0) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._failures("end_session"):
            self.conn.execute(
                "UPDATE sessions SET ended_at=?, questions_total=?, questions_correct=?, "
                "questions_skipped=? WHERE id=?",
                (now, total, correct, skipped, session_id),
            )
            self.conn.commit()

    def get_session_history(self, limit: int = 20) -> list[dict]:
        with self._failures("get_session_history"):
            rows = self.conn.execute(
                "SELECT * FROM sessions ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
        return [dict(r) for r in rows]

    def get_stats(self) -> dict:
        with self._failures("get_stats"):
            words = self.conn.execute(
                "SELECT COUNT(*) AS cnt, AVG(score) AS avg_score FROM words"
            ).fetchone()
            sessions = self.conn.execute(
                "SELECT COUNT(*) AS cnt, "
                "COALESCE(SUM(questions_total), 0) AS total, "
                "COALESCE(SUM(questions_correct), 0) AS correct, "
                "COALESCE(SUM(questions_skipped), 0) AS skipped "
                "FROM sessions"
            ).fetchone()

        total_answered = sessions["total"]
        total_correct = sessions["correct"]
        return {
            "total_words": words["cnt"],
            "average_score": round(words["avg_score"], 1) if words["avg_score"] is not None else 0,
            "total_sessions": sessions["cnt"],
            "total_questions_answered": total_answered,
            "total_correct": total_correct,
            "total_skipped": sessions["skipped"],
            "accuracy": (
                round(total_correct / total_answered * 100, 1)
                if total_answered > 0
                else 0
            ),
        }
