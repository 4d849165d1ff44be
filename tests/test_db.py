"""Tests for the vocabulary store."""
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from vocab_quiz.db import Database, StoreFailure, priority
from vocab_quiz.models import VocabRecord

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestWords:
    def test_add_and_get(self, tmp_db):
        record = tmp_db.add_word("happy", 500)
        assert record.uid >= 1
        fetched = tmp_db.get_word("happy")
        assert fetched.uid == record.uid
        assert fetched.score == 500
        assert fetched.last_quizzed.tzinfo is not None

    def test_get_missing(self, tmp_db):
        assert tmp_db.get_word("absent") is None
        assert tmp_db.get_word_by_uid(999) is None

    def test_remove(self, tmp_db):
        tmp_db.add_word("happy")
        assert tmp_db.remove_word("happy") is True
        assert tmp_db.get_word("happy") is None

    def test_remove_missing(self, tmp_db):
        assert tmp_db.remove_word("happy") is False

    def test_word_count(self, populated_db):
        assert populated_db.get_word_count() == 4

    def test_get_all_words_ordered_by_score(self, tmp_db):
        tmp_db.add_word("low", 100)
        tmp_db.add_word("high", 900)
        assert [r.word for r in tmp_db.get_all_words()] == ["high", "low"]

    def test_update_score(self, tmp_db):
        r = tmp_db.add_word("happy", 500)
        assert tmp_db.update_score(r.uid, 459) is True
        assert tmp_db.get_word_by_uid(r.uid).score == 459

    def test_update_score_missing(self, tmp_db):
        assert tmp_db.update_score(42, 100) is False

    def test_add_score(self, tmp_db):
        tmp_db.add_word("happy", 500)
        assert tmp_db.add_score("happy", 5) is True
        assert tmp_db.get_word("happy").score == 505

    def test_add_score_unsaved(self, tmp_db):
        assert tmp_db.add_score("happy", 5) is False

    def test_mark_quizzed(self, tmp_db):
        r = tmp_db.add_word("happy")
        when = NOW - timedelta(days=3)
        tmp_db.mark_quizzed(r.uid, when)
        assert tmp_db.get_word_by_uid(r.uid).last_quizzed == when


class TestFindWordsExcluding:
    def test_excludes_spellings(self, populated_db):
        found = populated_db.find_words_excluding({"happy", "lamp"}, 10, random.Random(1))
        assert sorted(r.word for r in found) == ["quiet", "river"]

    def test_case_insensitive(self, populated_db):
        found = populated_db.find_words_excluding({"HAPPY", " Lamp "}, 10, random.Random(1))
        assert "happy" not in {r.word for r in found}
        assert "lamp" not in {r.word for r in found}

    def test_respects_count(self, populated_db):
        found = populated_db.find_words_excluding(set(), 2, random.Random(1))
        assert len(found) == 2
        assert len({r.uid for r in found}) == 2

    def test_zero_count(self, populated_db):
        assert populated_db.find_words_excluding(set(), 0) == []

    def test_everything_excluded(self, populated_db):
        exclude = {"happy", "lamp", "river", "quiet"}
        assert populated_db.find_words_excluding(exclude, 3) == []

    def test_seeded_rng_is_reproducible(self, populated_db):
        a = populated_db.find_words_excluding(set(), 2, random.Random(5))
        b = populated_db.find_words_excluding(set(), 2, random.Random(5))
        assert [r.uid for r in a] == [r.uid for r in b]


class TestPriority:
    def test_formula(self):
        record = VocabRecord(1, "happy", 500, NOW - timedelta(days=2))
        assert priority(record, NOW) == pytest.approx(1500.0)

    def test_future_timestamp_counts_as_fresh(self):
        record = VocabRecord(1, "happy", 500, NOW + timedelta(days=1))
        assert priority(record, NOW) == pytest.approx(500.0)

    def test_higher_score_first(self, tmp_db):
        a = tmp_db.add_word("known", 200)
        b = tmp_db.add_word("shaky", 800)
        for r in (a, b):
            tmp_db.mark_quizzed(r.uid, NOW)
        batch = tmp_db.select_by_priority(2, now=NOW)
        assert [r.word for r in batch] == ["shaky", "known"]

    def test_staleness_outweighs_score(self, tmp_db):
        a = tmp_db.add_word("stale", 300)
        b = tmp_db.add_word("fresh", 500)
        tmp_db.mark_quizzed(a.uid, NOW - timedelta(days=4))  # 300 * 5 = 1500
        tmp_db.mark_quizzed(b.uid, NOW)  # 500 * 1
        assert tmp_db.select_by_priority(1, now=NOW)[0].word == "stale"

    def test_tie_goes_to_older(self, tmp_db):
        a = tmp_db.add_word("first", 0)
        b = tmp_db.add_word("second", 0)
        tmp_db.mark_quizzed(a.uid, NOW - timedelta(hours=1))
        tmp_db.mark_quizzed(b.uid, NOW - timedelta(hours=2))
        assert [r.word for r in tmp_db.select_by_priority(2, now=NOW)] == ["second", "first"]

    def test_count_limit(self, populated_db):
        assert len(populated_db.select_by_priority(2)) == 2
        assert len(populated_db.select_by_priority(10)) == 4
        assert populated_db.select_by_priority(0) == []


class TestSessions:
    def test_start_session(self, tmp_db):
        assert tmp_db.start_session() >= 1

    def test_end_session(self, tmp_db):
        sid = tmp_db.start_session()
        tmp_db.end_session(sid, total=3, correct=2, skipped=1)

        history = tmp_db.get_session_history()
        assert history[0]["questions_total"] == 3
        assert history[0]["questions_correct"] == 2
        assert history[0]["questions_skipped"] == 1
        assert history[0]["ended_at"] is not None

    def test_session_history_order(self, tmp_db):
        s1 = tmp_db.start_session()
        s2 = tmp_db.start_session()
        history = tmp_db.get_session_history()
        assert [h["id"] for h in history] == [s2, s1]


class TestStats:
    def test_empty_stats(self, tmp_db):
        stats = tmp_db.get_stats()
        assert stats["total_words"] == 0
        assert stats["average_score"] == 0
        assert stats["accuracy"] == 0

    def test_stats_with_data(self, tmp_db):
        tmp_db.add_word("a", 400)
        tmp_db.add_word("b", 600)
        sid = tmp_db.start_session()
        tmp_db.end_session(sid, total=4, correct=3, skipped=2)
        stats = tmp_db.get_stats()
        assert stats["total_words"] == 2
        assert stats["average_score"] == 500.0
        assert stats["total_sessions"] == 1
        assert stats["total_questions_answered"] == 4
        assert stats["total_skipped"] == 2
        assert stats["accuracy"] == 75.0


class TestStoreFailure:
    def test_closed_connection(self, tmp_path):
        db = Database(tmp_path / "closed.db")
        db.close()
        with pytest.raises(StoreFailure):
            db.add_word("happy")
        with pytest.raises(StoreFailure):
            db.get_word("happy")
