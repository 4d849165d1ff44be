"""Tests for mastery scoring and batch selection."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from vocab_quiz.models import Answer, Resolved, Retry, Skip
from vocab_quiz.srs import (
    SCORE_CEILING,
    apply_outcome,
    correct_update,
    incorrect_update,
    select_batch,
)


class TestScoreUpdates:
    def test_correct_from_initial(self):
        assert correct_update(500) == 459

    def test_incorrect_from_initial(self):
        assert incorrect_update(500) == 521

    def test_incorrect_mid_range(self):
        assert incorrect_update(300) == 313

    def test_correct_lowers(self):
        for score in (1, 50, 250, 999, 1000):
            assert correct_update(score) < score

    def test_incorrect_raises_below_ceiling(self):
        for score in (0, 12, 480, 950):
            assert incorrect_update(score) > score

    def test_ceiling(self):
        assert incorrect_update(1000) == SCORE_CEILING
        assert incorrect_update(990) == SCORE_CEILING

    def test_no_floor(self):
        assert correct_update(0) == -1

    def test_not_inverse(self):
        assert correct_update(incorrect_update(500)) != 500


class TestApplyOutcome:
    def test_correct(self, populated_db):
        happy = populated_db.get_word("happy")
        result = apply_outcome(populated_db, happy.uid, Resolved(Answer("glad", True)))

        assert result["scored"] is True
        assert result["correct"] is True
        assert populated_db.get_word("happy").score == 459
        assert result["updates"] == [
            {"uid": happy.uid, "word": "happy", "old_score": 500, "new_score": 459},
        ]

    def test_incorrect_unsaved_answer(self, populated_db):
        happy = populated_db.get_word("happy")
        result = apply_outcome(populated_db, happy.uid, Resolved(Answer("sad", False)))

        assert result["correct"] is False
        assert populated_db.get_word("happy").score == 521
        assert len(result["updates"]) == 1

    def test_incorrect_saved_answer_penalizes_both(self, populated_db):
        happy = populated_db.get_word("happy")
        lamp = populated_db.get_word("lamp")
        result = apply_outcome(
            populated_db, happy.uid, Resolved(Answer("lamp", False, lamp.uid)),
        )

        assert populated_db.get_word("happy").score == 521
        assert populated_db.get_word("lamp").score == 521
        assert [u["word"] for u in result["updates"]] == ["happy", "lamp"]
        # Untouched
        assert populated_db.get_word("river").score == 500

    def test_correct_does_not_touch_others(self, populated_db):
        happy = populated_db.get_word("happy")
        apply_outcome(populated_db, happy.uid, Resolved(Answer("happy", True, happy.uid)))
        assert populated_db.get_word("happy").score == 459
        assert populated_db.get_word("lamp").score == 500

    def test_skip_changes_nothing(self, populated_db):
        happy = populated_db.get_word("happy")
        result = apply_outcome(populated_db, happy.uid, Skip())
        assert result == {"scored": False, "correct": None, "updates": []}
        assert populated_db.get_word("happy").score == 500

    def test_retry_rejected(self, populated_db):
        happy = populated_db.get_word("happy")
        with pytest.raises(ValueError):
            apply_outcome(populated_db, happy.uid, Retry("empty input"))

    def test_removed_word(self, populated_db):
        happy = populated_db.get_word("happy")
        populated_db.remove_word("happy")
        result = apply_outcome(populated_db, happy.uid, Resolved(Answer("glad", True)))
        assert result["scored"] is False
        assert result["updates"] == []


class TestSelectBatch:
    def test_empty_store(self, tmp_db):
        assert select_batch(tmp_db) == []

    def test_default_size(self, tmp_db):
        for word in ("a", "b", "c", "d", "e", "f"):
            tmp_db.add_word(word)
        assert len(select_batch(tmp_db)) == 4

    def test_most_urgent_first(self, tmp_db):
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        weak = tmp_db.add_word("weak", 900)
        strong = tmp_db.add_word("strong", 100)
        stale = tmp_db.add_word("stale", 500)
        tmp_db.mark_quizzed(weak.uid, now)
        tmp_db.mark_quizzed(strong.uid, now)
        tmp_db.mark_quizzed(stale.uid, now - timedelta(days=1))

        batch = select_batch(tmp_db, 3, now=now)
        assert [r.word for r in batch] == ["stale", "weak", "strong"]

    def test_answering_correctly_lowers_priority(self, tmp_db):
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        a = tmp_db.add_word("alpha", 500)
        b = tmp_db.add_word("beta", 500)
        for r in (a, b):
            tmp_db.mark_quizzed(r.uid, now)
        apply_outcome(tmp_db, a.uid, Resolved(Answer("x", True)))
        assert select_batch(tmp_db, 1, now=now)[0].word == "beta"
