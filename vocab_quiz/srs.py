"""Mastery score updates and practice batch selection."""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from vocab_quiz.models import Resolution, Resolved, Retry, VocabRecord

if TYPE_CHECKING:
    from vocab_quiz.db import Database

_log = logging.getLogger("vocab_quiz.srs")

SCORE_CEILING = 1000
DEFAULT_BATCH_SIZE = 4

# A right answer shrinks the score (less review), a wrong one grows it.
CORRECT_MULTIPLIER = Decimal("0.92")
CORRECT_BIAS = Decimal("-0.5")
INCORRECT_MULTIPLIER = Decimal("1.04")
INCORRECT_BIAS = Decimal("0.5")


def _scale(score: int, multiplier: Decimal, bias: Decimal) -> int:
    """round(score * multiplier + bias), capped at SCORE_CEILING.

    An exact half rounds in the direction of the bias, so 459.5 on the
    correct path becomes 459 and 520.5 on the incorrect path becomes 521.
    There is no floor.
    """
    shifted = Decimal(score) * multiplier + bias
    mode = ROUND_HALF_UP if (bias > 0) == (shifted >= 0) else ROUND_HALF_DOWN
    return min(int(shifted.quantize(Decimal(1), rounding=mode)), SCORE_CEILING)


def correct_update(score: int) -> int:
    return _scale(score, CORRECT_MULTIPLIER, CORRECT_BIAS)


def incorrect_update(score: int) -> int:
    return _scale(score, INCORRECT_MULTIPLIER, INCORRECT_BIAS)


def select_batch(
    db: Database,
    count: int = DEFAULT_BATCH_SIZE,
    now: datetime | None = None,
) -> list[VocabRecord]:
    """Pick the next words to practice, most urgent first."""
    return db.select_by_priority(count, now=now)


def _penalize(db: Database, uid: int) -> dict | None:
    record = db.get_word_by_uid(uid)
    if record is None:
        _log.warning("Cannot rescore uid %d: no longer saved", uid)
        return None
    new_score = incorrect_update(record.score)
    db.update_score(uid, new_score)
    return {"uid": uid, "word": record.word, "old_score": record.score, "new_score": new_score}


def apply_outcome(db: Database, word_uid: int, resolution: Resolution) -> dict:
    """Update mastery scores after a question was answered.

    A correct answer lowers the tested word's score.  A wrong answer raises
    it, and when the chosen wrong answer is itself a saved word that word is
    raised too: mixing up two saved words means both need more review.
    Skips change nothing.

    Returns {"scored": bool, "correct": bool | None, "updates": [...]}
    where each update is {"uid", "word", "old_score", "new_score"}.
    """
    if isinstance(resolution, Retry):
        raise ValueError("a Retry has no outcome to score")
    if not isinstance(resolution, Resolved):
        return {"scored": False, "correct": None, "updates": []}

    answer = resolution.answer
    updates: list[dict] = []
    if answer.correct:
        record = db.get_word_by_uid(word_uid)
        if record is None:
            _log.warning("Cannot rescore uid %d: no longer saved", word_uid)
        else:
            new_score = correct_update(record.score)
            db.update_score(word_uid, new_score)
            updates.append({
                "uid": word_uid, "word": record.word,
                "old_score": record.score, "new_score": new_score,
            })
    else:
        tested = _penalize(db, word_uid)
        if tested:
            updates.append(tested)
        if answer.word_uid is not None and answer.word_uid != word_uid:
            linked = _penalize(db, answer.word_uid)
            if linked:
                updates.append(linked)

    for u in updates:
        _log.info("Score %s: %d -> %d", u["word"], u["old_score"], u["new_score"])
    return {"scored": bool(updates), "correct": answer.correct, "updates": updates}
