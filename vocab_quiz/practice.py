"""One practice round: pick saved words, quiz each in turn, score the replies."""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from vocab_quiz.db import StoreFailure
from vocab_quiz.models import Question, QuestionKind, Resolution, Resolved, Retry, Skip
from vocab_quiz.providers.base import LookupFailed
from vocab_quiz.question_generator import Unsupported, generate_question
from vocab_quiz.resolver import resolve
from vocab_quiz.srs import apply_outcome, select_batch

if TYPE_CHECKING:
    from vocab_quiz.config import Settings
    from vocab_quiz.db import Database
    from vocab_quiz.providers.base import LexiconProvider

_log = logging.getLogger("vocab_quiz.practice")


class PracticeSession:
    """Drives a batch of questions one reply at a time.

    ``next_question()`` builds the question for the next word that can be
    quizzed (words whose lookup or question generation fails are skipped);
    ``submit()`` resolves a reply.  A Retry keeps the current question, a
    Resolved or Skip scores it, marks the word practiced and moves on.
    """

    def __init__(
        self,
        db: Database,
        lexicon: LexiconProvider,
        settings: Settings,
        rng: random.Random | None = None,
        kind: QuestionKind | None = None,
        count: int | None = None,
    ):
        self.db = db
        self.lexicon = lexicon
        self.settings = settings
        self.rng = rng or random.Random()
        self.kind = kind
        self.records = select_batch(db, count if count is not None else settings.batch_size)
        self.session_id = db.start_session()
        self.current: Question | None = None
        self.last_outcome: dict | None = None
        self.total = 0
        self.correct = 0
        self.skipped = 0
        self.finished = False
        self._index = 0

    @property
    def position(self) -> int:
        return self._index

    async def next_question(self) -> Question | None:
        """The question awaiting a reply, or None once the batch is done."""
        if self.current is not None:
            return self.current
        while self._index < len(self.records):
            record = self.records[self._index]
            try:
                entry = await self.lexicon.lookup(record.word)
                self.current = await generate_question(
                    record, entry, self.db, self.lexicon, self.rng,
                    kind=self.kind,
                    answer_count=self.settings.answer_count,
                    antonym_probability=self.settings.antonym_distractor_probability,
                )
                return self.current
            except (LookupFailed, Unsupported) as e:
                _log.info("Skipping '%s': %s", record.word, e)
            except StoreFailure as e:
                _log.warning("Skipping '%s' after store failure: %s", record.word, e)
            self._index += 1
        self._finish()
        return None

    def submit(self, raw: str) -> Resolution:
        if self.current is None:
            raise RuntimeError("no question is awaiting an answer")
        question = self.current
        resolution = resolve(
            raw, question.answers,
            skip_token=self.settings.skip_token,
            threshold=self.settings.match_threshold,
            margin=self.settings.match_margin,
        )
        if isinstance(resolution, Retry):
            return resolution

        if isinstance(resolution, Skip):
            self.skipped += 1
        elif isinstance(resolution, Resolved):
            self.total += 1
            if resolution.answer.correct:
                self.correct += 1
        try:
            self.last_outcome = apply_outcome(self.db, question.word_uid, resolution)
            self.db.mark_quizzed(question.word_uid)
        except StoreFailure as e:
            _log.warning("Could not record result for '%s': %s", question.word, e)
            self.last_outcome = None

        self.current = None
        self._index += 1
        return resolution

    def _finish(self) -> None:
        if self.finished:
            return
        self.finished = True
        try:
            self.db.end_session(self.session_id, self.total, self.correct, self.skipped)
        except StoreFailure as e:
            _log.warning("Could not close session %d: %s", self.session_id, e)
        _log.info("Session %d finished: %d/%d correct, %d skipped",
                  self.session_id, self.correct, self.total, self.skipped)
