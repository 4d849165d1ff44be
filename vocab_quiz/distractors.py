"""Fill a question's wrong answers from saved words, then from random dictionary words.

The exclusion set holds normalized (stripped, lowercased) texts that must not
appear as distractors: the tested word, its synonyms/antonyms and everything
already placed in the question.  Every text added here is added to it too,
which keeps the answers of one question free of duplicates.
"""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from vocab_quiz.models import Answer, PartOfSpeech
from vocab_quiz.providers.base import LookupFailed

if TYPE_CHECKING:
    from vocab_quiz.db import Database
    from vocab_quiz.providers.base import LexiconProvider

_log = logging.getLogger("vocab_quiz.distractors")

# Random words requested per missing slot
WORD_OVERSAMPLE = 2
DEFINITION_OVERSAMPLE = 3


def normalize(text: str) -> str:
    return text.strip().lower()


async def pick_definition(
    lexicon: LexiconProvider,
    word: str,
    part_of_speech: PartOfSpeech,
    rng: random.Random,
) -> str | None:
    """A random definition of *word* used as *part_of_speech*, or None.

    Lookup failures and entries without that part of speech give None.
    """
    try:
        entry = await lexicon.lookup(word)
    except LookupFailed as e:
        _log.info("  Skipping %r: %s", word, e)
        return None
    definitions = [
        d.definition
        for m in entry.meanings_for(part_of_speech)
        for d in m.definitions
        if d.definition.strip()
    ]
    if not definitions:
        _log.info("  Skipping %r: no %s sense", word, part_of_speech.value)
        return None
    return rng.choice(definitions)


async def fill_distractors(
    answers: list[Answer],
    exclude: set[str],
    remaining: int,
    db: Database,
    lexicon: LexiconProvider,
    rng: random.Random,
    part_of_speech: PartOfSpeech | None = None,
) -> list[Answer]:
    """Append up to *remaining* wrong answers to *answers* and return it.

    With *part_of_speech* set the distractors are definitions (of that part
    of speech) rather than words.  Falling short is accepted: the question
    simply has fewer answers.
    """
    if remaining <= 0:
        return answers

    # Local phase: a random share of the slots goes to the learner's own words
    local_limit = rng.randint(1, remaining)
    saved = db.find_words_excluding(exclude, local_limit, rng)
    for record in saved:
        key = normalize(record.word)
        if key in exclude:
            continue
        if part_of_speech is None:
            content = record.word
        else:
            content = await pick_definition(lexicon, record.word, part_of_speech, rng)
            if content is None or normalize(content) in exclude:
                continue
            exclude.add(normalize(content))
        exclude.add(key)
        answers.append(Answer(content=content, correct=False, word_uid=record.uid))
        remaining -= 1
    _log.info("  Local distractors: %d of %d requested", len(saved), local_limit)

    if remaining <= 0:
        return answers

    # External phase
    oversample = WORD_OVERSAMPLE if part_of_speech is None else DEFINITION_OVERSAMPLE
    try:
        candidates = await lexicon.random_words(oversample * remaining)
    except LookupFailed as e:
        _log.info("  Random word supply unavailable: %s", e)
        return answers

    for word in candidates:
        if remaining <= 0:
            break
        key = normalize(word)
        if not key or key in exclude:
            continue
        if part_of_speech is None:
            content = word
        else:
            content = await pick_definition(lexicon, word, part_of_speech, rng)
            if content is None or normalize(content) in exclude:
                continue
            exclude.add(normalize(content))
        exclude.add(key)
        answers.append(Answer(content=content, correct=False))
        remaining -= 1

    if remaining > 0:
        _log.info("  Question left %d answer slot(s) short", remaining)
    return answers
