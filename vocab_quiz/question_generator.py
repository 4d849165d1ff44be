"""Build multiple-choice questions for a saved word from its lexical entry."""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from vocab_quiz.distractors import fill_distractors, normalize, pick_definition
from vocab_quiz.models import (
    Answer,
    Definition,
    LexicalEntry,
    Meaning,
    Question,
    QuestionKind,
    VocabRecord,
)

if TYPE_CHECKING:
    from vocab_quiz.db import Database
    from vocab_quiz.providers.base import LexiconProvider

_log = logging.getLogger("vocab_quiz.qgen")

ANSWER_COUNT = 4
ANTONYM_DISTRACTOR_PROBABILITY = 0.5


class Unsupported(Exception):
    """The lexical entry lacks the structure this kind of question needs."""


def pick_question_kind(rng: random.Random) -> QuestionKind:
    """Coin flip between the synonym/antonym family and definition -> word."""
    if rng.random() < 0.5:
        return rng.choice((QuestionKind.SYNONYM, QuestionKind.ANTONYM))
    return QuestionKind.DEFINITION_WORD


def _excluding(candidates: list[str], taken: set[str]) -> list[str]:
    return [c for c in candidates if c.strip() and normalize(c) not in taken]


def _saved_uid(db: Database, word: str) -> int | None:
    record = db.get_word(word)
    return record.uid if record else None


def _synonym_antonym_pairs(entry: LexicalEntry) -> list[tuple[Meaning, Definition]]:
    """(meaning, definition) pairs with a synonym and an antonym at either level."""
    return [
        (m, d)
        for m in entry.meanings
        for d in m.definitions
        if (d.synonyms or m.synonyms) and (d.antonyms or m.antonyms)
    ]


def _pick_sense(entry: LexicalEntry, rng: random.Random) -> tuple[Meaning, Definition]:
    meanings = [m for m in entry.meanings if m.definitions]
    if not meanings:
        raise Unsupported(f"'{entry.word}' has no definitions")
    meaning = rng.choice(meanings)
    return meaning, rng.choice(meaning.definitions)


async def _synonym_question(
    record: VocabRecord,
    entry: LexicalEntry,
    kind: QuestionKind,
    db: Database,
    lexicon: LexiconProvider,
    rng: random.Random,
    answer_count: int,
) -> Question:
    pairs = _synonym_antonym_pairs(entry)
    if not pairs:
        raise Unsupported(f"'{entry.word}' has no sense with both a synonym and an antonym")

    meanings = []
    for m, _ in pairs:
        if m not in meanings:
            meanings.append(m)
    meaning = rng.choice(meanings)
    definition = rng.choice([d for m, d in pairs if m is meaning])

    taken = {normalize(record.word), normalize(entry.word)}
    synonyms = _excluding(definition.synonyms + meaning.synonyms, taken)
    if not synonyms:
        raise Unsupported(f"'{entry.word}' only lists itself as a synonym")
    synonym = rng.choice(synonyms)
    taken.add(normalize(synonym))
    antonyms = _excluding(definition.antonyms + meaning.antonyms, taken)
    if not antonyms:
        raise Unsupported(f"'{entry.word}' has no antonym distinct from its synonyms")
    antonym = rng.choice(antonyms)

    if kind is QuestionKind.SYNONYM:
        right, wrong = synonym, antonym
    else:
        right, wrong = antonym, synonym
    answers = [
        Answer(content=right, correct=True, word_uid=_saved_uid(db, right)),
        Answer(content=wrong, correct=False, word_uid=_saved_uid(db, wrong)),
    ]

    exclude = {normalize(record.word), normalize(entry.word)}
    exclude.update(normalize(w) for w in entry.all_synonyms())
    exclude.update(normalize(w) for w in entry.all_antonyms())
    exclude.update(normalize(a.content) for a in answers)
    await fill_distractors(answers, exclude, answer_count - len(answers), db, lexicon, rng)

    relation = "synonym" if kind is QuestionKind.SYNONYM else "antonym"
    return Question(
        word_uid=record.uid,
        word=record.word,
        kind=kind,
        prompt=f"What is the {relation} of {record.word}?",
        answers=answers,
    )


async def _definition_word_question(
    record: VocabRecord,
    entry: LexicalEntry,
    db: Database,
    lexicon: LexiconProvider,
    rng: random.Random,
    answer_count: int,
    antonym_probability: float,
) -> Question:
    meaning, definition = _pick_sense(entry, rng)
    answers = [Answer(content=record.word, correct=True, word_uid=record.uid)]

    taken = {normalize(record.word), normalize(entry.word)}
    antonyms = _excluding(definition.antonyms, taken) or _excluding(meaning.antonyms, taken)
    if antonyms and rng.random() < antonym_probability:
        antonym = rng.choice(antonyms)
        answers.append(Answer(content=antonym, correct=False, word_uid=_saved_uid(db, antonym)))

    exclude = set(taken)
    exclude.update(normalize(w) for w in entry.all_synonyms())
    exclude.update(normalize(a.content) for a in answers)
    await fill_distractors(answers, exclude, answer_count - len(answers), db, lexicon, rng)

    return Question(
        word_uid=record.uid,
        word=record.word,
        kind=QuestionKind.DEFINITION_WORD,
        prompt=f'What word matches the following definition? "{definition.definition}"',
        answers=answers,
    )


async def _word_definition_question(
    record: VocabRecord,
    entry: LexicalEntry,
    db: Database,
    lexicon: LexiconProvider,
    rng: random.Random,
    answer_count: int,
) -> Question:
    meaning, definition = _pick_sense(entry, rng)
    answers = [Answer(content=definition.definition, correct=True)]

    # Every sense of the word would be a right answer, so none may be a distractor
    exclude = {normalize(record.word), normalize(entry.word)}
    exclude.update(normalize(t) for t in entry.all_definitions())
    exclude.update(normalize(w) for w in entry.all_synonyms())
    exclude.update(normalize(w) for w in entry.all_antonyms())

    antonyms = _excluding(definition.antonyms + meaning.antonyms, {normalize(record.word)})
    antonyms = list(dict.fromkeys(antonyms))
    rng.shuffle(antonyms)
    for antonym in antonyms:
        if len(answers) >= answer_count:
            break
        text = await pick_definition(lexicon, antonym, meaning.part_of_speech, rng)
        if text is None or normalize(text) in exclude:
            continue
        exclude.add(normalize(text))
        answers.append(Answer(content=text, correct=False, word_uid=_saved_uid(db, antonym)))

    await fill_distractors(
        answers, exclude, answer_count - len(answers), db, lexicon, rng,
        part_of_speech=meaning.part_of_speech,
    )

    return Question(
        word_uid=record.uid,
        word=record.word,
        kind=QuestionKind.WORD_DEFINITION,
        prompt=f"The definition of {record.word} is:",
        answers=answers,
    )


async def generate_question(
    record: VocabRecord,
    entry: LexicalEntry,
    db: Database,
    lexicon: LexiconProvider,
    rng: random.Random,
    kind: QuestionKind | None = None,
    answer_count: int = ANSWER_COUNT,
    antonym_probability: float = ANTONYM_DISTRACTOR_PROBABILITY,
) -> Question:
    """Generate one question testing *record*, answers already shuffled.

    If *kind* is None one is picked at random.  A synonym/antonym question
    that cannot be built falls back to definition -> word.  Raises
    Unsupported when no question can be built at all.
    """
    if kind is None:
        kind = pick_question_kind(rng)

    question: Question | None = None
    if kind in (QuestionKind.SYNONYM, QuestionKind.ANTONYM):
        try:
            question = await _synonym_question(record, entry, kind, db, lexicon, rng, answer_count)
        except Unsupported as e:
            _log.info("%s question unsupported (%s), falling back to definition", kind.value, e)
            kind = QuestionKind.DEFINITION_WORD

    if question is None and kind is QuestionKind.DEFINITION_WORD:
        question = await _definition_word_question(
            record, entry, db, lexicon, rng, answer_count, antonym_probability,
        )
    elif question is None:
        question = await _word_definition_question(record, entry, db, lexicon, rng, answer_count)

    rng.shuffle(question.answers)
    _log.info("Generated %s question for '%s' (%d answers)",
              question.kind.value, record.word, len(question.answers))
    return question
