from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class UnknownPartOfSpeech(ValueError):
    def __init__(self, kind: str):
        super().__init__(f"unknown part of speech: {kind!r}")
        self.kind = kind


class PartOfSpeech(str, Enum):
    NOUN = "noun"
    PRONOUN = "pronoun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PREPOSITION = "preposition"
    CONJUNCTION = "conjunction"
    INTERJECTION = "interjection"

    @classmethod
    def parse(cls, value: str) -> PartOfSpeech:
        """Parse a lexicon part-of-speech label; unknown labels raise."""
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise UnknownPartOfSpeech(str(value)) from None


def _union(groups) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for group in groups:
        for item in group:
            if item not in seen:
                seen.add(item)
                result.append(item)
    return result


@dataclass(frozen=True)
class Definition:
    definition: str
    example: str | None = None
    synonyms: list[str] = field(default_factory=list)
    antonyms: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Meaning:
    part_of_speech: PartOfSpeech
    definitions: list[Definition]
    synonyms: list[str] = field(default_factory=list)
    antonyms: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LexicalEntry:
    word: str
    meanings: list[Meaning]
    phonetic: str | None = None
    origin: str | None = None

    def all_synonyms(self) -> list[str]:
        """Meaning- and definition-level synonyms, in order, without repeats."""
        groups = []
        for m in self.meanings:
            groups.append(m.synonyms)
            groups.extend(d.synonyms for d in m.definitions)
        return _union(groups)

    def all_antonyms(self) -> list[str]:
        groups = []
        for m in self.meanings:
            groups.append(m.antonyms)
            groups.extend(d.antonyms for d in m.definitions)
        return _union(groups)

    def all_definitions(self) -> list[str]:
        return _union([d.definition for d in m.definitions] for m in self.meanings)

    def meanings_for(self, part_of_speech: PartOfSpeech) -> list[Meaning]:
        return [m for m in self.meanings if m.part_of_speech is part_of_speech]


@dataclass
class VocabRecord:
    uid: int
    word: str
    score: int
    last_quizzed: datetime


@dataclass
class Answer:
    content: str
    correct: bool
    word_uid: int | None = None  # set when the text is itself a saved word


class QuestionKind(str, Enum):
    SYNONYM = "synonym"
    ANTONYM = "antonym"
    DEFINITION_WORD = "definition_word"
    WORD_DEFINITION = "word_definition"


@dataclass
class Question:
    word_uid: int
    word: str
    kind: QuestionKind
    prompt: str
    answers: list[Answer]

    def correct_answer(self) -> Answer | None:
        return next((a for a in self.answers if a.correct), None)


# ── Answer resolution outcomes ──────────────────────────────────────────


@dataclass(frozen=True)
class Resolved:
    answer: Answer


@dataclass(frozen=True)
class Retry:
    reason: str


@dataclass(frozen=True)
class Skip:
    pass


Resolution = Resolved | Retry | Skip
