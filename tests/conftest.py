"""Shared test fixtures."""
from __future__ import annotations

import random

import pytest

from vocab_quiz.db import Database
from vocab_quiz.models import Definition, LexicalEntry, Meaning, PartOfSpeech
from vocab_quiz.providers.base import LookupFailed, WordNotFound


class FakeLexicon:
    """In-memory lexicon: known entries, a fixed random-word pool, scripted failures."""

    def __init__(self, entries=None, random_pool=None, failing=(), random_fails=False):
        self.entries = {e.word: e for e in (entries or [])}
        self.random_pool = list(random_pool or [])
        self.failing = set(failing)
        self.random_fails = random_fails
        self.lookups: list[str] = []
        self.random_requests: list[int] = []

    async def lookup(self, word: str) -> LexicalEntry:
        self.lookups.append(word)
        if word in self.failing:
            raise LookupFailed(word, "connection reset")
        if word not in self.entries:
            raise WordNotFound(word, "No Definitions Found")
        return self.entries[word]

    async def random_words(self, count: int, length: int | None = None) -> list[str]:
        self.random_requests.append(count)
        if self.random_fails:
            raise LookupFailed(f"<{count} random words>", "service unavailable")
        return self.random_pool[:count]

    def name(self) -> str:
        return "fake-lexicon"


class MaxRandom(random.Random):
    """Seeded RNG whose randint always takes the upper bound."""

    def randint(self, a, b):
        return b


class MinRandom(random.Random):
    """Seeded RNG whose randint always takes the lower bound."""

    def randint(self, a, b):
        return a


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def happy_entry():
    """'happy' with one adjective sense: synonym 'glad', antonym 'sad'."""
    return LexicalEntry(
        word="happy",
        meanings=[
            Meaning(
                part_of_speech=PartOfSpeech.ADJECTIVE,
                definitions=[
                    Definition(
                        "Feeling or showing pleasure or contentment.",
                        example="A happy smile.",
                    ),
                ],
                synonyms=["glad"],
                antonyms=["sad"],
            ),
        ],
    )


@pytest.fixture
def sad_entry():
    return LexicalEntry(
        word="sad",
        meanings=[
            Meaning(
                part_of_speech=PartOfSpeech.ADJECTIVE,
                definitions=[Definition("Feeling sorrow; unhappy.")],
                synonyms=["unhappy"],
                antonyms=["happy"],
            ),
        ],
    )


@pytest.fixture
def tree_entry():
    """An entry with definitions but no synonyms or antonyms."""
    return LexicalEntry(
        word="tree",
        meanings=[
            Meaning(
                part_of_speech=PartOfSpeech.NOUN,
                definitions=[
                    Definition("A tall perennial woody plant."),
                    Definition("A branching diagram."),
                ],
            ),
        ],
    )


@pytest.fixture
def word_entries():
    """Plain noun entries for definition distractors."""
    return [
        LexicalEntry("lamp", [Meaning(PartOfSpeech.NOUN, [Definition("A device for giving light.")])]),
        LexicalEntry("river", [Meaning(PartOfSpeech.NOUN, [Definition("A large natural stream of water.")])]),
        LexicalEntry("quickly", [Meaning(PartOfSpeech.ADVERB, [Definition("At a fast speed.")])]),
        LexicalEntry("bright", [Meaning(PartOfSpeech.ADJECTIVE, [Definition("Giving out much light.")])]),
        LexicalEntry("calm", [Meaning(PartOfSpeech.ADJECTIVE, [Definition("Not showing nervousness.")])]),
    ]


@pytest.fixture
def make_lexicon():
    return FakeLexicon


@pytest.fixture
def max_rng():
    return MaxRandom(7)


@pytest.fixture
def min_rng():
    return MinRandom(7)


@pytest.fixture
def populated_db(tmp_db):
    """'happy' plus three unrelated saved words."""
    for word in ("happy", "lamp", "river", "quiet"):
        tmp_db.add_word(word, 500)
    return tmp_db
