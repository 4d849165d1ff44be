from __future__ import annotations

from abc import ABC, abstractmethod

from vocab_quiz.models import LexicalEntry


class LookupFailed(Exception):
    """A lexicon request did not produce a usable result."""

    def __init__(self, word: str, reason: str = ""):
        self.word = word
        self.reason = reason
        msg = f"lookup of {word!r} failed"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class WordNotFound(LookupFailed):
    pass


class LexiconProvider(ABC):
    @abstractmethod
    async def lookup(self, word: str) -> LexicalEntry:
        """Return the lexical entry for *word*.

        Raises WordNotFound when the dictionary has no entry and
        LookupFailed for transport or payload problems.
        """

    @abstractmethod
    async def random_words(self, count: int, length: int | None = None) -> list[str]:
        """Best-effort batch of random dictionary words (may be shorter than *count*)."""

    @abstractmethod
    def name(self) -> str:
        ...
