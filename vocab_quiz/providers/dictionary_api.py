"""Lexicon backed by dictionaryapi.dev and random-word-api."""
from __future__ import annotations

import logging
import time
from urllib.parse import quote

import httpx

from vocab_quiz.models import (
    Definition,
    LexicalEntry,
    Meaning,
    PartOfSpeech,
    UnknownPartOfSpeech,
)
from vocab_quiz.providers.base import LexiconProvider, LookupFailed, WordNotFound

log = logging.getLogger("vocab_quiz.lexicon")

DICTIONARY_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/"
RANDOM_WORDS_URL = "https://random-word-api.vercel.app/api"


def _strings(values) -> list[str]:
    return [v for v in (values or []) if isinstance(v, str) and v.strip()]


def parse_entry(data: dict) -> LexicalEntry:
    """Convert one dictionaryapi.dev entry object into a LexicalEntry.

    Raises UnknownPartOfSpeech for labels outside the closed set and
    KeyError/TypeError for structurally broken payloads.
    """
    meanings = []
    for m in data["meanings"]:
        definitions = [
            Definition(
                definition=d["definition"],
                example=d.get("example") or None,
                synonyms=_strings(d.get("synonyms")),
                antonyms=_strings(d.get("antonyms")),
            )
            for d in m["definitions"]
        ]
        meanings.append(Meaning(
            part_of_speech=PartOfSpeech.parse(m["partOfSpeech"]),
            definitions=definitions,
            synonyms=_strings(m.get("synonyms")),
            antonyms=_strings(m.get("antonyms")),
        ))
    return LexicalEntry(
        word=data["word"],
        meanings=meanings,
        phonetic=data.get("phonetic") or None,
        origin=data.get("origin") or None,
    )


class DictionaryApiProvider(LexiconProvider):
    def __init__(
        self,
        dictionary_url: str = DICTIONARY_URL,
        random_words_url: str = RANDOM_WORDS_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.dictionary_url = dictionary_url.rstrip("/") + "/"
        self.random_words_url = random_words_url
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def lookup(self, word: str) -> LexicalEntry:
        url = f"{self.dictionary_url}{quote(word.strip())}"
        t0 = time.monotonic()
        try:
            async with self._client() as client:
                resp = await client.get(url)
        except httpx.HTTPError as e:
            raise LookupFailed(word, str(e) or type(e).__name__) from e

        if resp.status_code == 404:
            raise WordNotFound(word, _error_message(resp))
        try:
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPStatusError, ValueError) as e:
            raise LookupFailed(word, str(e)) from e

        # The API answers misses with an error object instead of a list
        if isinstance(data, dict):
            raise WordNotFound(word, data.get("message", ""))
        if not isinstance(data, list) or not data:
            raise WordNotFound(word, "empty response")

        try:
            entry = parse_entry(data[-1])
        except UnknownPartOfSpeech as e:
            raise LookupFailed(word, str(e)) from e
        except (KeyError, TypeError) as e:
            raise LookupFailed(word, f"malformed entry ({e!r})") from e

        log.info("Lookup %r (%.2fs, %d meanings)", word, time.monotonic() - t0, len(entry.meanings))
        return entry

    async def random_words(self, count: int, length: int | None = None) -> list[str]:
        if count <= 0:
            return []
        params: dict[str, int] = {"words": count}
        if length is not None:
            params["length"] = length
        try:
            async with self._client() as client:
                resp = await client.get(self.random_words_url, params=params)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LookupFailed(f"<{count} random words>", str(e)) from e

        if not isinstance(data, list):
            raise LookupFailed(f"<{count} random words>", "expected a JSON list")
        words = _strings(data)
        log.info("Random words: requested %d, got %d", count, len(words))
        return words

    def name(self) -> str:
        return "dictionaryapi.dev"


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.reason_phrase
    if isinstance(data, dict):
        return data.get("message", "") or data.get("title", "")
    return ""
