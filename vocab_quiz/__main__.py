"""CLI entry point for vocab-quiz.

Usage:
  python -m vocab_quiz define WORD
  python -m vocab_quiz remove WORD
  python -m vocab_quiz practice [--count N] [--kind KIND]
  python -m vocab_quiz words
  python -m vocab_quiz stats
  python -m vocab_quiz serve [--host HOST] [--port PORT]
"""
from __future__ import annotations

import asyncio
import random
import sys

from vocab_quiz.models import LexicalEntry, QuestionKind, Resolved, Retry, Skip

TRUE_WORDS = {"y", "yes", "yeah", "yea", "true", "on"}
FALSE_WORDS = {"n", "no", "nope", "false", "off"}


def main():
    args = sys.argv[1:]
    command = args[0] if args else "practice"

    if command in ("define", "find"):
        _define(" ".join(args[1:]))
    elif command == "remove":
        _remove(" ".join(args[1:]))
    elif command == "practice":
        _practice(args[1:])
    elif command == "words":
        _words()
    elif command == "stats":
        _stats()
    elif command == "serve":
        _serve(args[1:])
    else:
        print(f"Unknown command: {command}")
        print("Commands: define, remove, practice, words, stats, serve")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def str_to_bool(text: str) -> bool | None:
    value = text.strip().lower()
    if value in TRUE_WORDS:
        return True
    if value in FALSE_WORDS:
        return False
    return None


def _open():
    from vocab_quiz.config import load_settings
    from vocab_quiz.db import Database
    from vocab_quiz.providers.dictionary_api import DictionaryApiProvider

    settings = load_settings()
    db = Database(settings.db_full_path)
    lexicon = DictionaryApiProvider(
        dictionary_url=settings.dictionary_url,
        random_words_url=settings.random_words_url,
        timeout=settings.http_timeout,
    )
    return settings, db, lexicon


def format_entry(entry: LexicalEntry) -> str:
    lines = [f"Showing definition for '{entry.word}':"]
    for meaning in entry.meanings:
        lines.append(f"    {meaning.part_of_speech.value}:")
        for d in meaning.definitions:
            lines.append(f"        {d.definition}")
            if d.example:
                lines.append(f"          example: {d.example}")
            if d.synonyms:
                lines.append(f"          synonyms: {', '.join(d.synonyms)}")
            if d.antonyms:
                lines.append(f"          antonyms: {', '.join(d.antonyms)}")
        if meaning.synonyms:
            lines.append(f"      synonyms: {', '.join(meaning.synonyms)}")
        if meaning.antonyms:
            lines.append(f"      antonyms: {', '.join(meaning.antonyms)}")
    return "\n".join(lines)


def _define(word: str):
    from vocab_quiz.providers.base import LookupFailed, WordNotFound

    word = word.strip()
    if not word:
        print("Usage: define WORD")
        sys.exit(1)

    settings, db, lexicon = _open()
    try:
        entry = asyncio.run(lexicon.lookup(word))
    except WordNotFound:
        print("Couldn't find the word you were looking for.")
        db.close()
        return
    except LookupFailed as e:
        print(f"Encountered an error while searching for the word definition: {e}")
        db.close()
        return

    print(format_entry(entry))
    # Looking a saved word up again means it is not sticking yet
    if db.add_score(entry.word, settings.lookup_bonus):
        db.close()
        return
    reply = input("Would you like to practice this word? (Y/n): ")
    if str_to_bool(reply) or not reply.strip():
        record = db.add_word(entry.word, settings.initial_score)
        print(f"Saved '{record.word}' successfully.")
    db.close()


def _remove(word: str):
    from vocab_quiz.config import load_settings
    from vocab_quiz.db import Database

    settings = load_settings()
    db = Database(settings.db_full_path)
    if db.remove_word(word.strip()):
        print("Deleted the word successfully.")
    else:
        print("This word is not saved.")
    db.close()


async def _run_practice(session) -> None:
    shown = 0
    while True:
        question = await session.next_question()
        if question is None:
            break
        if shown:
            print("-" * 40)
        shown += 1
        print(question.prompt)
        for i, answer in enumerate(question.answers, 1):
            print(f"[{i}]: {answer.content}")

        while True:
            raw = input("Enter the number or text of your answer ('skip' to skip): ")
            result = session.submit(raw)
            if not isinstance(result, Retry):
                break
            print(f"  {result.reason.capitalize()}. Try again.")

        if isinstance(result, Skip):
            print("Skipped.")
        elif isinstance(result, Resolved) and result.answer.correct:
            print("The answer is correct. Well done!")
        else:
            right = question.correct_answer()
            print(f"The answer is incorrect. The right answer is {right.content if right else 'unknown'}.")

    if shown == 0:
        print("Nothing to practice. Save some words with 'define WORD' first.")
    else:
        print(f"\nRound over: {session.correct}/{session.total} correct, {session.skipped} skipped")


def _practice(args: list[str]):
    from vocab_quiz.practice import PracticeSession

    settings, db, lexicon = _open()
    count_text = _parse_flag(args, "--count", str(settings.batch_size))
    try:
        count = int(count_text)
    except ValueError:
        print(f"--count must be a whole number, got: {count_text}")
        db.close()
        sys.exit(1)
    kind_name = _parse_flag(args, "--kind", "")
    try:
        kind = QuestionKind(kind_name) if kind_name else None
    except ValueError:
        print(f"Unknown question kind: {kind_name}")
        print("Kinds: " + ", ".join(k.value for k in QuestionKind))
        db.close()
        sys.exit(1)

    session = PracticeSession(db, lexicon, settings, rng=random.Random(), kind=kind, count=count)
    try:
        asyncio.run(_run_practice(session))
    except (KeyboardInterrupt, EOFError):
        print("\nStopped.")
    finally:
        db.close()


def _words():
    from vocab_quiz.config import load_settings
    from vocab_quiz.db import Database

    settings = load_settings()
    db = Database(settings.db_full_path)
    records = db.get_all_words()
    if not records:
        print("No saved words.")
    for r in records:
        print(f"{r.word:24s} {r.score:5d}   last practiced {r.last_quizzed:%Y-%m-%d %H:%M}")
    db.close()


def _stats():
    from vocab_quiz.config import load_settings
    from vocab_quiz.db import Database

    settings = load_settings()
    db = Database(settings.db_full_path)
    stats = db.get_stats()

    print("Vocab Quiz Stats")
    print("=" * 40)
    print(f"Saved words:        {stats['total_words']}")
    print(f"Average score:      {stats['average_score']}")
    print(f"Sessions completed: {stats['total_sessions']}")
    print(f"Questions answered: {stats['total_questions_answered']}")
    print(f"Questions skipped:  {stats['total_skipped']}")
    print(f"Overall accuracy:   {stats['accuracy']}%")
    db.close()


def _serve(args: list[str]):
    import uvicorn

    port = int(_parse_flag(args, "--port", "8765"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    print(f"Starting Vocab Quiz on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    uvicorn.run(
        "vocab_quiz.app:app",
        host=host,
        port=port,
        reload=False,
        timeout_graceful_shutdown=5,
    )


if __name__ == "__main__":
    main()
