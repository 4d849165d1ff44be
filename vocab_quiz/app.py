"""FastAPI application with all routes."""
from __future__ import annotations

import logging
import random
from dataclasses import asdict

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request

from vocab_quiz.config import Settings, load_settings, save_settings
from vocab_quiz.db import Database, StoreFailure
from vocab_quiz.models import Question, QuestionKind, Resolved, Retry, Skip, VocabRecord
from vocab_quiz.practice import PracticeSession
from vocab_quiz.providers.base import LexiconProvider, LookupFailed, WordNotFound

app = FastAPI(title="Vocab Quiz")

# Global state (initialized in startup)
_db: Database | None = None
_settings: Settings | None = None
_active_sessions: dict[int, PracticeSession] = {}  # session_id -> session


def get_db() -> Database:
    assert _db is not None
    return _db


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _get_lexicon() -> LexiconProvider:
    from vocab_quiz.providers.dictionary_api import DictionaryApiProvider

    s = get_settings()
    return DictionaryApiProvider(
        dictionary_url=s.dictionary_url,
        random_words_url=s.random_words_url,
        timeout=s.http_timeout,
    )


@app.on_event("startup")
async def startup():
    global _db, _settings
    if _db is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _db = Database(_settings.db_full_path)


@app.on_event("shutdown")
async def shutdown():
    if _db:
        _db.close()


def _record_payload(record: VocabRecord) -> dict:
    return {
        "uid": record.uid,
        "word": record.word,
        "score": record.score,
        "last_quizzed": record.last_quizzed.isoformat(),
    }


def _question_payload(session: PracticeSession, question: Question) -> dict:
    return {
        "session_id": session.session_id,
        "position": session.position + 1,
        "batch_size": len(session.records),
        "kind": question.kind.value,
        "prompt": question.prompt,
        "choices": [a.content for a in question.answers],
    }


def _summary_payload(session: PracticeSession) -> dict:
    return {
        "session_id": session.session_id,
        "session_complete": True,
        "total": session.total,
        "correct": session.correct,
        "skipped": session.skipped,
    }


async def _advance(session: PracticeSession) -> dict:
    question = await session.next_question()
    if question is None:
        _active_sessions.pop(session.session_id, None)
        return _summary_payload(session)
    return _question_payload(session, question)


# ── API: Stats ────────────────────────────────────────────────────────────

@app.get("/api/stats")
async def api_stats():
    try:
        return get_db().get_stats()
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


# ── API: Words ────────────────────────────────────────────────────────────

@app.get("/api/words")
async def api_words():
    try:
        records = get_db().get_all_words()
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [_record_payload(r) for r in records]


@app.get("/api/words/{word}")
async def api_define(word: str):
    """Look a word up; a repeat lookup of a saved word bumps its score."""
    db = get_db()
    try:
        entry = await _get_lexicon().lookup(word)
    except WordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LookupFailed as e:
        raise HTTPException(status_code=502, detail=str(e))
    try:
        saved = db.add_score(entry.word, get_settings().lookup_bonus)
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"entry": asdict(entry), "saved": saved}


@app.post("/api/words")
async def api_save_word(request: Request):
    body = await request.json() if await request.body() else {}
    word = str(body.get("word", "")).strip()
    if not word:
        raise HTTPException(status_code=400, detail="word is required")
    db = get_db()
    try:
        if db.get_word(word) is not None:
            raise HTTPException(status_code=409, detail=f"'{word}' is already saved")
        record = db.add_word(word, get_settings().initial_score)
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return _record_payload(record)


@app.delete("/api/words/{word}")
async def api_remove_word(word: str):
    try:
        removed = get_db().remove_word(word)
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail=f"'{word}' is not saved")
    return {"removed": word}


# ── API: Practice sessions ───────────────────────────────────────────────

@app.post("/api/session/start")
async def api_session_start(request: Request):
    body = await request.json() if await request.body() else {}
    s = get_settings()
    kind_name = body.get("kind")
    try:
        kind = QuestionKind(kind_name) if kind_name else None
    except ValueError:
        raise HTTPException(status_code=400, detail=f"unknown question kind: {kind_name}")
    try:
        count = int(body.get("count", s.batch_size))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"count must be an integer: {body.get('count')!r}")

    try:
        session = PracticeSession(
            get_db(), _get_lexicon(), s, rng=random.Random(), kind=kind, count=count,
        )
    except StoreFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    _active_sessions[session.session_id] = session
    return await _advance(session)


@app.post("/api/session/answer")
async def api_session_answer(request: Request):
    body = await request.json()
    session = _active_sessions.get(body.get("session_id"))
    if session is None or session.current is None:
        raise HTTPException(status_code=404, detail="Session not found")

    question = session.current
    result = session.submit(str(body.get("answer", "")))
    if isinstance(result, Retry):
        return {"status": "retry", "reason": result.reason, **_question_payload(session, question)}

    right = question.correct_answer()
    response = {
        "status": "skipped" if isinstance(result, Skip) else "answered",
        "correct": result.answer.correct if isinstance(result, Resolved) else None,
        "correct_answer": right.content if right else None,
        "score_updates": session.last_outcome["updates"] if session.last_outcome else [],
    }
    response["next"] = await _advance(session)
    return response


@app.get("/api/session/history")
async def api_session_history():
    return get_db().get_session_history()


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await request.json()
    s = get_settings()
    for key, value in body.items():
        if key in Settings.__dataclass_fields__:
            setattr(s, key, value)
    save_settings(s)
    return s.to_dict()
