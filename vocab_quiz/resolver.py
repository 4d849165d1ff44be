"""Map a learner's reply to one of the displayed answers.

A reply is either a 1-based number into the displayed list or free text that
is fuzzy-matched against every answer.
"""
from __future__ import annotations

from vocab_quiz.models import Answer, Resolution, Resolved, Retry, Skip

SKIP_TOKEN = "skip"
MATCH_THRESHOLD = 0.9
MATCH_MARGIN = 0.25

# Jaro-Winkler prefix bonus
WINKLER_SCALE = 0.1
WINKLER_MAX_PREFIX = 4


class AmbiguousInput(Exception):
    def __init__(self, best: float, runner_up: float):
        super().__init__(f"closest match {best:.2f}, next {runner_up:.2f}")
        self.best = best
        self.runner_up = runner_up


def similarity(a: str, b: str) -> float:
    """Jaro-Winkler similarity in [0, 1] that does not penalize transpositions.

    Characters match when equal and no further apart than half the longer
    string (minus one).  Matched characters out of order count in full, so
    "galdd" still scores high against "glad".
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    window = max(max(len(a), len(b)) // 2 - 1, 0)
    used = [False] * len(b)
    matches = 0
    for i, ch in enumerate(a):
        for j in range(max(0, i - window), min(len(b), i + window + 1)):
            if not used[j] and b[j] == ch:
                used[j] = True
                matches += 1
                break
    if matches == 0:
        return 0.0

    jaro = (matches / len(a) + matches / len(b) + 1.0) / 3

    prefix = 0
    for x, y in zip(a[:WINKLER_MAX_PREFIX], b[:WINKLER_MAX_PREFIX]):
        if x != y:
            break
        prefix += 1
    return jaro + prefix * WINKLER_SCALE * (1.0 - jaro)


def rank_answers(text: str, answers: list[Answer]) -> list[tuple[float, Answer]]:
    """Answers paired with their similarity to *text*, best first (stable on ties)."""
    needle = text.strip().lower()
    scored = [(similarity(needle, a.content.strip().lower()), a) for a in answers]
    return sorted(scored, key=lambda pair: pair[0], reverse=True)


def _fuzzy_match(
    text: str,
    answers: list[Answer],
    threshold: float,
    margin: float,
) -> Answer:
    needle = text.strip().lower()
    for a in answers:
        if a.content.strip().lower() == needle:
            return a

    ranked = rank_answers(text, answers)
    best, answer = ranked[0]
    runner_up = ranked[1][0] if len(ranked) > 1 else 0.0
    if best >= 1.0:
        return answer
    if best > threshold and best - runner_up > margin:
        return answer
    raise AmbiguousInput(best, runner_up)


def _parse_index(text: str) -> int | None:
    stripped = text.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        return None
    try:
        return int(stripped)
    except ValueError:  # beyond the int conversion digit limit
        return None


def resolve(
    raw: str,
    answers: list[Answer],
    skip_token: str = SKIP_TOKEN,
    threshold: float = MATCH_THRESHOLD,
    margin: float = MATCH_MARGIN,
) -> Resolution:
    """Resolve *raw* against the answers as displayed (already shuffled).

    Returns Skip for the skip token, Resolved for a valid index or a
    confident text match, and Retry otherwise.
    """
    text = (raw or "").strip()
    if not text:
        return Retry("empty answer")
    if text.lower() == skip_token.lower():
        return Skip()
    if not answers:
        return Retry("no answers to choose from")

    index = _parse_index(text)
    if index is not None and 1 <= index <= len(answers):
        return Resolved(answers[index - 1])

    try:
        return Resolved(_fuzzy_match(text, answers, threshold, margin))
    except AmbiguousInput as e:
        if index is not None:
            return Retry(f"choose a number between 1 and {len(answers)}")
        return Retry(f"could not tell which answer you meant ({e})")
