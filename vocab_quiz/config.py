from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "db_path": "vocabulary.db",
    "batch_size": 4,
    "answer_count": 4,
    "initial_score": 500,
    "lookup_bonus": 5,
    "antonym_distractor_probability": 0.5,
    "match_threshold": 0.9,
    "match_margin": 0.25,
    "skip_token": "skip",
    "dictionary_url": "https://api.dictionaryapi.dev/api/v2/entries/en/",
    "random_words_url": "https://random-word-api.vercel.app/api",
    "http_timeout": 10.0,
}


@dataclass
class Settings:
    db_path: str = DEFAULTS["db_path"]
    batch_size: int = DEFAULTS["batch_size"]
    answer_count: int = DEFAULTS["answer_count"]
    initial_score: int = DEFAULTS["initial_score"]
    lookup_bonus: int = DEFAULTS["lookup_bonus"]
    antonym_distractor_probability: float = DEFAULTS["antonym_distractor_probability"]
    match_threshold: float = DEFAULTS["match_threshold"]
    match_margin: float = DEFAULTS["match_margin"]
    skip_token: str = DEFAULTS["skip_token"]
    dictionary_url: str = DEFAULTS["dictionary_url"]
    random_words_url: str = DEFAULTS["random_words_url"]
    http_timeout: float = DEFAULTS["http_timeout"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
