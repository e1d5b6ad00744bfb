"""Gazetteer and heuristic tables, loaded from JSON so another setting can swap them."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class JudgeTables(BaseModel):
    """Romanized-side tables used by the Judge."""

    surnames: frozenset[str]
    stopwords: frozenset[str]
    abstract_nouns: frozenset[str]
    spatial_suffixes: frozenset[str]
    honorific_suffixes: frozenset[str]
    verb_heads: frozenset[str]
    superlative_suffix: str
    superlative_exempt_prefixes: tuple[str, ...]
    clan_suffixes: frozenset[str]
    known_persons: frozenset[str]  # surname-led names that are never a clan
    location_suffixes: tuple[str, ...]
    sect_suffixes: tuple[str, ...]
    skill_suffixes: tuple[str, ...]


class GoldGazetteer(BaseModel):
    """Curated fast-path of one fictional/historical setting."""

    name: str
    locations: frozenset[str] = frozenset()
    persons: frozenset[str] = frozenset()


class MorphologyTables(BaseModel):
    """Source-script tables used by the morphological extractor."""

    compound_surnames: frozenset[str]
    single_surnames: frozenset[str]
    prefixes: tuple[str, ...]
    common_titles: frozenset[str]
    harem_titles: frozenset[str]
    location_suffixes: tuple[str, ...]
    person_location_suffixes: frozenset[str]  # suffixes that stay Person (山, 峰, 岭)
    junk_tails: frozenset[str]
    speech_verbs: tuple[str, ...]
    default_patterns: tuple[str, ...]


def _read(path: Path, model: type[BaseModel]) -> BaseModel:
    logger.debug("Loading %s from %s", model.__name__, path)
    return model.model_validate_json(path.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def load_judge_tables(path: Path | None = None) -> JudgeTables:
    return _read(path or _DATA_DIR / "judge_tables.json", JudgeTables)


@lru_cache(maxsize=None)
def load_gold_gazetteer(path: Path | None = None) -> GoldGazetteer:
    """Load a gold gazetteer; defaults to the Three Kingdoms set."""
    return _read(path or _DATA_DIR / "three_kingdoms.json", GoldGazetteer)


@lru_cache(maxsize=None)
def load_morphology_tables(path: Path | None = None) -> MorphologyTables:
    return _read(path or _DATA_DIR / "morphology_zh.json", MorphologyTables)
