"""Deterministic scoring of romanized candidates into a type and a 0-100 score."""

from __future__ import annotations

import re

from name_hunter.dictionaries.syllable_repo import SyllableRepository
from name_hunter.models.gazetteer import (
    GoldGazetteer,
    JudgeTables,
    MorphologyTables,
    load_gold_gazetteer,
    load_judge_tables,
    load_morphology_tables,
)
from name_hunter.models.term_candidate import ClassificationResult, TermCandidate, TermType
from name_hunter.services.blacklist_store import BlacklistStore

_TRAILING_UPPER = re.compile(r"[A-Z]$")

BASE_SCORE = 50


def _junk() -> ClassificationResult:
    return ClassificationResult(type=TermType.JUNK, score=0)


def _result(term_type: TermType, score: int) -> ClassificationResult:
    return ClassificationResult(type=term_type, score=max(0, min(score, 100)))


class Judge:
    """Classifies candidates using frequency, lexical rules and gazetteers.

    Rule order matters: hard rejects, then gold gazetteer, then frequency and
    surname scoring, then suffix heuristics. The first decisive rule wins.
    """

    def __init__(
        self,
        syllables: SyllableRepository,
        blacklist: BlacklistStore,
        tables: JudgeTables | None = None,
        gold: GoldGazetteer | None = None,
        morphology: MorphologyTables | None = None,
    ) -> None:
        self.syllables = syllables
        self.blacklist = blacklist
        self.tables = tables or load_judge_tables()
        self.gold = gold or load_gold_gazetteer()
        self.morphology = morphology or load_morphology_tables()

    def classify(self, candidate: TermCandidate) -> ClassificationResult:
        t = self.tables
        text = candidate.original.strip()
        words = text.split()
        if not words:
            return _junk()

        # 1. Hard rejects
        if self._is_repetitive(words):
            return _junk()
        if _TRAILING_UPPER.search(text):
            return _junk()
        if self._is_stopword(text):
            return _junk()
        if self.blacklist.is_blocked(candidate):
            return _junk()
        if text in t.abstract_nouns:
            return _junk()
        if words[0] in t.verb_heads:
            return _junk()
        if text.endswith(t.superlative_suffix) and not text.startswith(t.superlative_exempt_prefixes):
            return _junk()
        if not self.syllables.is_valid_term(text):
            return _junk()

        if len(words) >= 2:
            last_word = words[-1]
            last_two = f"{words[-2]} {words[-1]}"
            for suffixes in (t.spatial_suffixes, t.honorific_suffixes):
                if last_word in suffixes or last_two in suffixes:
                    return _junk()

        # 2. Gold gazetteer
        if text in self.gold.locations:
            return _result(TermType.LOCATION, 100)
        if text in self.gold.persons:
            return _result(TermType.PERSON, 100)

        # 3. Frequency; a single occurrence nets -50
        score = BASE_SCORE
        if candidate.count >= 10:
            score += 30
        if candidate.count <= 3:
            score -= 20
        if candidate.count == 1:
            score -= 30

        # 4. Surname
        if text in t.known_persons:
            return _result(TermType.PERSON, 100)
        has_surname = (
            words[0] in t.surnames
            or (len(words) >= 2 and f"{words[0]} {words[1]}" in t.surnames)
            or self._has_source_surname(candidate.source_text)
        )
        if has_surname:
            score += 40
            if words[-1] in t.clan_suffixes:
                return _result(TermType.ORGANIZATION, 90)
            return _result(TermType.PERSON, score)

        # 5. Suffix heuristics
        heuristic_type = self._match_suffixes(text)
        if heuristic_type is not None:
            return _result(heuristic_type, 90)

        if len(words) >= 2 and all(w[0].isupper() for w in words):
            score += 30

        # 6. Final decision; high scores without a surname are left for the AI
        if score < 30:
            return _result(TermType.JUNK, score)
        return _result(TermType.UNKNOWN, score)

    def should_ignore(self, text: str) -> bool:
        """Cheap pre-filter: stopword or trailing uppercase letter."""
        text = text.strip()
        return self._is_stopword(text) or bool(_TRAILING_UPPER.search(text))

    def _has_source_surname(self, source_text: str | None) -> bool:
        """Source forms carry the surname even when its reading is not in the romanized list."""
        if not source_text:
            return False
        m = self.morphology
        return source_text[:2] in m.compound_surnames or source_text[0] in m.single_surnames

    @staticmethod
    def _is_repetitive(words: list[str]) -> bool:
        if len(words) < 2:
            return False
        first = words[0].lower()
        return all(w.lower() == first for w in words)

    def _is_stopword(self, text: str) -> bool:
        if text in self.tables.stopwords:
            return True
        title_case = text[:1].upper() + text[1:].lower()
        return title_case in self.tables.stopwords

    def _match_suffixes(self, text: str) -> TermType | None:
        t = self.tables
        for term_type, suffixes in (
            (TermType.LOCATION, t.location_suffixes),
            (TermType.ORGANIZATION, t.sect_suffixes),
            (TermType.SKILL, t.skill_suffixes),
        ):
            if any(text == s or text.endswith(" " + s) for s in suffixes):
                return term_type
        return None
