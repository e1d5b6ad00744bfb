"""Source-script candidate extraction for Chinese chapter text.

Phase 1: optional jieba POS tagging (nr/ns/nt/nz/n words).
Phase 2: heuristic scanners over the raw text (surname, prefix, title,
speech verb, custom templates) collected into a separate map.
Phase 3: heuristic candidates merged into the phase-1 map, counts carried.
Phase 4: near-duplicate substrings absorbed into their longer forms.
"""

from __future__ import annotations

import logging
import re

import jieba.posseg as pseg

from name_hunter.dictionaries.syllable_repo import SyllableRepository
from name_hunter.infra.config import USE_SEGMENTER
from name_hunter.models.gazetteer import MorphologyTables, load_morphology_tables
from name_hunter.models.term_candidate import TermCandidate, TermType
from name_hunter.utils.text_helpers import CJK_CHAR_CLASS, sample_context

logger = logging.getLogger(__name__)

_CJK = f"[{CJK_CHAR_CLASS}]"

# Confidence hints (0-1 scale) left by this extractor; the Judge rescales later
_CONF_SURNAME = 1.0
_CONF_TITLE = 0.9
_CONF_DEFAULT = 0.5


def _alternation(items) -> str:
    """Regex alternation, longest first so that 太上长老 wins over 长老."""
    return "|".join(re.escape(s) for s in sorted(items, key=len, reverse=True))


class MorphologicalExtractor:
    def __init__(
        self,
        syllables: SyllableRepository,
        tables: MorphologyTables | None = None,
        use_segmenter: bool = USE_SEGMENTER,
        custom_patterns: list[str] | None = None,
    ) -> None:
        self.syllables = syllables
        self.tables = tables or load_morphology_tables()
        self.use_segmenter = use_segmenter
        self.custom_patterns: list[str] = list(
            custom_patterns if custom_patterns is not None else self.tables.default_patterns
        )

        t = self.tables
        self._all_titles = t.common_titles | t.harem_titles
        # Compound surnames are tried before single ones at every position
        self._surname_re = re.compile(
            f"(?P<sur>{_alternation(t.compound_surnames)}|{_alternation(t.single_surnames)})"
            f"(?P<given>{_CJK}{{1,2}})"
        )
        self._prefix_res = [re.compile(f"{re.escape(p)}{_CJK}{{1,2}}") for p in t.prefixes]
        self._title_re = re.compile(f"({_CJK}{{1,3}})({_alternation(self._all_titles)})")
        # Lazy name so 林凡笑道 splits as 林凡|笑道, not 林凡笑|道
        self._speech_re = re.compile(
            f"({_CJK}{{2,3}}?)({_alternation(t.speech_verbs)})"
        )

    def set_custom_patterns(self, patterns: list[str]) -> None:
        self.custom_patterns = list(patterns)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def extract_candidates(
        self, text: str, custom_patterns: list[str] | None = None,
    ) -> list[TermCandidate]:
        candidates: dict[str, TermCandidate] = {}

        if self.use_segmenter:
            self._extract_by_segmenter(text, candidates)

        heuristic: dict[str, TermCandidate] = {}
        self._extract_by_surname(text, heuristic)
        self._extract_by_prefix(text, heuristic)
        self._extract_by_title(text, heuristic)
        self._extract_by_speech_verbs(text, heuristic)
        patterns = custom_patterns if custom_patterns is not None else self.custom_patterns
        self._extract_by_custom_patterns(text, patterns, heuristic)

        for key, h in heuristic.items():
            existing = candidates.get(key)
            if existing is None:
                candidates[key] = h
                continue
            existing.count += h.count
            if h.type == TermType.LOCATION:
                existing.type = TermType.LOCATION
            elif existing.type == TermType.UNKNOWN:
                existing.type = h.type
            existing.confidence = max(existing.confidence, h.confidence)

        result = self._cleanup(list(candidates.values()))
        for c in result:
            c.context = sample_context(c.source_text, text)
        logger.debug(
            "Morphological scan: %d segmenter+heuristic keys, %d after cleanup",
            len(candidates), len(result),
        )
        return result

    # ------------------------------------------------------------------
    # Scanners
    # ------------------------------------------------------------------

    def _extract_by_segmenter(self, text: str, found: dict[str, TermCandidate]) -> None:
        try:
            for word, flag in pseg.cut(text):
                if flag.startswith("nr"):
                    term_type = TermType.PERSON
                elif flag.startswith("ns"):
                    term_type = TermType.LOCATION
                elif flag.startswith("nt"):
                    term_type = TermType.ORGANIZATION
                elif flag in ("n", "nz"):
                    term_type = TermType.UNKNOWN
                else:
                    continue
                self._add_or_update(word, found, term_type)
        except Exception:
            logger.error("jieba segmentation failed, continuing with heuristics", exc_info=True)

    def _trim_given_name(self, text: str, given: str, end: int) -> str:
        """Drop trailing chars that are junk tails or open a speech verb (诸葛亮|笑道)."""
        t = self.tables
        while given and (
            given[-1] in t.junk_tails
            or any(text.startswith(v, end - 1) for v in t.speech_verbs)
        ):
            given = given[:-1]
            end -= 1
        return given

    def _extract_by_surname(self, text: str, found: dict[str, TermCandidate]) -> None:
        pos = 0
        while True:
            m = self._surname_re.search(text, pos)
            if m is None:
                break
            given = self._trim_given_name(text, m.group("given"), m.end())
            if given:
                self._add_or_update(m.group("sur") + given, found, TermType.PERSON)
                pos = m.start("given") + len(given)
            else:
                pos = m.end()

    def _extract_by_prefix(self, text: str, found: dict[str, TermCandidate]) -> None:
        for pattern in self._prefix_res:
            for m in pattern.finditer(text):
                self._add_or_update(m.group(), found, TermType.PERSON)

    def _extract_by_title(self, text: str, found: dict[str, TermCandidate]) -> None:
        for m in self._title_re.finditer(text):
            name, title = m.group(1), m.group(2)
            # Harem ranks (妃, 贵人...) are common words; require a 2+ char name
            if title in self.tables.harem_titles and len(name) < 2:
                continue
            self._add_or_update(m.group(), found, TermType.PERSON)

    def _extract_by_speech_verbs(self, text: str, found: dict[str, TermCandidate]) -> None:
        for m in self._speech_re.finditer(text):
            self._add_or_update(m.group(1), found, TermType.PERSON)

    def _extract_by_custom_patterns(
        self, text: str, patterns: list[str], found: dict[str, TermCandidate],
    ) -> None:
        for p in patterns:
            if "{0}" not in p:
                logger.warning("Ignoring custom pattern without {0} placeholder: %r", p)
                continue
            regex = re.compile(f"({_CJK}{{1,3}})".join(re.escape(part) for part in p.split("{0}")))
            for m in regex.finditer(text):
                self._add_or_update(m.group(), found)

    # ------------------------------------------------------------------
    # Merge rules
    # ------------------------------------------------------------------

    def _has_surname(self, text: str) -> bool:
        return text[0] in self.tables.single_surnames or text[:2] in self.tables.compound_surnames

    def _is_junk(self, text: str, confirmed_person: bool = False) -> bool:
        if confirmed_person:
            return False
        if len(text) < 2:
            return True
        return text[-1] in self.tables.junk_tails

    def _add_or_update(
        self,
        text: str,
        found: dict[str, TermCandidate],
        term_type: TermType = TermType.UNKNOWN,
        count: int = 1,
    ) -> None:
        # Surname-led 2-3 char spans are people, whatever else matched them
        if 2 <= len(text) <= 3 and self._has_surname(text):
            self._finish_add_or_update(text, found, TermType.PERSON, _CONF_SURNAME, count)
            return

        if self._is_junk(text, term_type == TermType.PERSON):
            return

        confidence = _CONF_DEFAULT
        if len(text) >= 2:
            for suffix in self.tables.location_suffixes:
                if text.endswith(suffix):
                    if not (term_type == TermType.PERSON and suffix in self.tables.person_location_suffixes):
                        term_type = TermType.LOCATION
                    break

        if term_type in (TermType.UNKNOWN, TermType.PERSON):
            if any(text.endswith(title) for title in self._all_titles):
                term_type = TermType.PERSON
                confidence = _CONF_TITLE

        self._finish_add_or_update(text, found, term_type, confidence, count)

    def _finish_add_or_update(
        self,
        text: str,
        found: dict[str, TermCandidate],
        term_type: TermType,
        confidence: float,
        count: int,
    ) -> None:
        existing = found.get(text)
        if existing is None:
            found[text] = TermCandidate(
                original=self.syllables.to_romanized(text),
                source_text=text,
                count=count,
                type=term_type,
                confidence=confidence,
            )
            return
        existing.count += count
        if existing.type == TermType.UNKNOWN:
            existing.type = term_type
        elif existing.type == TermType.PERSON and term_type == TermType.LOCATION:
            existing.type = TermType.LOCATION
        existing.confidence = max(existing.confidence, confidence)

    def _cleanup(self, candidates: list[TermCandidate]) -> list[TermCandidate]:
        """Absorb a shorter candidate into a kept one that is at most 1 char longer.

        A 2-char Person led by a single-char surname is always kept standalone.
        """
        candidates.sort(key=lambda c: len(c.source_text), reverse=True)
        result: list[TermCandidate] = []

        for a in candidates:
            if (
                a.type == TermType.PERSON
                and len(a.source_text) == 2
                and a.source_text[0] in self.tables.single_surnames
            ):
                result.append(a)
                continue

            for b in result:
                if (
                    a.source_text in b.source_text
                    and b.count >= a.count
                    and len(b.source_text) <= len(a.source_text) + 1
                ):
                    b.count += a.count
                    break
            else:
                result.append(a)

        result.sort(key=lambda c: c.count, reverse=True)
        return result
