"""Capitalized-phrase extractor for already romanized text.

Lowest precision, highest recall: every maximal run of capitalized words
("Lâm Phàm", "Thiên Đạo Tông") becomes a candidate, counted by exact string.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter

from name_hunter.models.term_candidate import TermCandidate, TermType
from name_hunter.utils.text_helpers import sample_context

# Letters only: \w minus digits and underscore
_WORD = re.compile(r"[^\W\d_]+")
_SENTENCE_END = set(".!?…。！？:：\"“”'‘’")


class RegexExtractor:
    def __init__(self, ignore_sentence_starts: bool = False) -> None:
        self.ignore_sentence_starts = ignore_sentence_starts

    def extract_candidates(self, text: str) -> list[TermCandidate]:
        text = unicodedata.normalize("NFC", text)
        counts: Counter[str] = Counter()
        for phrase, start in self._capitalized_phrases(text):
            if self.ignore_sentence_starts and " " not in phrase and self._is_sentence_start(text, start):
                continue
            counts[phrase] += 1

        candidates = [
            TermCandidate(
                original=phrase,
                context=sample_context(phrase, text),
                count=count,
                type=TermType.UNKNOWN,
                confidence=50,
            )
            for phrase, count in counts.items()
        ]
        candidates.sort(key=lambda c: c.count, reverse=True)
        return candidates

    @staticmethod
    def _capitalized_phrases(text: str) -> list[tuple[str, int]]:
        """Maximal runs of whitespace-separated words starting with an uppercase letter."""
        phrases: list[tuple[str, int]] = []
        run: list[str] = []
        run_start = 0
        prev_end = -1
        for m in _WORD.finditer(text):
            word = m.group()
            joined = run and prev_end < m.start() and text[prev_end:m.start()].isspace()
            if word[0].isupper():
                if run and joined:
                    run.append(word)
                else:
                    if run:
                        phrases.append((" ".join(run), run_start))
                    run = [word]
                    run_start = m.start()
            elif run:
                phrases.append((" ".join(run), run_start))
                run = []
            prev_end = m.end()
        if run:
            phrases.append((" ".join(run), run_start))
        return phrases

    @staticmethod
    def _is_sentence_start(text: str, start: int) -> bool:
        before = text[:start].rstrip()
        return not before or before[-1] in _SENTENCE_END
