"""Character -> Han-Viet syllable table: transliteration and syllable validity."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable

from name_hunter.utils.text_helpers import capitalize_first
from name_hunter.utils.text_processor import fetch_text_resource, iter_key_values

logger = logging.getLogger(__name__)

_ALT_SPLIT = re.compile(r"[,/]")


class SyllableRepository:
    """Loaded once, read-only afterwards.

    A failed load leaves the repository empty; every lookup then reports
    "not found" instead of raising.
    """

    def __init__(self) -> None:
        self._syllables: dict[str, str] = {}
        self._valid: set[str] = set()
        self._load_task: asyncio.Task | None = None

    @property
    def size(self) -> int:
        return len(self._syllables)

    @property
    def loaded(self) -> bool:
        return bool(self._syllables)

    async def load(self, source: str) -> None:
        """Fetch and parse the table. Concurrent callers share one in-flight load."""
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load(source))
        await self._load_task

    async def _load(self, source: str) -> None:
        try:
            text = await fetch_text_resource(source)
        except Exception:
            logger.error("Syllable table load failed: %s", source, exc_info=True)
            return
        self.seed(text.splitlines())
        logger.info(
            "Syllable table loaded: %d chars, %d syllables from %s",
            len(self._syllables), len(self._valid), source,
        )

    def seed(self, lines: Iterable[str]) -> None:
        """Add "char=syl1/syl2,..." lines directly (offline use, tests)."""
        for char, value in iter_key_values("\n".join(lines)):
            alternatives = [s.strip() for s in _ALT_SPLIT.split(value) if s.strip()]
            if not alternatives:
                continue
            self._syllables[char] = alternatives[0]
            self._valid.update(s.lower() for s in alternatives)

    def get(self, char: str) -> str | None:
        return self._syllables.get(char)

    def is_valid_syllable(self, token: str) -> bool:
        return token.lower() in self._valid

    def is_valid_term(self, phrase: str) -> bool:
        """True iff every whitespace-separated token is a known syllable."""
        tokens = phrase.split()
        return bool(tokens) and all(self.is_valid_syllable(t) for t in tokens)

    def to_romanized(self, source_text: str) -> str:
        """Syllable-by-syllable Han-Viet reading; unmapped characters pass through."""
        parts = []
        for ch in source_text:
            syllable = self._syllables.get(ch)
            parts.append(capitalize_first(syllable) if syllable else ch)
        return " ".join(parts)
