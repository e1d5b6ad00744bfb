"""VietPhrase table: source phrase -> target phrase, with longest-match conversion.

The trie is stored as an arena: node ``i`` owns ``_children[i]`` (char -> node id)
and ``_values[i]`` (target phrase or None). Node 0 is the root.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from name_hunter.dictionaries.syllable_repo import SyllableRepository
from name_hunter.utils.text_helpers import capitalize_words
from name_hunter.utils.text_processor import fetch_text_resource, iter_key_values

logger = logging.getLogger(__name__)


class PhraseDictionary:
    def __init__(self, syllables: SyllableRepository | None = None) -> None:
        self.syllables = syllables
        self._children: list[dict[str, int]] = [{}]
        self._values: list[str | None] = [None]
        self._targets: set[str] = set()
        self._reverse: dict[str, str] = {}
        self._count = 0
        self._load_task: asyncio.Task | None = None

    @property
    def size(self) -> int:
        return self._count

    @property
    def loaded(self) -> bool:
        return self._count > 0

    async def load(self, source: str) -> None:
        """Fetch and parse the phrase table. Concurrent callers share one in-flight load."""
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load(source))
        await self._load_task

    async def _load(self, source: str) -> None:
        try:
            text = await fetch_text_resource(source)
        except Exception:
            logger.error("Phrase table load failed: %s", source, exc_info=True)
            return
        self.seed(text.splitlines())
        logger.info("Phrase table loaded: %d phrases, %d trie nodes from %s",
                    self._count, len(self._values), source)

    def seed(self, lines: Iterable[str]) -> None:
        """Add "source=target[/alt]" lines directly (offline use, tests)."""
        for key, value in iter_key_values("\n".join(lines)):
            target = value.split("/")[0].strip()
            if target:
                self.insert(key, target)

    def insert(self, source: str, target: str) -> None:
        """Map source -> target; an existing mapping for the same source is overwritten."""
        node = 0
        for ch in source:
            child = self._children[node].get(ch)
            if child is None:
                child = len(self._values)
                self._children.append({})
                self._values.append(None)
                self._children[node][ch] = child
            node = child
        if self._values[node] is None:
            self._count += 1
        self._values[node] = target
        lowered = target.lower()
        self._targets.add(lowered)
        self._reverse[lowered] = source

    def has(self, phrase: str) -> bool:
        return phrase.lower() in self._targets

    def find_original(self, phrase: str) -> str | None:
        """Reverse lookup: source phrase for a known target phrase."""
        return self._reverse.get(phrase.lower().strip())

    def _longest_match(self, text: str, start: int) -> tuple[int, str | None]:
        """Return (end, value) of the longest dictionary entry starting at ``start``."""
        node = 0
        best_end, best_value = start, None
        for j in range(start, len(text)):
            node = self._children[node].get(text[j], -1)
            if node < 0:
                break
            value = self._values[node]
            if value is not None:
                best_end, best_value = j + 1, value
        return best_end, best_value

    def convert(self, source_text: str) -> str:
        """Forward maximum matching into space-separated, capitalized target words."""
        parts: list[str] = []
        i = 0
        n = len(source_text)
        while i < n:
            end, value = self._longest_match(source_text, i)
            if value is not None:
                parts.append(" " + capitalize_words(value) + " ")
                i = end
                continue
            ch = source_text[i]
            syllable = self.syllables.get(ch) if self.syllables else None
            if syllable:
                parts.append(" " + capitalize_words(syllable) + " ")
            else:
                parts.append(ch)
            i += 1
        return " ".join("".join(parts).split())
