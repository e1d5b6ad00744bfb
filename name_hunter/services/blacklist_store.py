"""Three-tier blacklist of rejected Name Hunter terms.

HARD is code-defined (plus explicit user hard blocks for the session) and is
never persisted. PHRASE and SOFT entries are written to ``app_settings`` as one
JSON blob on every change, before the call returns.
"""

from __future__ import annotations

import json
import logging
import time

from name_hunter.db import app_settings_store
from name_hunter.infra.config import BLACKLIST_REVIVAL_THRESHOLD
from name_hunter.models.blacklist import BlacklistEntry, BlacklistLevel
from name_hunter.models.term_candidate import TermCandidate

logger = logging.getLogger(__name__)

STORAGE_KEY = "namehunter_blacklist_v1"

HARD_BLACKLIST: frozenset[str] = frozenset({
    "Ha Ha", "Ha Ha Ha", "Haha", "Hắc Hắc", "A A", "Này Này",
    "Một Cái", "Tiên Sinh", "Lão Đệ", "Huynh Đài", "Chính Vụ", "Thế Nhưng",
    "Không Biết", "Trực Tiếp", "Thần Sắc", "Thực Sự", "Thiên Tử", "Không Thể", "Có Lẽ",
    "Kết Quả", "Tính Cách", "Thanh Âm", "Chiến Tranh", "Quân Sự",
    "Lợi Hại", "Phủ Đệ", "Tính Tình", "Biểu Tình",
    "Kế Sách", "Huống Chi", "Thất Phu", "Tướng Thành", "Tranh Phong",
})


def _now_ms() -> int:
    return int(time.time() * 1000)


class BlacklistStore:
    def __init__(
        self,
        revival_threshold: int = BLACKLIST_REVIVAL_THRESHOLD,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        self.revival_threshold = revival_threshold
        self.storage_key = storage_key
        self._hard_upper: set[str] = {t.upper() for t in HARD_BLACKLIST}
        self._phrase: dict[str, BlacklistEntry] = {}
        self._soft: dict[str, BlacklistEntry] = {}

    async def load(self) -> None:
        """Restore PHRASE/SOFT sets from storage. A malformed blob is logged and ignored."""
        raw = await app_settings_store.get_setting(self.storage_key)
        if not raw:
            return
        try:
            data = json.loads(raw)
            for term in data.get("phrase", []):
                self._phrase[term] = BlacklistEntry(
                    term=term, level=BlacklistLevel.PHRASE, timestamp=0,
                )
            for term, entry in data.get("soft", []):
                self._soft[term] = BlacklistEntry.model_validate(entry)
        except Exception:
            logger.error("Failed to load user blacklist", exc_info=True)
            return
        logger.info("Blacklist restored: %d phrase, %d soft",
                    len(self._phrase), len(self._soft))

    async def _save(self) -> None:
        data = {
            "phrase": list(self._phrase),
            "soft": [[term, entry.model_dump(mode="json")] for term, entry in self._soft.items()],
        }
        await app_settings_store.set_setting(
            self.storage_key, json.dumps(data, ensure_ascii=False),
        )

    def is_blocked(self, candidate: TermCandidate) -> bool:
        """Checks the display form plus the source and pre-enrichment forms, when present."""
        forms = (candidate.original, candidate.source_text, candidate.metadata.get("converted"))
        return any(form and self._is_term_blocked(form.strip(), candidate.count) for form in forms)

    def _is_term_blocked(self, term: str, count: int) -> bool:
        if term.upper() in self._hard_upper:
            return True
        if term in self._phrase:
            return True
        if term in self._soft and count < self.revival_threshold:
            return True
        return False

    async def add_to_blacklist(
        self, term: str, level: BlacklistLevel = BlacklistLevel.PHRASE,
    ) -> BlacklistEntry:
        normalized = term.strip()
        if not normalized:
            raise ValueError("Cannot blacklist an empty term")

        if level == BlacklistLevel.HARD:
            self._hard_upper.add(normalized.upper())
            logger.info("Blacklisted (HARD, session only): %s", normalized)
            return BlacklistEntry(term=normalized, level=level, timestamp=_now_ms())

        target = self._phrase if level == BlacklistLevel.PHRASE else self._soft
        existing = target.get(normalized)
        entry = BlacklistEntry(
            term=normalized,
            level=level,
            timestamp=_now_ms(),
            count=existing.count + 1 if existing else 1,
        )
        target[normalized] = entry
        await self._save()
        logger.info("Blacklisted (%s): %s", level.value, normalized)
        return entry

    async def remove_from_blacklist(self, term: str) -> bool:
        """Drop a PHRASE/SOFT entry. Returns False if the term was not user-blacklisted."""
        normalized = term.strip()
        removed = self._phrase.pop(normalized, None) or self._soft.pop(normalized, None)
        if removed is None:
            return False
        await self._save()
        return True

    def list_entries(self) -> list[BlacklistEntry]:
        """User PHRASE/SOFT entries, newest first."""
        entries = [*self._phrase.values(), *self._soft.values()]
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)
