"""Name Hunter orchestrator: script detection, extraction, judging, enrichment, filtering."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from name_hunter.db import workspace_dictionary_store
from name_hunter.dictionaries.phrase_dictionary import PhraseDictionary
from name_hunter.dictionaries.syllable_repo import SyllableRepository
from name_hunter.extraction.ai_extractor import AiExtractor
from name_hunter.extraction.ai_refiner import AIRefiner
from name_hunter.extraction.judge import Judge
from name_hunter.extraction.morphological_extractor import MorphologicalExtractor
from name_hunter.extraction.regex_extractor import RegexExtractor
from name_hunter.infra.config import CJK_RATIO_THRESHOLD, PHRASE_SOURCE, SYLLABLE_SOURCE
from name_hunter.infra.llm_client import TextGenerator
from name_hunter.models.term_candidate import ScanOptions, TermCandidate, TermType
from name_hunter.services.blacklist_store import BlacklistStore
from name_hunter.utils.text_helpers import cjk_ratio, has_cjk

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class NameHunterService:
    """Runs one scan over a chapter and returns ranked, typed candidates.

    All collaborators are injected; ``llm`` is optional and only needed for
    AI mode and refinement.
    """

    def __init__(
        self,
        syllables: SyllableRepository,
        phrases: PhraseDictionary,
        blacklist: BlacklistStore,
        llm: TextGenerator | None = None,
        judge: Judge | None = None,
        morphological: MorphologicalExtractor | None = None,
        regex: RegexExtractor | None = None,
        cjk_threshold: float = CJK_RATIO_THRESHOLD,
    ) -> None:
        self.syllables = syllables
        self.phrases = phrases
        self.blacklist = blacklist
        self.judge = judge or Judge(syllables, blacklist)
        self.morphological = morphological or MorphologicalExtractor(syllables)
        self.regex = regex or RegexExtractor()
        self.refiner = AIRefiner(llm) if llm is not None else None
        self.ai_extractor = AiExtractor(llm) if llm is not None else None
        self.cjk_threshold = cjk_threshold

    async def ensure_ready(
        self,
        syllable_source: str = SYLLABLE_SOURCE,
        phrase_source: str = PHRASE_SOURCE,
    ) -> None:
        """Load both dictionaries and restore the user blacklist."""
        await asyncio.gather(
            self.syllables.load(syllable_source),
            self.phrases.load(phrase_source),
        )
        await self.blacklist.load()

    def is_source_script(self, text: str) -> bool:
        return cjk_ratio(text) > self.cjk_threshold

    async def scan(
        self,
        text: str,
        options: ScanOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[TermCandidate]:
        """Never raises: any failure is logged and yields an empty list."""
        options = options or ScanOptions()
        try:
            return await self._scan(text, options, on_progress)
        except Exception:
            logger.error("Name Hunter scan failed (mode=%s)", options.mode, exc_info=True)
            return []

    async def _scan(
        self,
        text: str,
        options: ScanOptions,
        on_progress: ProgressCallback | None,
    ) -> list[TermCandidate]:
        def progress(msg: str) -> None:
            if on_progress is not None:
                on_progress(msg)

        if not text or not text.strip():
            return []

        if options.mode == "ai":
            if self.ai_extractor is None:
                raise RuntimeError("AI mode requested but no LLM client is configured")
            candidates = await self.ai_extractor.extract(text, options.allowed_types, progress)
            candidates = self._enrich(candidates)
            allowed = set(options.allowed_types)
            candidates = [c for c in candidates if c.type in allowed]
        else:
            source_script = self.is_source_script(text)
            progress("Đang trích xuất ứng viên...")
            if source_script:
                raw = self.morphological.extract_candidates(text, options.custom_patterns)
            else:
                raw = self.regex.extract_candidates(text)
            logger.info(
                "Extracted %d raw candidates (%s script)",
                len(raw), "source" if source_script else "romanized",
            )

            progress(f"Đang phân loại {len(raw)} ứng viên...")
            candidates = self._judge_all(raw)
            candidates = self._enrich(candidates)
            # Enrichment can change the display form the user rejected
            candidates = [c for c in candidates if not self.blacklist.is_blocked(c)]
            allowed = set(options.allowed_types) | {TermType.UNKNOWN}
            candidates = [c for c in candidates if c.type in allowed]

        if options.workspace_id:
            known = await workspace_dictionary_store.get_known_terms(options.workspace_id)
            before = len(candidates)
            candidates = [c for c in candidates if not self._is_known(c, known)]
            logger.debug("Dropped %d candidates already in workspace %s",
                         before - len(candidates), options.workspace_id)

        result = self._dedupe_and_rank(candidates)
        progress(f"Hoàn tất: {len(result)} ứng viên")
        return result

    def _judge_all(self, raw: list[TermCandidate]) -> list[TermCandidate]:
        kept = junk = unknown = 0
        out: list[TermCandidate] = []
        for c in raw:
            verdict = self.judge.classify(c)
            if verdict.type == TermType.JUNK:
                junk += 1
                continue
            if verdict.type == TermType.UNKNOWN:
                unknown += 1
            else:
                kept += 1
            out.append(c.model_copy(update={"type": verdict.type, "confidence": verdict.score}))
        logger.info("Filtering stats: kept %d, junk %d, unknown %d", kept, junk, unknown)
        return out

    def _enrich(self, candidates: list[TermCandidate]) -> list[TermCandidate]:
        """Attach source forms and prefer their romanization as the display form."""
        for c in candidates:
            if self.phrases.has(c.original):
                c.metadata = {**c.metadata, "known_phrase": True}
            if not c.source_text:
                c.source_text = self.phrases.find_original(c.original)
            if not c.source_text:
                continue
            metadata = dict(c.metadata)
            metadata["source_text"] = c.source_text
            romanized = self.syllables.to_romanized(c.source_text)
            # Partially mapped readings would leave source chars in the display form
            if romanized and not has_cjk(romanized):
                if romanized.lower() != c.original.lower():
                    metadata["converted"] = c.original
                c.original = romanized
            c.metadata = metadata
        return candidates

    @staticmethod
    def _is_known(c: TermCandidate, known: set[str]) -> bool:
        forms = [c.original, c.source_text, c.metadata.get("converted")]
        return any(f and f.strip().lower() in known for f in forms)

    @staticmethod
    def _dedupe_and_rank(candidates: list[TermCandidate]) -> list[TermCandidate]:
        ranked = sorted(candidates, key=lambda c: (c.count, c.confidence), reverse=True)
        seen: dict[str, TermCandidate] = {}
        for c in ranked:
            existing = seen.get(c.key)
            if existing is not None:
                existing.count += c.count
            else:
                seen[c.key] = c
        return sorted(seen.values(), key=lambda c: (c.count, c.confidence), reverse=True)

    async def refine_unknown(
        self,
        candidates: list[TermCandidate],
        context_text: str = "",
        on_progress: ProgressCallback | None = None,
    ) -> list[TermCandidate]:
        """Send the Unknown subset to the AI refiner and merge results back in place."""
        if self.refiner is None:
            raise RuntimeError("Refinement requested but no LLM client is configured")

        unknown = [c for c in candidates if c.type == TermType.UNKNOWN]
        if not unknown:
            return candidates
        refined = await self.refiner.refine(unknown, context_text, on_progress)
        by_key = {c.key: c for c in refined}
        return [by_key.get(c.key, c) if c.type == TermType.UNKNOWN else c for c in candidates]
