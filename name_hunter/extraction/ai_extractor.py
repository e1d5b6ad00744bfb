"""AI-only extraction: the LLM reads chapter text and returns typed entities."""

from __future__ import annotations

import logging
from collections.abc import Callable

from name_hunter.extraction.prompts import build_extraction_prompt
from name_hunter.infra.config import AI_EXTRACT_CHUNK_SIZE
from name_hunter.infra.llm_client import TextGenerator
from name_hunter.models.term_candidate import TermCandidate, TermType
from name_hunter.utils.json_recovery import parse_json_list
from name_hunter.utils.text_helpers import chunk_text

logger = logging.getLogger(__name__)


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


class AiExtractor:
    def __init__(self, llm: TextGenerator, chunk_size: int = AI_EXTRACT_CHUNK_SIZE) -> None:
        self.llm = llm
        self.chunk_size = chunk_size

    async def extract(
        self,
        text: str,
        allowed_types: list[TermType],
        on_progress: Callable[[str], None] | None = None,
    ) -> list[TermCandidate]:
        """Extract entities chunk by chunk and merge them by key, summing counts."""
        if not text.strip():
            return []

        chunks = chunk_text(text, self.chunk_size)
        if on_progress:
            on_progress(f"Bắt đầu trích xuất AI cho {len(chunks)} đoạn văn bản...")

        seen: dict[str, TermCandidate] = {}
        for i, chunk in enumerate(chunks):
            if on_progress:
                on_progress(f"Đang quét đoạn {i + 1}/{len(chunks)}...")
            try:
                found = await self._extract_chunk(chunk, allowed_types)
            except Exception:
                logger.error("AI extraction failed for chunk %d/%d", i + 1, len(chunks), exc_info=True)
                continue

            for cand in found:
                existing = seen.get(cand.key)
                if existing is not None:
                    existing.count += cand.count
                else:
                    seen[cand.key] = cand

        logger.info("AI extraction: %d entities from %d chunks", len(seen), len(chunks))
        return list(seen.values())

    async def _extract_chunk(
        self, chunk: str, allowed_types: list[TermType],
    ) -> list[TermCandidate]:
        system, prompt = build_extraction_prompt(chunk, allowed_types)
        content, _usage = await self.llm.generate(system=system, prompt=prompt, temperature=0.1)

        candidates: list[TermCandidate] = []
        for item in parse_json_list(content):
            chinese = _clean(item.get("chinese"))
            description = _clean(item.get("description"))
            original = _clean(item.get("original")) or chinese or description
            if not original:
                continue
            metadata = {"description": description} if description else {}
            candidates.append(TermCandidate(
                original=original,
                source_text=chinese or None,
                context=description,
                count=1,
                type=TermType.parse(item.get("type"), default=TermType.UNKNOWN),
                confidence=100,
                metadata=metadata,
            ))
        return candidates
