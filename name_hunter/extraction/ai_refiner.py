"""LLM re-classification of low-confidence candidates, batch by batch.

A batch that times out or fails for any reason is returned unmodified, so
the output always has the same length and order as the input.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable

from name_hunter.extraction.prompts import build_refine_prompt
from name_hunter.infra.config import REFINE_BATCH_SIZE, REFINE_BATCH_TIMEOUT
from name_hunter.infra.llm_client import TextGenerator
from name_hunter.models.term_candidate import TermCandidate, TermType
from name_hunter.utils.json_recovery import parse_json_list

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

AI_CONFIDENCE = 100


class AIRefiner:
    def __init__(
        self,
        llm: TextGenerator,
        batch_size: int = REFINE_BATCH_SIZE,
        batch_timeout: float = REFINE_BATCH_TIMEOUT,
    ) -> None:
        self.llm = llm
        self.batch_size = batch_size
        self.batch_timeout = batch_timeout

    async def refine(
        self,
        candidates: list[TermCandidate],
        context_text: str = "",
        on_progress: ProgressCallback | None = None,
    ) -> list[TermCandidate]:
        if not candidates:
            return candidates

        total = math.ceil(len(candidates) / self.batch_size)
        logger.info("Refining %d candidates in %d batches", len(candidates), total)
        refined: list[TermCandidate] = []

        for i in range(total):
            batch = candidates[i * self.batch_size:(i + 1) * self.batch_size]

            def progress(msg: str, _i: int = i) -> None:
                if on_progress is not None:
                    on_progress(f"[Batch {_i + 1}/{total}] {msg}")

            try:
                result = await asyncio.wait_for(
                    self._refine_batch(batch, context_text, progress),
                    timeout=self.batch_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Refine batch %d/%d timed out (%.0fs), keeping it unrefined",
                    i + 1, total, self.batch_timeout,
                )
                result = batch
            except Exception:
                logger.warning(
                    "Refine batch %d/%d failed, keeping it unrefined",
                    i + 1, total, exc_info=True,
                )
                result = batch
            refined.extend(result)

        return refined

    async def _refine_batch(
        self,
        batch: list[TermCandidate],
        context_text: str,
        progress: ProgressCallback,
    ) -> list[TermCandidate]:
        progress(f"Đang soạn thảo danh sách {len(batch)} nhân vật...")
        system, prompt = build_refine_prompt(batch, context_text)

        progress("Đang kết nối AI...")
        content, usage = await self.llm.generate(system=system, prompt=prompt, temperature=0.1)
        logger.debug("Refine batch used %d tokens", usage.total_tokens)

        progress("Đang phân tích kết quả...")
        labels: dict[str, str] = {}
        for item in parse_json_list(content):
            original = str(item.get("original") or "").strip()
            if original:
                labels[original] = item.get("type")

        progress(f"Đã đồng bộ hóa {len(labels)} thực thể!")
        out: list[TermCandidate] = []
        for c in batch:
            key = c.original.strip()
            if key not in labels:
                out.append(c)
                continue
            term_type = TermType.parse(labels[key], default=c.type)
            out.append(c.model_copy(update={"type": term_type, "confidence": AI_CONFIDENCE}))
        return out
