"""Tests for AIRefiner batching, timeouts and graceful degradation."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from name_hunter.extraction.ai_refiner import AIRefiner
from name_hunter.extraction.prompts import REFINE_CONTEXT_CHARS
from name_hunter.infra.llm_client import LLMError, LlmUsage
from name_hunter.models.term_candidate import TermCandidate, TermType


def _names_in(prompt):
    return [line[2:] for line in prompt.splitlines() if line.startswith("- ")]


def _label_all(label):
    async def _generate(system, prompt, **kwargs):
        payload = [{"original": n, "type": label} for n in _names_in(prompt)]
        return json.dumps(payload, ensure_ascii=False), LlmUsage()
    return _generate


def _candidates(n):
    return [TermCandidate(original=f"Nhân Vật {i}", count=1, confidence=40) for i in range(n)]


@pytest.mark.asyncio
async def test_failed_batch_is_returned_unchanged():
    calls = 0
    label = _label_all("Person")

    async def _generate(system, prompt, **kwargs):
        nonlocal calls
        calls += 1
        if calls == 2:
            raise LLMError("boom")
        return await label(system, prompt)

    llm = AsyncMock()
    llm.generate.side_effect = _generate
    candidates = _candidates(85)

    refined = await AIRefiner(llm).refine(candidates, "")

    assert len(refined) == 85
    assert [c.original for c in refined] == [c.original for c in candidates]
    assert all(c.type == TermType.PERSON and c.confidence == 100 for c in refined[:40])
    assert all(c.type == TermType.UNKNOWN and c.confidence == 40 for c in refined[40:80])
    assert all(c.type == TermType.PERSON for c in refined[80:])
    assert calls == 3


@pytest.mark.asyncio
async def test_timeout_does_not_propagate():
    async def _hang(system, prompt, **kwargs):
        await asyncio.sleep(10)

    llm = AsyncMock()
    llm.generate.side_effect = _hang
    progress = []
    candidates = _candidates(3)

    refined = await AIRefiner(llm, batch_timeout=0.05).refine(candidates, "", progress.append)

    assert refined == candidates
    assert progress and all(m.startswith("[Batch 1/1] ") for m in progress)


@pytest.mark.asyncio
async def test_unknown_labels_keep_type_but_mark_confidence():
    llm = AsyncMock()
    llm.generate.side_effect = _label_all("Character")

    refined = await AIRefiner(llm).refine(_candidates(2), "")

    assert all(c.type == TermType.UNKNOWN for c in refined)
    assert all(c.confidence == 100 for c in refined)


@pytest.mark.asyncio
async def test_candidates_missing_from_response_are_untouched():
    llm = AsyncMock()
    llm.generate.return_value = (
        '```json\n[{"original": "Nhân Vật 0", "type": "location"}]\n```', LlmUsage(),
    )

    refined = await AIRefiner(llm).refine(_candidates(2), "")

    assert refined[0].type == TermType.LOCATION
    assert refined[1].type == TermType.UNKNOWN
    assert refined[1].confidence == 40


@pytest.mark.asyncio
async def test_empty_input_makes_no_calls():
    llm = AsyncMock()
    assert await AIRefiner(llm).refine([], "") == []
    llm.generate.assert_not_called()


@pytest.mark.asyncio
async def test_context_is_quoted_and_bounded():
    llm = AsyncMock()
    llm.generate.side_effect = _label_all("Person")
    context = "Lâm Phàm rút kiếm. " + "x" * (REFINE_CONTEXT_CHARS * 2)

    await AIRefiner(llm).refine(_candidates(1), context)

    prompt = llm.generate.await_args.kwargs["prompt"]
    assert "Lâm Phàm rút kiếm." in prompt
    assert "x" * REFINE_CONTEXT_CHARS not in prompt
    assert _names_in(prompt) == ["Nhân Vật 0"]
