"""Tests for AI-only extraction mode."""

import json
from unittest.mock import AsyncMock

import pytest

from name_hunter.extraction.ai_extractor import AiExtractor
from name_hunter.infra.llm_client import LlmUsage
from name_hunter.models.term_candidate import TermType

ALL_TYPES = [TermType.PERSON, TermType.LOCATION, TermType.ORGANIZATION, TermType.SKILL]


def _response(items):
    return json.dumps(items, ensure_ascii=False), LlmUsage()


@pytest.mark.asyncio
async def test_chunks_are_merged_by_key():
    llm = AsyncMock()
    llm.generate.return_value = _response([
        {"original": "Lưu Bị", "chinese": "刘备", "type": "Person", "description": "Chúa Thục"},
    ])

    result = await AiExtractor(llm, chunk_size=10).extract("刘备" * 12, ALL_TYPES)

    assert llm.generate.await_count == 3
    assert len(result) == 1
    assert result[0].source_text == "刘备"
    assert result[0].count == 3
    assert result[0].confidence == 100
    assert result[0].context == "Chúa Thục"
    assert result[0].metadata["description"] == "Chúa Thục"


@pytest.mark.asyncio
async def test_failing_chunk_is_skipped():
    llm = AsyncMock()
    llm.generate.side_effect = [
        RuntimeError("provider down"),
        _response([{"original": "Lạc Dương", "type": "Location"}]),
    ]
    progress = []

    result = await AiExtractor(llm, chunk_size=5).extract("洛阳洛阳洛阳", ALL_TYPES, progress.append)

    assert [c.original for c in result] == ["Lạc Dương"]
    assert result[0].type == TermType.LOCATION
    assert any("2/2" in m for m in progress)


@pytest.mark.asyncio
async def test_field_fallbacks_and_unknown_types():
    llm = AsyncMock()
    llm.generate.return_value = _response([
        {"chinese": "青云宗", "type": "Sect"},
        {"original": "", "chinese": "", "description": ""},
        {"original": "Thái Cực Quyền", "type": "skill"},
    ])

    result = await AiExtractor(llm).extract("青云宗 太极拳", ALL_TYPES)
    by_name = {c.original: c for c in result}

    assert set(by_name) == {"青云宗", "Thái Cực Quyền"}
    assert by_name["青云宗"].type == TermType.UNKNOWN
    assert by_name["Thái Cực Quyền"].type == TermType.SKILL
    assert by_name["Thái Cực Quyền"].source_text is None


@pytest.mark.asyncio
async def test_blank_text_makes_no_calls():
    llm = AsyncMock()
    assert await AiExtractor(llm).extract("   ", ALL_TYPES) == []
    llm.generate.assert_not_called()
