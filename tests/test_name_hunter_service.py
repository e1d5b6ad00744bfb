"""Tests for the NameHunterService orchestrator."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from name_hunter.extraction.morphological_extractor import MorphologicalExtractor
from name_hunter.infra.llm_client import LlmUsage
from name_hunter.models.blacklist import BlacklistLevel
from name_hunter.models.term_candidate import ScanOptions, TermCandidate, TermType
from name_hunter.services.name_hunter_service import NameHunterService

ROMANIZED_TEXT = "Lâm Phàm cười. Lâm Phàm nói. Thanh Vân Tông rất mạnh."


def _service(syllables, phrases, blacklist, llm=None):
    return NameHunterService(
        syllables,
        phrases,
        blacklist,
        llm=llm,
        morphological=MorphologicalExtractor(syllables, use_segmenter=False),
    )


@pytest.fixture
def service(syllables, phrases, blacklist):
    return _service(syllables, phrases, blacklist)


def test_script_detection(service):
    assert service.is_source_script("诸葛亮笑道：‘此计可行。’")
    assert not service.is_source_script(ROMANIZED_TEXT)
    assert not service.is_source_script("Lâm Phàm nói: 好 rồi đi thôi nào các bạn.")


@pytest.mark.asyncio
async def test_source_script_scan(service):
    result = await service.scan("诸葛亮笑道：‘此计可行。’")

    assert len(result) == 1
    assert result[0].source_text == "诸葛亮"
    assert result[0].type == TermType.PERSON
    assert result[0].count == 2
    assert result[0].metadata["source_text"] == "诸葛亮"


@pytest.mark.asyncio
async def test_romanized_scan_judges_enriches_and_ranks(service):
    progress = []
    result = await service.scan(ROMANIZED_TEXT, on_progress=progress.append)

    assert [c.original for c in result] == ["Lâm Phàm", "Thanh Vân Tông"]
    lam, sect = result
    assert lam.count == 2
    assert lam.type == TermType.UNKNOWN
    assert lam.source_text == "林凡"
    assert sect.type == TermType.ORGANIZATION
    assert sect.confidence == 90
    assert sect.source_text == "青云宗"
    assert progress


@pytest.mark.asyncio
async def test_allowed_types_keep_unknown_in_local_mode(service):
    options = ScanOptions(allowed_types=[TermType.PERSON])
    result = await service.scan(ROMANIZED_TEXT, options)
    assert [c.original for c in result] == ["Lâm Phàm"]


@pytest.mark.asyncio
async def test_workspace_terms_are_dropped(service, mock_get_connection):
    await mock_get_connection.execute(
        "INSERT INTO dictionary (workspace_id, original, translated) VALUES (?, ?, ?)",
        ("ws-1", "林凡", "Lâm Phàm"),
    )
    await mock_get_connection.commit()

    result = await service.scan(ROMANIZED_TEXT, ScanOptions(workspace_id="ws-1"))
    assert [c.original for c in result] == ["Thanh Vân Tông"]

    result = await service.scan(ROMANIZED_TEXT, ScanOptions(workspace_id="ws-2"))
    assert len(result) == 2


@pytest.mark.asyncio
async def test_scan_never_raises(service):
    service.judge = MagicMock()
    service.judge.classify.side_effect = RuntimeError("broken table")

    assert await service.scan(ROMANIZED_TEXT) == []
    assert await service.scan("   ") == []


@pytest.mark.asyncio
async def test_ai_mode_without_llm_returns_empty(service):
    assert await service.scan(ROMANIZED_TEXT, ScanOptions(mode="ai")) == []


@pytest.mark.asyncio
async def test_ai_mode_bypasses_judge(syllables, phrases, blacklist):
    llm = AsyncMock()
    llm.generate.return_value = (json.dumps([
        {"original": "Lưu Bị", "chinese": "刘备", "type": "Person", "description": "Chúa Thục"},
        {"original": "Ha Ha", "type": "Skill"},
    ], ensure_ascii=False), LlmUsage())
    service = _service(syllables, phrases, blacklist, llm=llm)
    service.judge = MagicMock()

    result = await service.scan("刘备来了", ScanOptions(mode="ai", allowed_types=[TermType.PERSON]))

    service.judge.classify.assert_not_called()
    assert len(result) == 1
    assert result[0].original == "Lưu Bị"
    assert result[0].confidence == 100
    assert result[0].metadata == {"description": "Chúa Thục", "source_text": "刘备"}


@pytest.mark.asyncio
async def test_enrichment_prefers_romanized_source_form(service, phrases):
    phrases.insert("林凡", "Lâm Phạm")
    result = await service.scan("Lâm Phạm cười. Lâm Phạm nói.")

    assert result[0].original == "Lâm Phàm"
    assert result[0].metadata["converted"] == "Lâm Phạm"


@pytest.mark.asyncio
async def test_source_surname_survives_judging(service):
    result = await service.scan("林凡笑道：此计可行。林凡说")

    assert [(c.source_text, c.type, c.count) for c in result] == [("林凡", TermType.PERSON, 4)]
    assert result[0].original == "Lâm Phàm"
    assert result[0].metadata["known_phrase"] is True


@pytest.mark.asyncio
async def test_rejecting_enriched_display_form_blocks_rescan(
    service, phrases, blacklist, mock_get_connection,
):
    phrases.insert("林凡", "Lâm Phạm")
    text = "Lâm Phạm cười. Lâm Phạm nói."
    assert [c.original for c in await service.scan(text)] == ["Lâm Phàm"]

    await blacklist.add_to_blacklist("Lâm Phàm", BlacklistLevel.PHRASE)

    assert await service.scan(text) == []


@pytest.mark.asyncio
async def test_refine_unknown_merges_back(syllables, phrases, blacklist):
    llm = AsyncMock()
    llm.generate.return_value = ('[{"original": "Lâm Phàm", "type": "Person"}]', LlmUsage())
    service = _service(syllables, phrases, blacklist, llm=llm)
    candidates = [
        TermCandidate(original="Lâm Phàm", count=2, type=TermType.UNKNOWN, confidence=60),
        TermCandidate(original="Thanh Vân Tông", type=TermType.ORGANIZATION, confidence=90),
    ]

    result = await service.refine_unknown(candidates, ROMANIZED_TEXT)

    assert [(c.original, c.type) for c in result] == [
        ("Lâm Phàm", TermType.PERSON),
        ("Thanh Vân Tông", TermType.ORGANIZATION),
    ]
    assert llm.generate.await_count == 1


@pytest.mark.asyncio
async def test_refine_unknown_requires_llm(service):
    with pytest.raises(RuntimeError):
        await service.refine_unknown([TermCandidate(original="Lâm Phàm")])


@pytest.mark.asyncio
async def test_ensure_ready_loads_everything(tmp_path, blacklist, mock_get_connection):
    from name_hunter.dictionaries.phrase_dictionary import PhraseDictionary
    from name_hunter.dictionaries.syllable_repo import SyllableRepository

    syl_path = tmp_path / "syllables.txt"
    syl_path.write_text("林=lâm\n凡=phàm\n", encoding="utf-8")
    phrase_path = tmp_path / "phrases.txt"
    phrase_path.write_text("林凡=Lâm Phàm\n", encoding="utf-8")

    syllables = SyllableRepository()
    phrases = PhraseDictionary(syllables)
    service = _service(syllables, phrases, blacklist)
    await service.ensure_ready(str(syl_path), str(phrase_path))

    assert syllables.size == 2
    assert phrases.find_original("Lâm Phàm") == "林凡"
