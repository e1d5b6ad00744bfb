"""Tests for the Name Hunter HTTP routes, called directly."""

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from name_hunter.api.routes.blacklist import (
    BlacklistRequest,
    add_blacklist,
    list_blacklist,
    remove_blacklist,
)
from name_hunter.api.routes.candidates import RefineRequest, ScanRequest, refine, scan
from name_hunter.extraction.morphological_extractor import MorphologicalExtractor
from name_hunter.models.blacklist import BlacklistLevel
from name_hunter.models.term_candidate import TermCandidate
from name_hunter.services.name_hunter_service import NameHunterService


@pytest.fixture
def request_with_service(syllables, phrases, blacklist):
    service = NameHunterService(
        syllables, phrases, blacklist,
        morphological=MorphologicalExtractor(syllables, use_segmenter=False),
    )
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(name_hunter=service)))


@pytest.mark.asyncio
async def test_scan_route(request_with_service):
    resp = await scan(ScanRequest(text="Lâm Phàm cười. Lâm Phàm nói."), request_with_service)
    assert resp.total == 1
    assert resp.data[0].original == "Lâm Phàm"
    assert resp.progress


@pytest.mark.asyncio
async def test_scan_route_rejects_blank_text(request_with_service):
    with pytest.raises(HTTPException) as exc:
        await scan(ScanRequest(text="  "), request_with_service)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_routes_report_not_ready():
    req = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
    with pytest.raises(HTTPException) as exc:
        await scan(ScanRequest(text="Lâm Phàm"), req)
    assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_refine_route_without_llm(request_with_service):
    body = RefineRequest(candidates=[TermCandidate(original="Lâm Phàm")])
    with pytest.raises(HTTPException) as exc:
        await refine(body, request_with_service)
    assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_blacklist_routes(request_with_service, mock_get_connection):
    entry = await add_blacklist(BlacklistRequest(term="Thanh Vân"), request_with_service)
    assert entry.level == BlacklistLevel.PHRASE

    listed = await list_blacklist(request_with_service)
    assert listed.total == 1

    assert await remove_blacklist("Thanh Vân", request_with_service) == {"ok": True}
    with pytest.raises(HTTPException) as exc:
        await remove_blacklist("Thanh Vân", request_with_service)
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        await add_blacklist(BlacklistRequest(term=" "), request_with_service)
    assert exc.value.status_code == 400
