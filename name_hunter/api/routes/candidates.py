"""Scan and refine endpoints."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from name_hunter.models.term_candidate import ScanOptions, TermCandidate, TermType
from name_hunter.services.name_hunter_service import NameHunterService

router = APIRouter(prefix="/api/name-hunter", tags=["name-hunter"])


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class ScanRequest(BaseModel):
    text: str
    mode: str = Field(default="local", pattern="^(local|ai)$")
    allowed_types: list[TermType] | None = None
    custom_patterns: list[str] | None = None
    workspace_id: str | None = None


class RefineRequest(BaseModel):
    candidates: list[TermCandidate]
    context_text: str = ""


class CandidateListResponse(BaseModel):
    data: list[TermCandidate]
    total: int
    progress: list[str] = []


def get_service(request: Request) -> NameHunterService:
    service = getattr(request.app.state, "name_hunter", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Name Hunter is not ready")
    return service


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/scan", response_model=CandidateListResponse)
async def scan(req: ScanRequest, request: Request):
    """Scan chapter text. Failures inside the pipeline yield an empty list."""
    if not req.text.strip():
        raise HTTPException(status_code=400, detail="text must not be empty")

    service = get_service(request)
    options = ScanOptions(
        mode=req.mode,
        custom_patterns=req.custom_patterns,
        workspace_id=req.workspace_id,
    )
    if req.allowed_types is not None:
        options.allowed_types = req.allowed_types

    progress: list[str] = []
    candidates = await service.scan(req.text, options, on_progress=progress.append)
    return CandidateListResponse(data=candidates, total=len(candidates), progress=progress)


@router.post("/refine", response_model=CandidateListResponse)
async def refine(req: RefineRequest, request: Request):
    """Re-classify the Unknown candidates with the configured LLM."""
    service = get_service(request)
    if service.refiner is None:
        raise HTTPException(status_code=503, detail="No LLM client configured")

    progress: list[str] = []
    candidates = await service.refine_unknown(
        req.candidates, req.context_text, on_progress=progress.append,
    )
    return CandidateListResponse(data=candidates, total=len(candidates), progress=progress)
