"""User blacklist endpoints."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from name_hunter.api.routes.candidates import get_service
from name_hunter.models.blacklist import BlacklistEntry, BlacklistLevel

router = APIRouter(prefix="/api/name-hunter/blacklist", tags=["blacklist"])


class BlacklistRequest(BaseModel):
    term: str
    level: BlacklistLevel = BlacklistLevel.PHRASE


class BlacklistResponse(BaseModel):
    data: list[BlacklistEntry]
    total: int


@router.get("", response_model=BlacklistResponse)
async def list_blacklist(request: Request):
    entries = get_service(request).blacklist.list_entries()
    return BlacklistResponse(data=entries, total=len(entries))


@router.post("", response_model=BlacklistEntry)
async def add_blacklist(req: BlacklistRequest, request: Request):
    try:
        return await get_service(request).blacklist.add_to_blacklist(req.term, req.level)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{term}")
async def remove_blacklist(term: str, request: Request):
    removed = await get_service(request).blacklist.remove_from_blacklist(term)
    if not removed:
        raise HTTPException(status_code=404, detail="Term is not blacklisted")
    return {"ok": True}
