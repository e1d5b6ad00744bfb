import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from name_hunter.api.routes import blacklist, candidates
from name_hunter.db.sqlite_db import init_db
from name_hunter.dictionaries.phrase_dictionary import PhraseDictionary
from name_hunter.dictionaries.syllable_repo import SyllableRepository
from name_hunter.infra.llm_client import get_llm_client
from name_hunter.services.blacklist_store import BlacklistStore
from name_hunter.services.name_hunter_service import NameHunterService

logger = logging.getLogger(__name__)


def build_service() -> NameHunterService:
    syllables = SyllableRepository()
    phrases = PhraseDictionary(syllables)
    blacklist_store = BlacklistStore()
    try:
        llm = get_llm_client()
    except ValueError:
        logger.warning("LLM client not configured, AI mode and refinement disabled", exc_info=True)
        llm = None
    return NameHunterService(syllables, phrases, blacklist_store, llm=llm)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    service = build_service()
    await service.ensure_ready()
    app.state.name_hunter = service
    yield


app = FastAPI(title="Name Hunter", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(candidates.router)
app.include_router(blacklist.router)


@app.get("/api/health")
async def health():
    from name_hunter.infra.config import LLM_PROVIDER, get_model_name

    service: NameHunterService | None = getattr(app.state, "name_hunter", None)
    return {
        "status": "ok",
        "llm_provider": LLM_PROVIDER,
        "llm_model": get_model_name(),
        "syllables": service.syllables.size if service else 0,
        "phrases": service.phrases.size if service else 0,
    }
