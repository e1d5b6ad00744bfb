"""Shared test fixtures for Name Hunter tests."""

import aiosqlite
import pytest
import pytest_asyncio

from unittest.mock import patch

from name_hunter.dictionaries.phrase_dictionary import PhraseDictionary
from name_hunter.dictionaries.syllable_repo import SyllableRepository
from name_hunter.services.blacklist_store import BlacklistStore

# Schema copied from name_hunter/db/sqlite_db.py (inline to avoid importing config)
_TEST_SCHEMA = """
CREATE TABLE IF NOT EXISTS app_settings (
    key             TEXT PRIMARY KEY,
    value           TEXT,
    updated_at      TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS dictionary (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    workspace_id    TEXT NOT NULL,
    original        TEXT NOT NULL,
    translated      TEXT NOT NULL,
    type            TEXT DEFAULT 'term',
    created_at      TEXT DEFAULT (datetime('now')),
    UNIQUE(workspace_id, original)
);
"""

SYLLABLE_LINES = [
    "林=lâm", "凡=phàm/phạm", "刘=lưu", "备=bị", "青=thanh", "云=vân,vấn", "宗=tông",
    "剑=kiếm", "城=thành", "洛=lạc", "阳=dương", "王=vương", "家=gia", "天=thiên",
    "下=hạ", "第=đệ", "一=nhất", "内=nội", "郭=quách", "嘉=gia", "诸=chư", "葛=cát",
    "亮=lượng", "牧=mục", "尘=trần", "师=sư", "兄=huynh", "太=thái", "平=bình",
    "风=phong", "火=hỏa", "人=nhân", "此=thử", "计=kế", "可=khả", "行=hành/hạnh",
    "笑=tiếu", "道=đạo", "先=tiên", "生=sinh",
]

PHRASE_LINES = [
    "天下=thiên hạ",
    "天下太平=thiên hạ thái bình",
    "林凡=Lâm Phàm",
    "青云宗=Thanh Vân Tông/Thanh Vân Môn",
]


@pytest.fixture
def syllables():
    repo = SyllableRepository()
    repo.seed(SYLLABLE_LINES)
    return repo


@pytest.fixture
def phrases(syllables):
    dictionary = PhraseDictionary(syllables)
    dictionary.seed(PHRASE_LINES)
    return dictionary


@pytest.fixture
def blacklist():
    return BlacklistStore()


@pytest_asyncio.fixture
async def memory_db():
    """Create an in-memory SQLite database with full schema."""
    conn = await aiosqlite.connect(":memory:")
    conn.row_factory = aiosqlite.Row
    await conn.executescript(_TEST_SCHEMA)
    await conn.commit()
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def mock_get_connection(memory_db):
    """Patch get_connection to return a shared in-memory DB.

    We wrap the real connection so close() is a no-op during tests
    (the fixture manages the lifecycle).
    """

    class _NonClosingConnection:
        """Proxy that prevents the stores from closing the shared conn."""

        def __init__(self, conn):
            self._conn = conn

        def __getattr__(self, name):
            return getattr(self._conn, name)

        async def close(self):
            pass  # no-op

    async def _factory():
        return _NonClosingConnection(memory_db)

    with patch("name_hunter.db.app_settings_store.get_connection", _factory), \
         patch("name_hunter.db.workspace_dictionary_store.get_connection", _factory):
        yield memory_db
