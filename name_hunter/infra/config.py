import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(os.environ.get("NAME_HUNTER_DATA_DIR", Path.home() / ".name-hunter"))
DB_PATH = DATA_DIR / "data.db"

# Dictionary resources: http(s) URL or local file path, "key=value[/alt...]" per line
SYLLABLE_SOURCE = os.environ.get("NAME_HUNTER_SYLLABLE_SOURCE", str(DATA_DIR / "ChinesePhienAmWords.txt"))
PHRASE_SOURCE = os.environ.get("NAME_HUNTER_PHRASE_SOURCE", str(DATA_DIR / "VietPhrase.txt"))

OLLAMA_BASE_URL = os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.environ.get("OLLAMA_MODEL", "qwen3:8b")

# LLM Provider: "ollama" (default, local) or "openai" (cloud, OpenAI-compatible)
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "ollama")

# Cloud LLM settings (used when LLM_PROVIDER="openai")
LLM_API_KEY = os.environ.get("LLM_API_KEY", "")
LLM_BASE_URL = os.environ.get("LLM_BASE_URL", "")
LLM_MODEL = os.environ.get("LLM_MODEL", "")
LLM_MAX_TOKENS = int(os.environ.get("LLM_MAX_TOKENS", "2048"))

# AI refinement: candidates per request and per-batch wall clock limit (seconds)
REFINE_BATCH_SIZE = int(os.environ.get("NAME_HUNTER_REFINE_BATCH_SIZE", "40"))
REFINE_BATCH_TIMEOUT = float(os.environ.get("NAME_HUNTER_REFINE_BATCH_TIMEOUT", "60"))

# AI extraction mode: characters of raw text per request
AI_EXTRACT_CHUNK_SIZE = int(os.environ.get("NAME_HUNTER_AI_CHUNK_SIZE", "4000"))

# Soft-blacklisted terms seen at least this often are let through again
BLACKLIST_REVIVAL_THRESHOLD = int(os.environ.get("NAME_HUNTER_REVIVAL_THRESHOLD", "50"))

# Share of CJK characters (over non-whitespace) above which text is treated as source script
CJK_RATIO_THRESHOLD = float(os.environ.get("NAME_HUNTER_CJK_RATIO", "0.2"))

# jieba POS tagging before the heuristic scanners
USE_SEGMENTER = os.environ.get("NAME_HUNTER_USE_SEGMENTER", "1") not in ("0", "false", "False", "")


def get_model_name() -> str:
    """Return the active model name based on current provider."""
    if LLM_PROVIDER == "openai":
        return LLM_MODEL or "unknown"
    return OLLAMA_MODEL


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
