"""Small text helpers shared by the extractors and the orchestrator."""

from __future__ import annotations

# CJK Unified Ideographs, the source-script range scanned by the extractors
CJK_CHAR_CLASS = r"\u4e00-\u9fa5"


def is_cjk(ch: str) -> bool:
    return "\u4e00" <= ch <= "\u9fff"


def has_cjk(text: str) -> bool:
    """Check if text contains any CJK Unified Ideograph characters."""
    return any(is_cjk(ch) for ch in text)


def cjk_ratio(text: str) -> float:
    """Share of CJK characters among the non-whitespace characters of text."""
    visible = [ch for ch in text if not ch.isspace()]
    if not visible:
        return 0.0
    return sum(1 for ch in visible if is_cjk(ch)) / len(visible)


def capitalize_first(word: str) -> str:
    """Upper-case the first letter only; str.capitalize() would lower the rest."""
    if not word:
        return word
    return word[0].upper() + word[1:]


def capitalize_words(phrase: str) -> str:
    # Split on spaces rather than \b: Vietnamese diacritics break word boundaries
    return " ".join(capitalize_first(w) for w in phrase.split(" "))


def sample_context(name: str, text: str, context_len: int = 25) -> str:
    """Extract a snippet around the first occurrence of name, or "" if absent."""
    idx = text.find(name)
    if idx < 0:
        return ""
    start = max(0, idx - context_len)
    end = min(len(text), idx + len(name) + context_len)
    return text[start:end].replace("\n", " ").strip()


def chunk_text(text: str, size: int) -> list[str]:
    """Split text into consecutive fixed-size slices."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [text[i:i + size] for i in range(0, len(text), size)]
