"""Text resource loading and encoding detection utilities."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)


def detect_encoding(raw: bytes) -> str:
    """Detect text encoding by attempting decode in priority order.

    Tries UTF-8 first, then GB18030 (which is a superset of GBK/GB2312).
    Uses a sample that's trimmed to avoid splitting multi-byte characters.
    """
    sample = raw[:102400]

    try:
        sample.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    # GB18030 uses up to 4 bytes per character, so trim up to 3 bytes
    for trim in range(4):
        s = sample[: len(sample) - trim] if trim else sample
        if not s:
            continue
        try:
            s.decode("gb18030")
            return "gb18030"
        except UnicodeDecodeError:
            continue

    return "utf-8"


def decode_text(raw: bytes) -> str:
    """Decode raw bytes to string using detected encoding."""
    encoding = detect_encoding(raw)

    if encoding == "utf-8":
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            try:
                return raw.decode("gb18030")
            except UnicodeDecodeError:
                return raw.decode("utf-8", errors="replace")

    try:
        return raw.decode(encoding)
    except UnicodeDecodeError:
        return raw.decode(encoding, errors="replace")


async def fetch_text_resource(source: str, timeout: float = 120.0) -> str:
    """Read a dictionary resource from an http(s) URL or a local file path."""
    if source.startswith(("http://", "https://")):
        logger.info("Downloading resource from %s ...", source)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(source)
            resp.raise_for_status()
        return decode_text(resp.content)

    path = Path(source).expanduser()
    raw = await asyncio.to_thread(path.read_bytes)
    return decode_text(raw)


def iter_key_values(text: str):
    """Yield (key, raw_value) pairs from "key=value" lines, skipping blanks and junk."""
    for line in text.splitlines():
        if not line.strip():
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if key and value:
            yield key, value
