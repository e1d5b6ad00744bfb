"""Blacklist entry model for rejected Name Hunter terms."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class BlacklistLevel(str, Enum):
    HARD = "HARD"  # absolute noise, built-in or explicit user hard block
    PHRASE = "PHRASE"  # exact phrase rejected by the user
    SOFT = "SOFT"  # speculative rejection, revived by high frequency


class BlacklistEntry(BaseModel):
    term: str
    level: BlacklistLevel
    timestamp: int  # epoch milliseconds
    count: int = 1  # times rejected
