"""Term candidate model flowing through the Name Hunter pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TermType(str, Enum):
    PERSON = "Person"
    LOCATION = "Location"
    ORGANIZATION = "Organization"
    SKILL = "Skill"
    UNKNOWN = "Unknown"
    JUNK = "Junk"

    @classmethod
    def parse(cls, value: Any, default: TermType | None = None) -> TermType | None:
        """Map a loosely formatted label ("person", " Location ") to a TermType."""
        if isinstance(value, TermType):
            return value
        if not isinstance(value, str):
            return default
        label = value.strip().lower()
        for member in cls:
            if member.value.lower() == label:
                return member
        return default


class TermCandidate(BaseModel):
    original: str  # romanized (Han-Viet) display form
    source_text: str | None = None  # source-script form, when known
    context: str = ""
    count: int = Field(default=1, ge=1)
    type: TermType = TermType.UNKNOWN
    confidence: float = 0
    metadata: dict[str, Any] = {}

    @property
    def key(self) -> str:
        """Merge key within one scan: source form if available, else romanized form."""
        return self.source_text or self.original


class ClassificationResult(BaseModel):
    type: TermType
    score: int


class ScanOptions(BaseModel):
    mode: str = "local"  # local / ai
    allowed_types: list[TermType] = [
        TermType.PERSON,
        TermType.LOCATION,
        TermType.ORGANIZATION,
        TermType.SKILL,
        TermType.UNKNOWN,
    ]
    custom_patterns: list[str] | None = None
    workspace_id: str | None = None
