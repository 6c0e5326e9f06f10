from __future__ import annotations
from dataclasses import dataclass, replace
import re
from typing import Optional
from pydantic import BaseModel, field_validator

LINE_BREAK_RGX = re.compile(r"\s*[\r\n]+\s*")
SPACE_RGX = re.compile(r"[ \t\u00a0]+")


def clean_text(value: Optional[str]) -> str:
    """Collapse embedded line breaks and runs of blanks, then trim."""
    if not value:
        return ""
    text = LINE_BREAK_RGX.sub(" ", str(value))
    return SPACE_RGX.sub(" ", text).strip()


class JobRecord(BaseModel):
    title: str
    company: str = ""
    location: str = ""
    link: str = ""  # absolute URL or empty
    description: Optional[str] = None

    @field_validator("title", "company", "location", "link", mode="before")
    @classmethod
    def normalize_whitespace(cls, v):
        return clean_text(v)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v):
        if v is None:
            return None
        return clean_text(v) or None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v:
            raise ValueError("title must be non-empty")
        return v


@dataclass(frozen=True)
class Candidate:
    """A provisionally extracted record plus the raw card metadata used for identity."""
    record: JobRecord
    source_id: Optional[str] = None

    def filled_from(self, other: Optional["Candidate"]) -> "Candidate":
        # Fields already read on self win; other only fills the gaps
        if other is None:
            return self
        mine = self.record
        theirs = other.record
        merged = mine.model_copy(update={
            "company": mine.company or theirs.company,
            "location": mine.location or theirs.location,
            "link": mine.link or theirs.link,
            "description": mine.description or theirs.description,
        })
        return replace(self, record=merged, source_id=self.source_id or other.source_id)


__all__ = ["JobRecord", "Candidate", "clean_text"]
