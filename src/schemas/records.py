"""Schemas for extracted clinical-trial records and indexable documents."""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

_WHITESPACE = re.compile(r"\s+")
_LABEL_WIDTH = 45


def _bracketed(values: tuple[str, ...]) -> str:
    return "[" + ", ".join(values) + "]"


class RawRecord(BaseModel):
    """Flat field set extracted from one ``clinical_study`` document."""

    model_config = ConfigDict(frozen=True)

    source_file: Optional[str] = Field(
        default=None, description="Path or archive member the record was read from."
    )
    org_study_id: Optional[str] = Field(default=None, description="Sponsor-assigned study id.")
    secondary_id: Optional[str] = Field(default=None, description="Secondary study id.")
    nct_id: Optional[str] = Field(default=None, description="ClinicalTrials.gov identifier.")
    brief_title: Optional[str] = Field(default=None, description="Short title.")
    acronym: Optional[str] = Field(default=None, description="Study acronym.")
    official_title: Optional[str] = Field(default=None, description="Long title.")
    brief_summary: Optional[str] = Field(default=None, description="Brief summary.")
    detailed_description: Optional[str] = Field(
        default=None, description="Detailed description reassembled from text blocks."
    )
    criteria: Optional[str] = Field(
        default=None, description="Inclusion and exclusion criteria."
    )
    gender: Optional[str] = Field(default=None, description="Eligible gender.")
    minimum_age: Optional[str] = Field(default=None, description="Minimum eligible age.")
    maximum_age: Optional[str] = Field(default=None, description="Maximum eligible age.")
    conditions: tuple[str, ...] = Field(default=(), description="Conditions in document order.")
    keywords: tuple[str, ...] = Field(default=(), description="Keywords in document order.")
    mesh_terms: tuple[str, ...] = Field(
        default=(), description="MeSH terms from the condition browse group."
    )

    def describe(self) -> str:
        """Render a human-readable, one-property-per-line summary."""
        properties = [
            ("sourceFile", self.source_file),
            ("org_study_id", self.org_study_id),
            ("secondary_id", self.secondary_id),
            ("nct_id", self.nct_id),
            ("acronym", self.acronym),
            ("briefTitle", self.brief_title),
            ("officialTitle", self.official_title),
            ("briefSummary", self.brief_summary),
            ("detailedDescription", self.detailed_description),
            ("keywords", _bracketed(self.keywords)),
            ("conditions", _bracketed(self.conditions)),
            ("meshTerms", _bracketed(self.mesh_terms)),
        ]
        lines = []
        for name, value in properties:
            rendered = None if value is None else _WHITESPACE.sub(" ", str(value)).strip()
            lines.append(f"{name + ':':<{_LABEL_WIDTH}}{rendered}")
        return "\n".join(lines) + "\n"


class ClinicalTrialDocument(BaseModel):
    """Indexable unit produced for each parsed record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="External identifier (the record's nct_id as text).")
    content: str = Field(..., description="Synthesized text for full-text indexing.")
    raw: str = Field(..., description="Raw text representation; currently equal to content.")
    indexable: bool = Field(default=True, description="Whether the document should be indexed.")
    record: RawRecord = Field(..., description="Structured fields extracted from the source.")

    def to_row(self) -> dict[str, Any]:
        """Return the JSON-serialisable output row for this document."""
        return {
            "id": self.id,
            "content": self.content,
            "raw": self.raw,
            "indexable": self.indexable,
            "fields": self.record.model_dump(mode="json"),
        }
