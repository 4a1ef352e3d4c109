"""Build indexable text and output documents from extracted records."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

try:  # pragma: no cover - package/script compatibility
    from .schemas.records import ClinicalTrialDocument, RawRecord
except ImportError:  # pragma: no cover
    from schemas.records import ClinicalTrialDocument, RawRecord  # type: ignore

SECTION_SEPARATOR = ""
FRAGMENT_JOINER = "\n"


def _list_fragment(values: Sequence[str]) -> Optional[str]:
    # Empty lists leave only the surrounding separator lines behind.
    if not values:
        return None
    return FRAGMENT_JOINER.join(values)


def synthesize_content(record: RawRecord) -> str:
    """Concatenate the indexable fields of ``record`` in their fixed order."""
    fragments = [
        record.official_title,
        record.brief_summary,
        record.detailed_description,
        record.criteria,
        SECTION_SEPARATOR,
        _list_fragment(record.keywords),
        SECTION_SEPARATOR,
        _list_fragment(record.conditions),
        SECTION_SEPARATOR,
        _list_fragment(record.mesh_terms),
    ]
    return FRAGMENT_JOINER.join(fragment for fragment in fragments if fragment is not None)


def build_document(record: RawRecord) -> ClinicalTrialDocument:
    """Package ``record`` and its synthesized text into an output document."""
    content = synthesize_content(record)
    return ClinicalTrialDocument(
        id=str(record.nct_id),
        content=content,
        raw=content,
        indexable=True,
        record=record,
    )
