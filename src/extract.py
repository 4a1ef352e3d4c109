"""Tag-dispatch extraction of clinical-trial fields from a parsed tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from lxml import etree

try:  # pragma: no cover - package/script compatibility
    from .schemas.records import RawRecord
    from .textblock import assemble_textblock, element_text, optional_text
except ImportError:  # pragma: no cover
    from schemas.records import RawRecord  # type: ignore
    from textblock import assemble_textblock, element_text, optional_text  # type: ignore

ROOT_TAG = "clinical_study"


class FieldRole(str, Enum):
    """What a recognised tag contributes to the record."""

    ID_INFO = "id_info"
    ORG_STUDY_ID = "org_study_id"
    SECONDARY_ID = "secondary_id"
    NCT_ID = "nct_id"
    BRIEF_TITLE = "brief_title"
    ACRONYM = "acronym"
    OFFICIAL_TITLE = "official_title"
    BRIEF_SUMMARY = "brief_summary"
    DETAILED_DESCRIPTION = "detailed_description"
    CONDITION = "condition"
    ELIGIBILITY = "eligibility"
    CRITERIA = "criteria"
    GENDER = "gender"
    MINIMUM_AGE = "minimum_age"
    MAXIMUM_AGE = "maximum_age"
    KEYWORD = "keyword"
    CONDITION_BROWSE = "condition_browse"
    MESH_TERM = "mesh_term"
    IGNORE = "ignore"


def _table(*roles: FieldRole) -> dict[str, FieldRole]:
    return {role.value: role for role in roles}


STUDY_TAGS = _table(
    FieldRole.ID_INFO,
    FieldRole.BRIEF_TITLE,
    FieldRole.ACRONYM,
    FieldRole.OFFICIAL_TITLE,
    FieldRole.BRIEF_SUMMARY,
    FieldRole.DETAILED_DESCRIPTION,
    FieldRole.CONDITION,
    FieldRole.ELIGIBILITY,
    FieldRole.KEYWORD,
    FieldRole.CONDITION_BROWSE,
)
ID_INFO_TAGS = _table(FieldRole.ORG_STUDY_ID, FieldRole.SECONDARY_ID, FieldRole.NCT_ID)
ELIGIBILITY_TAGS = _table(
    FieldRole.CRITERIA, FieldRole.GENDER, FieldRole.MINIMUM_AGE, FieldRole.MAXIMUM_AGE
)
CONDITION_BROWSE_TAGS = _table(FieldRole.MESH_TERM)

# Roles whose value is the element's recovered text, keyed to the record field.
SCALAR_FIELDS = {
    FieldRole.ORG_STUDY_ID: "org_study_id",
    FieldRole.SECONDARY_ID: "secondary_id",
    FieldRole.NCT_ID: "nct_id",
    FieldRole.BRIEF_TITLE: "brief_title",
    FieldRole.ACRONYM: "acronym",
    FieldRole.OFFICIAL_TITLE: "official_title",
    FieldRole.BRIEF_SUMMARY: "brief_summary",
    FieldRole.GENDER: "gender",
    FieldRole.MINIMUM_AGE: "minimum_age",
    FieldRole.MAXIMUM_AGE: "maximum_age",
}
LIST_FIELDS = {
    FieldRole.CONDITION: "conditions",
    FieldRole.KEYWORD: "keywords",
    FieldRole.MESH_TERM: "mesh_terms",
}


def _role_of(element: etree._Element, table: dict[str, FieldRole]) -> FieldRole:
    tag = element.tag
    # Comments and processing instructions have a non-string tag.
    if not isinstance(tag, str):
        return FieldRole.IGNORE
    return table.get(tag, FieldRole.IGNORE)


@dataclass
class RecordBuilder:
    """Mutable accumulator owned by a single extraction walk."""

    source_file: Optional[str] = None
    scalars: dict[str, Optional[str]] = field(default_factory=dict)
    lists: dict[str, list[str]] = field(
        default_factory=lambda: {name: [] for name in LIST_FIELDS.values()}
    )

    def set(self, name: str, value: Optional[str]) -> None:
        self.scalars[name] = value

    def append(self, name: str, value: str) -> None:
        self.lists[name].append(value)

    def build(self) -> RawRecord:
        return RawRecord(
            source_file=self.source_file,
            **self.scalars,
            **{name: tuple(values) for name, values in self.lists.items()},
        )


class FieldExtractor:
    """Walks the fixed levels of a ``clinical_study`` tree.

    Only direct children of the root and of the three recognised groups
    are inspected, so a known tag nested at the wrong depth is ignored.
    """

    def extract(self, root: etree._Element, source_file: Optional[str] = None) -> RawRecord:
        builder = RecordBuilder(source_file=source_file)
        if root.tag == ROOT_TAG:
            self._handle_study(root, builder)
        return builder.build()

    def _handle_study(self, node: etree._Element, builder: RecordBuilder) -> None:
        for child in node:
            role = _role_of(child, STUDY_TAGS)
            if role is FieldRole.ID_INFO:
                self._handle_group(child, ID_INFO_TAGS, builder)
            elif role is FieldRole.ELIGIBILITY:
                self._handle_eligibility(child, builder)
            elif role is FieldRole.CONDITION_BROWSE:
                self._handle_group(child, CONDITION_BROWSE_TAGS, builder)
            elif role is FieldRole.DETAILED_DESCRIPTION:
                builder.set("detailed_description", assemble_textblock(child))
            else:
                self._apply(role, child, builder)

    def _handle_eligibility(self, node: etree._Element, builder: RecordBuilder) -> None:
        for child in node:
            role = _role_of(child, ELIGIBILITY_TAGS)
            if role is FieldRole.CRITERIA:
                criteria = assemble_textblock(child)
                builder.set("criteria", criteria.strip() if criteria is not None else None)
            else:
                self._apply(role, child, builder)

    def _handle_group(
        self, node: etree._Element, table: dict[str, FieldRole], builder: RecordBuilder
    ) -> None:
        for child in node:
            self._apply(_role_of(child, table), child, builder)

    @staticmethod
    def _apply(role: FieldRole, element: etree._Element, builder: RecordBuilder) -> None:
        if role in SCALAR_FIELDS:
            builder.set(SCALAR_FIELDS[role], optional_text(element))
        elif role in LIST_FIELDS:
            builder.append(LIST_FIELDS[role], element_text(element))


def extract_record(root: etree._Element, source_file: Optional[str] = None) -> RawRecord:
    """Build a :class:`RawRecord` from the root element of one parsed document."""
    return FieldExtractor().extract(root, source_file=source_file)
