"""Tests for the lxml tree adapter."""

import pytest
from lxml import etree

from parsers.xml_tree import DocumentParseError, XMLTreeParser


def test_parser_reports_backend_name_and_version() -> None:
    parser = XMLTreeParser()

    assert parser.name == "lxml"
    assert parser.version == ".".join(str(part) for part in etree.LXML_VERSION)


def test_parse_accepts_xml_declaration() -> None:
    root = XMLTreeParser().parse(
        b'<?xml version="1.0" encoding="UTF-8"?>\n<clinical_study><acronym>A</acronym></clinical_study>'
    )

    assert root.tag == "clinical_study"


def test_parse_does_not_fetch_external_dtd() -> None:
    data = (
        b'<?xml version="1.0"?>\n'
        b'<!DOCTYPE clinical_study SYSTEM "http://example.invalid/study.dtd">\n'
        b"<clinical_study/>"
    )

    assert XMLTreeParser().parse(data).tag == "clinical_study"


def test_parse_rejects_malformed_markup_with_source() -> None:
    with pytest.raises(DocumentParseError) as excinfo:
        XMLTreeParser().parse(b"<clinical_study>", source="broken.xml")

    assert excinfo.value.source == "broken.xml"
    assert "broken.xml" in str(excinfo.value)


def test_parse_rejects_undecodable_bytes() -> None:
    with pytest.raises(DocumentParseError):
        XMLTreeParser().parse("<a>caf\xe9</a>".encode("latin-1"))
