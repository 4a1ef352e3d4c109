"""Tests for text-block reassembly."""

from lxml import etree

from textblock import assemble_textblock, element_text, optional_text


def test_assemble_textblock_joins_trimmed_blocks() -> None:
    node = etree.fromstring(
        "<detailed_description><textblock>a</textblock><textblock>  b  </textblock></detailed_description>"
    )

    assert assemble_textblock(node) == "a\nb"


def test_assemble_textblock_whitespace_only_is_absent() -> None:
    node = etree.fromstring(
        "<criteria><textblock>   </textblock><textblock>\n\t</textblock></criteria>"
    )

    assert assemble_textblock(node) is None


def test_assemble_textblock_without_blocks_is_absent() -> None:
    node = etree.fromstring("<detailed_description>loose text</detailed_description>")

    assert assemble_textblock(node) is None


def test_assemble_textblock_ignores_other_children() -> None:
    node = etree.fromstring(
        "<detailed_description><note>skip</note><textblock>kept</textblock></detailed_description>"
    )

    assert assemble_textblock(node) == "kept"


def test_element_text_joins_nested_leaves_with_single_space() -> None:
    node = etree.fromstring(
        "<textblock>\n  First line\n  <p>  second <b>bold</b>  </p>\n  tail   </textblock>"
    )

    assert element_text(node) == "First line second bold tail"


def test_element_text_skips_comments_and_own_tail() -> None:
    wrapper = etree.fromstring("<w><acronym>Video<!-- note -->Dining</acronym> after</w>")

    assert element_text(wrapper[0]) == "Video Dining"


def test_optional_text_returns_none_for_empty_element() -> None:
    assert optional_text(etree.fromstring("<gender>  </gender>")) is None
    assert optional_text(etree.fromstring("<gender>All</gender>")) == "All"
