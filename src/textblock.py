"""Reassembly of text fields that are split across nested elements."""

from __future__ import annotations

from typing import Optional

from lxml import etree

TEXTBLOCK_TAG = "textblock"
BLOCK_SEPARATOR = "\n"


def element_text(element: etree._Element) -> str:
    """Return every text leaf under ``element``, each trimmed, joined by one space.

    Only genuine text nodes count; comment and processing-instruction
    content is never included, and the element's own tail is excluded.
    """
    leaves = (str(leaf).strip() for leaf in element.xpath(".//text()"))
    return " ".join(leaf for leaf in leaves if leaf)


def optional_text(element: etree._Element) -> Optional[str]:
    """Like :func:`element_text`, but ``None`` when no text survives."""
    text = element_text(element)
    return text or None


def assemble_textblock(element: etree._Element, block_tag: str = TEXTBLOCK_TAG) -> Optional[str]:
    """Join the text of each direct ``block_tag`` child with newlines.

    Returns ``None`` rather than an empty string when the assembled text is
    empty or whitespace only.
    """
    blocks = [
        element_text(child).strip()
        for child in element
        if child.tag == block_tag
    ]
    assembled = BLOCK_SEPARATOR.join(blocks).strip()
    return assembled or None
