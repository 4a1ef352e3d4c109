"""Adapter that turns raw document bytes into an lxml element tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from lxml import etree

DEFAULT_ENCODING = "utf-8"


class DocumentParseError(ValueError):
    """Raised when document bytes cannot be decoded or parsed into a tree."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


@dataclass
class XMLTreeParser:
    """Permissive, non-validating XML parser.

    DTDs are neither loaded nor validated and nothing is fetched over the
    network, so unknown or drifting schemas never cause a failure. Markup
    that is not well formed is still rejected.
    """

    encoding: str = DEFAULT_ENCODING
    _parser: etree.XMLParser = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._parser = etree.XMLParser(
            load_dtd=False,
            dtd_validation=False,
            no_network=True,
            resolve_entities=False,
            recover=False,
            huge_tree=True,
        )
        self.name = "lxml"
        self.version = ".".join(str(part) for part in etree.LXML_VERSION)

    def decode(self, data: bytes, source: Optional[str] = None) -> str:
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise DocumentParseError(f"Could not decode {source or 'document'} as {self.encoding}.", source) from exc

    def parse(self, data: bytes, source: Optional[str] = None) -> etree._Element:
        """Decode ``data`` and return the root element of the parsed tree."""
        text = self.decode(data, source)
        try:
            # Re-encoded so lxml accepts documents carrying an XML declaration.
            root = etree.fromstring(text.encode(self.encoding), self._parser)
        except etree.XMLSyntaxError as exc:
            raise DocumentParseError(f"Malformed XML in {source or 'document'}: {exc}", source) from exc
        if root is None:
            raise DocumentParseError(f"Empty document in {source or 'input'}.", source)
        return root
