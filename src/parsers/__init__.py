"""Parser adapters for the ctflow pipeline."""

from .xml_tree import DocumentParseError, XMLTreeParser

__all__ = ["DocumentParseError", "XMLTreeParser"]
