"""Discovery and traversal of the input units that make up a collection."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from pathlib import Path

from loguru import logger

try:  # pragma: no cover - package/script compatibility
    from .parsers.xml_tree import DocumentParseError
    from .schemas.records import ClinicalTrialDocument
    from .segment import ARCHIVE_SUFFIX, DOCUMENT_SUFFIX, InputUnavailableError, Segment
except ImportError:  # pragma: no cover
    from parsers.xml_tree import DocumentParseError  # type: ignore
    from schemas.records import ClinicalTrialDocument  # type: ignore
    from segment import ARCHIVE_SUFFIX, DOCUMENT_SUFFIX, InputUnavailableError, Segment  # type: ignore

ALLOWED_SUFFIXES = frozenset({DOCUMENT_SUFFIX, ARCHIVE_SUFFIX})


class ClinicalTrialsCollection:
    """A directory (or single file) of ClinicalTrials.gov XML and ZIP inputs."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.stats: Counter[str] = Counter()

    def segment_paths(self) -> list[Path]:
        if self.path.is_file():
            return [self.path] if self.path.suffix in ALLOWED_SUFFIXES else []
        return sorted(
            candidate
            for candidate in self.path.rglob("*")
            if candidate.is_file() and candidate.suffix in ALLOWED_SUFFIXES
        )

    def create_segment(self, path: Path) -> Segment:
        return Segment(path)

    def iter_documents(self, skip_errors: bool = True) -> Iterator[ClinicalTrialDocument]:
        """Yield every document in the collection.

        With ``skip_errors`` a document that fails to parse is logged and
        skipped, and an input unit that cannot be opened is logged and the
        walk moves on to the next unit. Otherwise the first error is raised.
        """
        for segment_path in self.segment_paths():
            self.stats["segments"] += 1
            logger.debug("collection:segment | path={}", segment_path)
            with self.create_segment(segment_path) as segment:
                while True:
                    try:
                        document = segment.try_advance()
                    except InputUnavailableError as exc:
                        self.stats["failed"] += 1
                        if not skip_errors:
                            raise
                        logger.error("collection:input_unavailable | path={} error={}", segment_path, exc)
                        break
                    except DocumentParseError as exc:
                        self.stats["skipped"] += 1
                        if not skip_errors:
                            raise
                        logger.warning(
                            "collection:document_skipped | path={} entry={} error={}",
                            segment_path,
                            exc.source,
                            exc,
                        )
                        continue
                    if document is None:
                        break
                    self.stats["documents"] += 1
                    yield document
