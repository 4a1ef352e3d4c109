"""Pull-based enumeration of documents from a single file or a ZIP archive."""

from __future__ import annotations

import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from loguru import logger

try:  # pragma: no cover - package/script compatibility
    from .extract import FieldExtractor
    from .parsers.xml_tree import DocumentParseError, XMLTreeParser
    from .schemas.records import ClinicalTrialDocument
    from .synthesize import build_document
except ImportError:  # pragma: no cover
    from extract import FieldExtractor  # type: ignore
    from parsers.xml_tree import DocumentParseError, XMLTreeParser  # type: ignore
    from schemas.records import ClinicalTrialDocument  # type: ignore
    from synthesize import build_document  # type: ignore

DOCUMENT_SUFFIX = ".xml"
ARCHIVE_SUFFIX = ".zip"


class InputUnavailableError(OSError):
    """Raised when an input unit cannot be opened at all."""


class StreamSource(Protocol):
    """Yields the bytes of each qualifying document, then ``None``."""

    def next_stream(self) -> Optional[tuple[str, bytes]]:  # pragma: no cover - structural typing
        """Return ``(name, data)`` for the next document, or ``None`` when exhausted."""

    def close(self) -> None:  # pragma: no cover - structural typing
        """Release any open handle."""


class SingleFileSource:
    """One-shot source over a bare document file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._consumed = False

    def next_stream(self) -> Optional[tuple[str, bytes]]:
        if self._consumed:
            return None
        self._consumed = True
        try:
            with self.path.open("rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise InputUnavailableError(f"Cannot open {self.path}: {exc}") from exc
        return str(self.path), data

    def close(self) -> None:
        self._consumed = True


class ZipEntrySource:
    """Cursor over the members of a ZIP archive in stored order.

    Directories and members without the document suffix are skipped.
    Members are read one at a time; nothing is buffered ahead.
    """

    def __init__(self, path: Path, suffix: str = DOCUMENT_SUFFIX) -> None:
        self.path = path
        self.suffix = suffix
        self._handle: Optional[BinaryIO] = None
        try:
            self._handle = path.open("rb")
            self._archive: Optional[zipfile.ZipFile] = zipfile.ZipFile(self._handle)
        except (OSError, zipfile.BadZipFile) as exc:
            self.close()
            raise InputUnavailableError(f"Cannot open archive {path}: {exc}") from exc
        self._entries = self._archive.infolist()
        self._cursor = 0

    def _qualifies(self, entry: zipfile.ZipInfo) -> bool:
        return not entry.is_dir() and entry.filename.endswith(self.suffix)

    def next_stream(self) -> Optional[tuple[str, bytes]]:
        if self._archive is None:
            return None
        while self._cursor < len(self._entries):
            entry = self._entries[self._cursor]
            self._cursor += 1
            if not self._qualifies(entry):
                logger.trace("segment:skip_entry | archive={} entry={}", self.path, entry.filename)
                continue
            # Corrupt, encrypted or unsupported members fail only this entry.
            try:
                with self._archive.open(entry) as member:
                    return entry.filename, member.read()
            except (
                OSError,
                EOFError,
                RuntimeError,
                NotImplementedError,
                zipfile.BadZipFile,
                zlib.error,
            ) as exc:
                raise DocumentParseError(
                    f"Cannot read {entry.filename} from {self.path}: {exc}", entry.filename
                ) from exc
        return None

    def close(self) -> None:
        archive = getattr(self, "_archive", None)
        if archive is not None:
            archive.close()
            self._archive = None
        if self._handle is not None:
            self._handle.close()
            self._handle = None


def open_source(path: Path) -> StreamSource:
    """Pick the source implementation for ``path`` by its suffix."""
    if path.name.endswith(ARCHIVE_SUFFIX):
        return ZipEntrySource(path)
    return SingleFileSource(path)


class Segment:
    """Stateful enumerator of the documents in one input unit.

    Each call to :meth:`try_advance` yields exactly one document, returns
    ``None`` once the input is exhausted, or raises. After a
    :class:`DocumentParseError` in an archive the cursor has already moved
    past the failed member, so calling again continues with the next one.
    Calls must not overlap; the open handle belongs to this instance and is
    released on exhaustion, on a fatal error, or on :meth:`close`.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        tree_parser: XMLTreeParser | None = None,
        extractor: FieldExtractor | None = None,
    ) -> None:
        self.path = Path(path)
        self.archive = self.path.name.endswith(ARCHIVE_SUFFIX)
        self._tree_parser = tree_parser or XMLTreeParser()
        self._extractor = extractor or FieldExtractor()
        self._source: Optional[StreamSource] = None
        self._opened = False
        self.at_eof = False

    def _ensure_source(self) -> StreamSource:
        if self._source is None:
            if self._opened:
                raise InputUnavailableError(f"Segment {self.path} is already closed.")
            self._opened = True
            self._source = open_source(self.path)
        return self._source

    def try_advance(self) -> Optional[ClinicalTrialDocument]:
        if self.at_eof:
            return None
        try:
            next_stream = self._ensure_source().next_stream()
        except InputUnavailableError:
            self.close()
            raise
        except DocumentParseError:
            if not self.archive:
                self.close()
            raise

        if next_stream is None:
            self.close()
            return None

        name, data = next_stream
        if not self.archive:
            self.close()
        try:
            root = self._tree_parser.parse(data, source=name)
        except DocumentParseError:
            logger.debug(
                "segment:parse_failed | segment={} entry={} parser={} version={}",
                self.path,
                name,
                self._tree_parser.name,
                self._tree_parser.version,
            )
            raise
        record = self._extractor.extract(root, source_file=name)
        logger.trace("segment:document | segment={} id={}", self.path, record.nct_id)
        return build_document(record)

    def close(self) -> None:
        self.at_eof = True
        if self._source is not None:
            self._source.close()
            self._source = None

    def __iter__(self) -> "Segment":
        return self

    def __next__(self) -> ClinicalTrialDocument:
        document = self.try_advance()
        if document is None:
            raise StopIteration
        return document

    def __enter__(self) -> "Segment":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_segment(path: str | Path) -> Segment:
    """Create an enumerator for one input unit."""
    return Segment(path)
