"""Tests for collection discovery and traversal."""

import struct
import zipfile
from pathlib import Path

import pytest

from collection import ClinicalTrialsCollection
from parsers.xml_tree import DocumentParseError


def _study(nct_id: str) -> str:
    return f"<clinical_study><id_info><nct_id>{nct_id}</nct_id></id_info></clinical_study>"


def _build_collection(root: Path) -> Path:
    (root / "nested").mkdir(parents=True)
    (root / "b.xml").write_text(_study("NCT-B"), encoding="utf-8")
    (root / "notes.txt").write_text("ignored", encoding="utf-8")
    with zipfile.ZipFile(root / "nested" / "a.zip", "w") as archive:
        archive.writestr("one.xml", _study("NCT-A1"))
        archive.writestr("broken.xml", "<clinical_study>")
        archive.writestr("two.xml", _study("NCT-A2"))
    return root


def test_segment_paths_filters_by_suffix(tmp_path: Path) -> None:
    root = _build_collection(tmp_path / "collection")

    paths = ClinicalTrialsCollection(root).segment_paths()

    assert [path.name for path in paths] == ["b.xml", "a.zip"]


def test_iter_documents_skips_failures_and_counts(tmp_path: Path) -> None:
    root = _build_collection(tmp_path / "collection")
    collection = ClinicalTrialsCollection(root)

    ids = [document.id for document in collection.iter_documents()]

    assert ids == ["NCT-B", "NCT-A1", "NCT-A2"]
    assert collection.stats["segments"] == 2
    assert collection.stats["documents"] == 3
    assert collection.stats["skipped"] == 1


def test_iter_documents_raises_when_not_skipping(tmp_path: Path) -> None:
    root = _build_collection(tmp_path / "collection")
    collection = ClinicalTrialsCollection(root)

    with pytest.raises(DocumentParseError):
        list(collection.iter_documents(skip_errors=False))


def test_single_file_collection(tmp_path: Path) -> None:
    source = tmp_path / "only.xml"
    source.write_text(_study("NCT-ONLY"), encoding="utf-8")

    documents = list(ClinicalTrialsCollection(source).iter_documents())

    assert [document.id for document in documents] == ["NCT-ONLY"]


def test_unreadable_archive_is_logged_and_skipped(tmp_path: Path) -> None:
    (tmp_path / "bad.zip").write_bytes(b"not a zip")
    (tmp_path / "good.xml").write_text(_study("NCT-GOOD"), encoding="utf-8")
    collection = ClinicalTrialsCollection(tmp_path)

    ids = [document.id for document in collection.iter_documents()]

    assert ids == ["NCT-GOOD"]
    assert collection.stats["failed"] == 1


def _corrupt_first_member_data(archive_path: Path) -> None:
    with zipfile.ZipFile(archive_path) as archive:
        offset = archive.infolist()[0].header_offset
    data = bytearray(archive_path.read_bytes())
    name_length, extra_length = struct.unpack_from("<HH", data, offset + 26)
    # 0x07 opens a deflate block of the reserved type.
    data[offset + 30 + name_length + extra_length] = 0x07
    archive_path.write_bytes(bytes(data))


def _flag_first_member_encrypted(archive_path: Path) -> None:
    data = bytearray(archive_path.read_bytes())
    local_header = data.index(b"PK\x03\x04")
    central_header = data.index(b"PK\x01\x02")
    data[local_header + 6] |= 0x01
    data[central_header + 8] |= 0x01
    archive_path.write_bytes(bytes(data))


def test_damaged_deflate_member_is_skipped(tmp_path: Path) -> None:
    archive_path = tmp_path / "damaged.zip"
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("bad.xml", _study("NCT-BAD") * 20)
        archive.writestr("good.xml", _study("NCT-GOOD"))
    _corrupt_first_member_data(archive_path)
    collection = ClinicalTrialsCollection(archive_path)

    ids = [document.id for document in collection.iter_documents()]

    assert ids == ["NCT-GOOD"]
    assert collection.stats["skipped"] == 1


def test_encrypted_member_is_skipped(tmp_path: Path) -> None:
    archive_path = tmp_path / "encrypted.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("enc.xml", _study("NCT-ENC"))
        archive.writestr("good.xml", _study("NCT-GOOD"))
    _flag_first_member_encrypted(archive_path)
    collection = ClinicalTrialsCollection(archive_path)

    ids = [document.id for document in collection.iter_documents()]

    assert ids == ["NCT-GOOD"]
    assert collection.stats["skipped"] == 1


def test_damaged_member_surfaces_as_parse_error(tmp_path: Path) -> None:
    archive_path = tmp_path / "damaged.zip"
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("bad.xml", _study("NCT-BAD") * 20)
    _corrupt_first_member_data(archive_path)

    with pytest.raises(DocumentParseError) as excinfo:
        list(ClinicalTrialsCollection(archive_path).iter_documents(skip_errors=False))

    assert excinfo.value.source == "bad.xml"
