"""Tests for filesystem ingestion."""

import logging
from pathlib import Path

import pytest

from index_bloom.exceptions import ContentReadError, InvalidCapacityError, SourceTypeError
from index_bloom.search.document_index import DocumentIndex
from index_bloom.sources import IngestReport, ingest_directory, ingest_source, iter_sources, read_content


@pytest.fixture
def index() -> DocumentIndex:
    return DocumentIndex(0.0001)


class TestReadContent:
    """Content provider."""

    def test_reads_utf8_text(self, tmp_path: Path):
        path = tmp_path / "doc.txt"
        path.write_text("café", encoding="utf-8")

        assert read_content(path) == "café"

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ContentReadError) as excinfo:
            read_content(tmp_path / "absent.txt")

        assert excinfo.value.source == tmp_path / "absent.txt"
        assert isinstance(excinfo.value, OSError)

    def test_undecodable_file_raises(self, tmp_path: Path):
        path = tmp_path / "binary.bin"
        path.write_bytes(b"\xff\xfe\xfa\x00")

        with pytest.raises(ContentReadError, match="not valid utf-8"):
            read_content(path)


class TestIterSources:
    """Source enumeration."""

    def test_lists_top_level_files_sorted(self, data_dir: Path):
        root = data_dir / "several_matches_directory"

        assert list(iter_sources(root)) == [root / "file1.txt", root / "file2.txt"]

    def test_recursive_includes_nested_files(self, data_dir: Path):
        root = data_dir / "several_matches_directory"

        assert list(iter_sources(root, recursive=True)) == [
            root / "file1.txt",
            root / "file2.txt",
            root / "nested" / "file3.txt",
        ]

    def test_unreadable_root_raises(self, tmp_path: Path):
        with pytest.raises(ContentReadError):
            list(iter_sources(tmp_path / "absent"))


class TestIngestSource:
    """File and directory routing."""

    def test_single_file_uses_path_as_identifier(self, index, data_dir: Path):
        path = data_dir / "simple_content.txt"

        report = ingest_source(index, path)

        assert report.indexed == [str(path)]
        for keyword in ["word1", "word2", "word3", "word4"]:
            assert index.search(keyword) == [str(path)]

    def test_directory_indexes_every_file(self, index, data_dir: Path):
        root = data_dir / "simple_directory"

        report = ingest_source(index, root)

        file1, file2 = str(root / "file1.txt"), str(root / "file2.txt")
        assert report.documents_indexed == 2
        assert index.search("word1") == [file1]
        assert index.search("word2") == [file1]
        assert index.search("word3") == [file1]
        assert index.search("word4") == [file2]
        assert index.search("word5") == [file2]

    def test_several_matches_are_sorted(self, index, data_dir: Path):
        root = data_dir / "several_matches_directory"
        ingest_source(index, root)

        file1, file2 = str(root / "file1.txt"), str(root / "file2.txt")
        assert index.search("word2") == [file1]
        assert index.search("word1") == [file1, file2]
        assert index.search("word3") == [file1, file2]
        assert index.search("word1 word2") == [file1]
        assert index.search("(word1) Word2, word3?") == [file1]
        assert index.search("word6") is None

    def test_recursive_directory(self, index, data_dir: Path):
        root = data_dir / "several_matches_directory"

        ingest_source(index, root, recursive=True)

        assert index.search("word6") == [str(root / "nested" / "file3.txt")]

    def test_unsupported_source_raises(self, index, tmp_path: Path):
        with pytest.raises(SourceTypeError, match="source type must be file or directory"):
            ingest_source(index, tmp_path / "unknown_source")

    def test_single_unreadable_file_is_a_hard_failure(self, index, tmp_path: Path):
        path = tmp_path / "binary.bin"
        path.write_bytes(b"\xff\xfe\xfa\x00")

        with pytest.raises(ContentReadError):
            ingest_source(index, path)

        assert len(index) == 0


class TestIngestDirectory:
    """Bulk ingestion skips bad documents and keeps going."""

    def test_skips_unreadable_and_empty_documents(self, index, tmp_path: Path, caplog):
        (tmp_path / "a.txt").write_text("alpha beta", encoding="utf-8")
        (tmp_path / "b.bin").write_bytes(b"\xff\xfe\xfa\x00")
        (tmp_path / "c.txt").write_text("  ... !!  ", encoding="utf-8")
        (tmp_path / "d.txt").write_text("gamma", encoding="utf-8")

        with caplog.at_level(logging.INFO, logger="index_bloom.sources"):
            report = ingest_directory(index, tmp_path)

        assert report.indexed == [str(tmp_path / "a.txt"), str(tmp_path / "d.txt")]
        assert report.skipped == [str(tmp_path / "b.bin"), str(tmp_path / "c.txt")]
        assert len(report.errors) == 2
        assert "b.bin" in report.errors[0]
        assert "c.txt" in report.errors[1]
        assert index.identifiers() == report.indexed

        skips = [record for record in caplog.records if record.getMessage().startswith("Skipping")]
        assert len(skips) == 2
        assert all(record.levelno == logging.WARNING for record in skips)
        assert isinstance(skips[0].exc_info[1], ContentReadError)
        assert isinstance(skips[1].exc_info[1], InvalidCapacityError)

    def test_empty_directory(self, index, tmp_path: Path):
        report = ingest_directory(index, tmp_path)

        assert report.documents_indexed == 0
        assert report.documents_skipped == 0


class TestIngestReport:
    """Report aggregation."""

    def test_merge(self):
        first = IngestReport(source=Path("x"), indexed=["a"], skipped=["b"], errors=["e"])
        second = IngestReport(source=Path("y"), indexed=["c"])

        first.merge(second)

        assert first.indexed == ["a", "c"]
        assert first.documents_indexed == 2
        assert first.documents_skipped == 1
        assert first.errors == ["e"]
