"""Filesystem sources for the document index.

Provides the content provider (``read_content``), the source enumerator
(``iter_sources``) and ``ingest_source``, which routes a path to either a
single-document ingest or a bulk directory ingest.

Failure policy:

* a single file requested directly is a hard failure - errors propagate;
* while bulk-ingesting a directory, documents that cannot be read or that
  contain no tokens are logged, recorded in the report and skipped.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging
from pathlib import Path

from index_bloom.exceptions import ContentReadError, InvalidCapacityError, SourceTypeError
from index_bloom.search.document_index import DocumentIndex


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestReport:
    """Outcome of an ``ingest_source`` call."""

    source: Path
    indexed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def documents_indexed(self) -> int:
        return len(self.indexed)

    @property
    def documents_skipped(self) -> int:
        return len(self.skipped)

    def merge(self, other: IngestReport) -> None:
        self.indexed.extend(other.indexed)
        self.skipped.extend(other.skipped)
        self.errors.extend(other.errors)


def read_content(path: Path | str, encoding: str = "utf-8") -> str:
    """Return the full text of ``path``."""
    source = Path(path)
    try:
        return source.read_text(encoding=encoding)
    except UnicodeDecodeError as exc:
        raise ContentReadError(source, f"not valid {encoding} text ({exc.reason})") from exc
    except OSError as exc:
        raise ContentReadError(source, exc.strerror or str(exc)) from exc


def iter_sources(root: Path | str, *, recursive: bool = False) -> Iterator[Path]:
    """Yield the regular files under ``root`` in sorted order.

    Only the top level is walked unless ``recursive`` is set.
    """
    directory = Path(root)
    try:
        candidates = sorted(directory.rglob("*") if recursive else directory.iterdir())
    except OSError as exc:
        raise ContentReadError(directory, exc.strerror or str(exc)) from exc
    for candidate in candidates:
        if candidate.is_file():
            yield candidate


def ingest_file(index: DocumentIndex, path: Path | str) -> str:
    """Ingest one file under its path string and return the identifier used."""
    source = Path(path)
    identifier = str(source)
    index.ingest(identifier, read_content(source))
    return identifier


def ingest_directory(index: DocumentIndex, root: Path | str, *, recursive: bool = False) -> IngestReport:
    """Bulk-ingest every file under ``root``, skipping documents that fail."""
    report = IngestReport(source=Path(root))
    for path in iter_sources(root, recursive=recursive):
        try:
            identifier = ingest_file(index, path)
        except ContentReadError as exc:
            logger.warning("Skipping %s: %s", path, exc.reason, exc_info=True)
            report.skipped.append(str(path))
            report.errors.append(str(exc))
            continue
        except InvalidCapacityError:
            logger.warning("Skipping %s: no indexable tokens", path, exc_info=True)
            report.skipped.append(str(path))
            report.errors.append(f"No indexable tokens in {path}")
            continue
        report.indexed.append(identifier)

    logger.info(
        "Ingested %s: %d documents indexed, %d skipped",
        report.source,
        report.documents_indexed,
        report.documents_skipped,
    )
    return report


def ingest_source(index: DocumentIndex, source: Path | str, *, recursive: bool = False) -> IngestReport:
    """Ingest a file or a directory of files into ``index``."""
    path = Path(source)
    if path.is_file():
        report = IngestReport(source=path)
        report.indexed.append(ingest_file(index, path))
        return report
    if path.is_dir():
        return ingest_directory(index, path, recursive=recursive)
    raise SourceTypeError(path)
