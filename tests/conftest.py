"""Shared test fixtures and configuration."""

import logging
import os
from pathlib import Path

import pytest

from index_bloom.search.document_index import DocumentIndex


DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Drop any INDEX_BLOOM_* settings from the host and run from a scratch directory.

    Running from ``tmp_path`` keeps a developer's ``.env`` out of Settings().
    """
    for key in list(os.environ):
        if key.upper().startswith("INDEX_BLOOM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_root_logger():
    """Snapshot root logger handlers/level for tests that call configure_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def data_dir() -> Path:
    """Directory holding the sample corpora used by source ingestion tests."""
    return DATA_DIR


@pytest.fixture
def populated_index() -> DocumentIndex:
    """Index with two overlapping documents."""
    index = DocumentIndex(0.0001)
    index.ingest("a", "word1 word2")
    index.ingest("b", "word1 word3")
    return index
