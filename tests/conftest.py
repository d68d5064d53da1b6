"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from indexkit.config import IndexingConfig, IndexingSettings
from indexkit.search.blueprint import BlueprintRegistry
from tests.fixtures.objects import IndexedObject


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep INDEXKIT_* variables and stray .env files out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("INDEXKIT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def indexing_config() -> IndexingConfig:
    return IndexingConfig(IndexingSettings(language="none"))


@pytest.fixture
def registry() -> BlueprintRegistry:
    return BlueprintRegistry()


@pytest.fixture
def indexed_object() -> IndexedObject:
    return IndexedObject(1)
