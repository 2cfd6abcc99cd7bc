"""
Shared test fixtures and configuration for pytest.
"""

import os
from pathlib import Path
from typing import Callable, Iterable

import numpy as np
import pytest

# Keep test runs from writing the default log file
os.environ.setdefault("ATHENA_LOG_FILE", "")
os.environ.setdefault("ATHENA_LOG_FORMAT", "text")

from athena.embeddings.store import EmbeddingStore, StoreConfig


TEST_DIMS = 8


@pytest.fixture
def rng() -> np.random.Generator:
    """Deterministic generator for seeding"""
    return np.random.default_rng(1234)


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig(dims=TEST_DIMS, max_size=1000, min_count=2)


@pytest.fixture
def store(store_config, rng) -> EmbeddingStore:
    """Empty store in the build phase"""
    return EmbeddingStore(store_config, rng=rng)


@pytest.fixture
def write_lines(tmp_path) -> Callable[[str, Iterable[str]], Path]:
    """Write lines to a file under tmp_path and return its path"""

    def _write(name: str, lines: Iterable[str]) -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
