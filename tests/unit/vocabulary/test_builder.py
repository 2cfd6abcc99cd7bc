#!/usr/bin/env python3
"""
Vocabulary learning validation

Tests:
- Token counting with whitespace splitting
- Periodic and final compaction
- Seeding of surviving entries
- Progress reporting and missing corpus handling
"""

import numpy as np
import pytest

from athena.core.logger import get_logger
from athena.core.exceptions import ResourceNotFound
from athena.embeddings.store import EmbeddingStore, StoreConfig
from athena.vocabulary.builder import VocabularyBuilder

logger = get_logger(__name__)

class TestVocabularyBuilder:
    """Corpus scanning into the embedding store"""

    @classmethod
    def setup_class(cls):
        """Set up test environment"""
        logger.info("Testing vocabulary builder")

    def _store(self, max_size: int = 1000, min_count: int = 2) -> EmbeddingStore:
        config = StoreConfig(dims=4, max_size=max_size, min_count=min_count)
        return EmbeddingStore(config, rng=np.random.default_rng(21))

    def test_1_counts_tokens(self, write_lines):
        """Tokens are split on any whitespace and counted"""
        corpus = write_lines("corpus.txt", [
            "the cat  sat",
            "",
            "the\tcat ran   ",
            "the dog",
        ])
        store = self._store(min_count=1)
        stats = VocabularyBuilder(store).learn_vocabulary(corpus)

        assert store["the"].count == 3
        assert store["cat"].count == 2
        assert store["sat"].count == 1
        assert "" not in store
        assert stats.lines_read == 4
        assert stats.tokens_read == 8
        assert stats.vocabulary_size == 5

        logger.info("✅ Counting: whitespace tokens counted")

    def test_2_final_compaction(self, write_lines):
        """Words below the minimum count are pruned after the pass"""
        corpus = write_lines("corpus.txt", ["a a a b b c"] * 1 + ["a"])
        store = self._store(min_count=3)
        stats = VocabularyBuilder(store).learn_vocabulary(corpus)

        assert list(store) == ["a"]
        assert store["a"].count == 4
        assert stats.entries_removed == 2
        assert stats.compactions == 1

        logger.info("✅ Compaction: rare words pruned")

    def test_3_periodic_compaction(self, write_lines):
        """Exceeding max_size triggers compaction during the scan"""
        lines = [f"common rare{i}" for i in range(10)]
        corpus = write_lines("corpus.txt", lines)
        store = self._store(max_size=3, min_count=2)
        stats = VocabularyBuilder(store).learn_vocabulary(corpus)

        assert stats.compactions > 1
        assert list(store) == ["common"]
        assert store["common"].count == 10

        logger.info("✅ Compaction: memory bounded during scan")

    def test_4_survivors_seeded(self, write_lines):
        """Surviving entries get random vectors once the scan ends"""
        corpus = write_lines("corpus.txt", ["x y x y"])
        store = self._store(min_count=2)
        VocabularyBuilder(store).learn_vocabulary(corpus)

        for word in ("x", "y"):
            assert store[word].location.any()
            assert store[word].context.any()
            assert np.all(np.abs(store[word].location) <= 0.5)

    def test_5_progress(self, write_lines):
        """Progress is reported as a fraction of corpus bytes"""
        corpus = write_lines("corpus.txt", ["one two", "three four", "five six"])
        fractions = []
        VocabularyBuilder(self._store(min_count=1), progress_callback=fractions.append).learn_vocabulary(corpus)

        assert len(fractions) == 3
        assert fractions == sorted(fractions)
        assert fractions[-1] == pytest.approx(1.0)

        logger.info("✅ Progress: reaches 100%")

    def test_6_missing_corpus(self, tmp_path):
        store = self._store()
        with pytest.raises(ResourceNotFound) as excinfo:
            VocabularyBuilder(store).learn_vocabulary(tmp_path / "missing.txt")

        assert excinfo.value.path == tmp_path / "missing.txt"
        assert len(store) == 0

    def test_7_builder_overrides(self, write_lines):
        """Explicit thresholds take precedence over the store config"""
        corpus = write_lines("corpus.txt", ["p p q"])
        store = self._store(min_count=5)
        VocabularyBuilder(store, min_count=2).learn_vocabulary(corpus)

        assert list(store) == ["p"]
