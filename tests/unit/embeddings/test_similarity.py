#!/usr/bin/env python3
"""
Similarity engine validation

Tests:
- Cosine similarity properties
- Top-k nearest neighbour search with sentinels
- Analogy composition with the exclusion marker
"""

import numpy as np
import pytest

from athena.core.logger import get_logger
from athena.embeddings.store import EmbeddingStore, Entry, StoreConfig
from athena.embeddings.similarity import SimilarityEngine, Neighbour, similarity, similarities
from athena.vocabulary.bigrams import BigramTable

logger = get_logger(__name__)

DIMS = 4

def _entry(location, context=None, count=20) -> Entry:
    location = np.array(location, dtype=np.float64)
    context = np.array(context if context is not None else np.zeros(DIMS), dtype=np.float64)
    return Entry(count=count, location=location, context=context)

class TestSimilarity:
    """Cosine similarity and nearest neighbour search"""

    @classmethod
    def setup_class(cls):
        """Set up test environment"""
        logger.info("Testing similarity engine")

    def _analogy_store(self) -> EmbeddingStore:
        store = EmbeddingStore(StoreConfig(dims=DIMS, max_size=100, min_count=1),
                               rng=np.random.default_rng(0))
        store.put("king", _entry([1, 1, 0, 0]))
        store.put("man", _entry([1, 0, 0, 0]))
        store.put("woman", _entry([0, 0, 1, 0]))
        store.put("queen", _entry([0, 1, 1, 0]))
        store.put("apple", _entry([0, 0, 0, 1], context=[0, 1, 1, 0]))
        return store

    def test_1_self_similarity(self):
        """similarity(v, v) == 1 for nonzero v"""
        rng = np.random.default_rng(3)
        for _ in range(20):
            v = rng.normal(size=16)
            assert similarity(v, v) == pytest.approx(1.0)

        logger.info("✅ Cosine: self similarity is one")

    def test_2_degenerate_vectors(self):
        """Zero magnitude resolves to 0 instead of dividing by zero"""
        v = np.array([0.3, -0.2, 0.9])
        zero = np.zeros(3)

        assert similarity(v, zero) == 0.0
        assert similarity(zero, v) == 0.0
        assert similarity(zero, zero) == 0.0

        logger.info("✅ Cosine: degenerate vectors score zero")

    def test_3_known_values(self):
        assert similarity([1, 0], [0, 1]) == pytest.approx(0.0)
        assert similarity([1, 0], [-2, 0]) == pytest.approx(-1.0)
        assert similarity([1, 1], [1, 0]) == pytest.approx(1 / np.sqrt(2))

    def test_4_batched_matches_scalar(self):
        """Row-wise scores agree with the scalar function"""
        rng = np.random.default_rng(5)
        matrix = rng.normal(size=(10, 6))
        matrix[3] = 0.0
        query = rng.normal(size=6)

        scores = similarities(query, matrix)
        expected = [similarity(query, row) for row in matrix]
        np.testing.assert_allclose(scores, expected)
        assert scores[3] == 0.0
        assert not similarities(np.zeros(6), matrix).any()

        logger.info("✅ Cosine: batched scores match")

    def test_5_nearest_returns_exactly_k(self):
        """Unfilled slots carry the sentinel"""
        engine = SimilarityEngine(self._analogy_store())
        results = engine.nearest("king", 8)

        assert len(results) == 8
        assert all(isinstance(r, Neighbour) for r in results)
        assert results[0] == Neighbour("king", pytest.approx(1.0))
        assert results[5:] == [Neighbour("", -1.0)] * 3

        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(-1.0 - 1e-9 <= s <= 1.0 + 1e-9 for s in scores)

        logger.info("✅ Nearest: exactly k results, descending")

    def test_6_nearest_truncates(self):
        engine = SimilarityEngine(self._analogy_store())
        results = engine.nearest("king", 2)

        assert [r.word for r in results] == ["king", "man"]
        assert results[1].score == pytest.approx(1 / np.sqrt(2))

    def test_7_analogy(self):
        """king - man + woman ranks queen above an unrelated word"""
        engine = SimilarityEngine(self._analogy_store())

        results = engine.nearest("king man: woman", 5)
        words = [r.word for r in results]

        assert words[0] == "queen"
        assert results[0].score == pytest.approx(1.0)
        assert words.index("queen") < words.index("apple")

        np.testing.assert_allclose(engine.query_vector("king man: woman"), [0, 1, 1, 0])
        np.testing.assert_allclose(engine.query_vector("man::"), [-1, 0, 0, 0])

        logger.info("✅ Analogy: exclusion marker subtracts")

    def test_8_unknown_tokens_skipped(self):
        """Unknown words contribute nothing; an all-unknown query scores 0"""
        engine = SimilarityEngine(self._analogy_store())

        np.testing.assert_allclose(engine.query_vector("king unicorn"), [1, 1, 0, 0])

        results = engine.nearest("unicorn", 3)
        assert [r.score for r in results] == [0.0, 0.0, 0.0]
        # First seen entries win ties
        assert [r.word for r in results] == ["king", "man", "woman"]

        logger.info("✅ Nearest: unknown tokens skipped, ties keep first seen")

    def test_9_context_vectors(self):
        """use_context scores against context vectors"""
        engine = SimilarityEngine(self._analogy_store())

        results = engine.nearest("queen", 1, use_context=True)
        assert results == [Neighbour("apple", pytest.approx(1.0))]

        logger.info("✅ Nearest: context vectors")

    def test_10_bigram_tokeniser(self):
        """Phrases resolve through the bigram table"""
        store = self._analogy_store()
        store.put("new_york", _entry([0, 0, 0, 2]))
        table = BigramTable.from_keys(store.keys())
        engine = SimilarityEngine(store, tokeniser=table.tokenise)

        np.testing.assert_allclose(engine.query_vector("new york"), [0, 0, 0, 2])
        assert engine.nearest("new york", 1)[0].word == "apple"

    def test_11_invalid_count(self):
        engine = SimilarityEngine(self._analogy_store())
        with pytest.raises(ValueError):
            engine.nearest("king", 0)

    def test_12_empty_store(self):
        store = EmbeddingStore(StoreConfig(dims=DIMS, max_size=10, min_count=1))
        results = SimilarityEngine(store).nearest("anything", 3)
        assert results == [Neighbour("", -1.0)] * 3
