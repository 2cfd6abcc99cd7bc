"""
Cosine similarity and brute-force nearest neighbour search.

Queries are composed from the location vectors of the words in a phrase.
A word with a trailing exclusion marker contributes with a negative sign,
which turns a phrase like "king man: woman" into king - man + woman.
"""

import numpy as np
from typing import Callable, List, NamedTuple, Optional

from athena.core.logger import get_logger
from .store import EmbeddingStore

logger = get_logger(__name__)

EXCLUSION_MARKER = ":"
SENTINEL_SCORE = -1.0
SENTINEL_WORD = ""

Tokeniser = Callable[[str], List[str]]

class Neighbour(NamedTuple):
    """A word and its similarity to the query"""
    word: str
    score: float

def similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0 when either vector has zero magnitude.
    """
    vec1 = np.asarray(vec1, dtype=np.float64)
    vec2 = np.asarray(vec2, dtype=np.float64)

    dot = float(np.dot(vec1, vec2))
    len1 = float(np.dot(vec1, vec1))
    len2 = float(np.dot(vec2, vec2))

    if len1 == 0 or len2 == 0:
        return 0.0

    return dot / (np.sqrt(len1) * np.sqrt(len2))

def similarities(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of query against every row of matrix"""
    query = np.asarray(query, dtype=np.float64)
    query_len = float(np.dot(query, query))
    row_lens = np.einsum("ij,ij->i", matrix, matrix)

    scores = np.zeros(matrix.shape[0], dtype=np.float64)
    if query_len == 0:
        return scores

    nonzero = row_lens != 0
    scores[nonzero] = (matrix[nonzero] @ query) / (np.sqrt(row_lens[nonzero]) * np.sqrt(query_len))
    return scores

class SimilarityEngine:
    """
    Nearest neighbour queries over an embedding store.

    Every query scans the whole vocabulary; there is no index. Results keep
    the k best scores found in store iteration order, and an entry only
    displaces a slot it strictly beats, so earlier entries win ties.
    """

    def __init__(self,
                 store: EmbeddingStore,
                 tokeniser: Optional[Tokeniser] = None,
                 exclusion_marker: str = EXCLUSION_MARKER):
        self.store = store
        self.tokeniser = tokeniser or str.split
        self.exclusion_marker = exclusion_marker

    def query_vector(self, phrase: str) -> np.ndarray:
        """Sum of the signed location vectors of the known words in phrase"""
        vec = np.zeros(self.store.dims, dtype=np.float64)
        for token in self.tokeniser(phrase):
            sign = 1.0
            key = token
            if key.endswith(self.exclusion_marker):
                sign = -1.0
                key = key.rstrip(self.exclusion_marker)

            entry = self.store.get(key)
            if entry is None:
                continue

            vec += entry.location * sign
        return vec

    def nearest(self, phrase: str, count: int, use_context: bool = False) -> List[Neighbour]:
        """
        Find the words closest to a phrase.

        Args:
            phrase: Query text, tokenised with the bigram table
            count: Number of results
            use_context: Compare against context vectors instead of location vectors

        Returns:
            Exactly count neighbours in descending score order; unfilled
            slots hold an empty word with score -1
        """
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        vec = self.query_vector(phrase)
        keys, matrix = self.store.vectors(use_context=use_context)
        scores = similarities(vec, matrix)

        best_scores = [SENTINEL_SCORE] * count
        best_words = [SENTINEL_WORD] * count

        for key, sim in zip(keys, scores):
            for c in range(count):
                if sim > best_scores[c]:
                    best_scores[c + 1:] = best_scores[c:count - 1]
                    best_words[c + 1:] = best_words[c:count - 1]
                    best_scores[c] = float(sim)
                    best_words[c] = key
                    break

        logger.debug(f"Nearest to {phrase!r} over {len(keys)} entries: {best_words[:3]}")
        return [Neighbour(word, score) for word, score in zip(best_words, best_scores)]
