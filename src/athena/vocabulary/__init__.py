"""
ATHENA Vocabulary Module

Corpus scanning and bigram-aware tokenisation
"""

from .builder import VocabularyBuilder, VocabularyStats
from .bigrams import BigramTable, load_bigrams, WORD_JOINER

__all__ = [
    "VocabularyBuilder",
    "VocabularyStats",
    "BigramTable",
    "load_bigrams",
    "WORD_JOINER",
]
