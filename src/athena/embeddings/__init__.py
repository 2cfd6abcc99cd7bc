"""
ATHENA Embeddings

Dual-vector word embedding store with cosine nearest neighbour search and
binary persistence.
"""

from .store import (
    EmbeddingStore,
    Entry,
    StoreConfig,
    StorePhase
)

from .similarity import (
    SimilarityEngine,
    Neighbour,
    similarity,
    similarities,
    EXCLUSION_MARKER
)

from .persistence import (
    ModelSerializer,
    ModelRecord,
    backup_path
)

__all__ = [
    # Store
    'EmbeddingStore',
    'Entry',
    'StoreConfig',
    'StorePhase',

    # Similarity search
    'SimilarityEngine',
    'Neighbour',
    'similarity',
    'similarities',
    'EXCLUSION_MARKER',

    # Persistence
    'ModelSerializer',
    'ModelRecord',
    'backup_path'
]
