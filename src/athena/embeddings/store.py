"""
In-memory word embedding store.

Owns the word -> Entry mapping, entry creation and seeding, and the
frequency-based compaction used while learning a vocabulary. Every entry
holds two vectors of the store's fixed dimensionality: a location vector
("what this word is") and a context vector ("what surrounds this word").
"""

import numpy as np
from typing import Dict, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from athena.core.logger import get_logger
from athena.core.config import get_config
from athena.core.exceptions import StoreFrozenError

logger = get_logger(__name__)

class StorePhase(Enum):
    """Lifecycle phase of a store"""
    BUILD = "build"  # structure may change
    SERVE = "serve"  # structure is read-only

@dataclass
class Entry:
    """Embedding record for a single word"""
    count: int
    location: np.ndarray
    context: np.ndarray

    @classmethod
    def zeros(cls, dims: int, count: int = 0) -> "Entry":
        return cls(
            count=count,
            location=np.zeros(dims, dtype=np.float64),
            context=np.zeros(dims, dtype=np.float64),
        )

@dataclass
class StoreConfig:
    """Shape and pruning parameters for an embedding store"""
    dims: int = field(default_factory=lambda: get_config().DIMS)
    max_size: int = field(default_factory=lambda: get_config().MAX_SIZE)
    min_count: int = field(default_factory=lambda: get_config().MIN_COUNT)

class EmbeddingStore:
    """
    Word -> Entry mapping with a fixed vector dimensionality.

    The store exclusively owns its entries. During the build phase entries
    can be created, loaded and compacted away; once frozen for serving, the
    set of keys is fixed while counts and vector values stay writable for an
    external trainer.
    """

    def __init__(self,
                 config: Optional[StoreConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or StoreConfig()
        if self.config.dims < 1:
            raise ValueError(f"dims must be positive, got {self.config.dims}")

        if rng is None:
            rng = np.random.default_rng(get_config().RANDOM_SEED)
        self.rng = rng

        self._entries: Dict[str, Entry] = {}
        self._phase = StorePhase.BUILD

    @property
    def dims(self) -> int:
        return self.config.dims

    @property
    def phase(self) -> StorePhase:
        return self._phase

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: str) -> bool:
        return word in self._entries

    def __getitem__(self, word: str) -> Entry:
        return self._entries[word]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, word: str) -> Optional[Entry]:
        return self._entries.get(word)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def _require_build_phase(self, operation: str):
        if self._phase is not StorePhase.BUILD:
            raise StoreFrozenError(f"Cannot {operation}: store is in the serve phase")

    def _check_vector(self, vector: np.ndarray, name: str) -> np.ndarray:
        vector = np.asarray(vector, dtype=np.float64)
        if vector.shape != (self.dims,):
            raise ValueError(f"{name} vector must have shape ({self.dims},), got {vector.shape}")
        return vector

    def create_entry(self, word: str, count: int = 1, seed: bool = False) -> Entry:
        """
        Insert a fresh entry.

        Args:
            word: Vocabulary key
            count: Initial occurrence count
            seed: Seed the vectors immediately instead of leaving them zero

        Returns:
            The newly created entry
        """
        self._require_build_phase("create entry")
        if not word:
            raise ValueError("Vocabulary keys must be non-empty")
        if word in self._entries:
            raise KeyError(f"Duplicate vocabulary key: {word!r}")

        entry = Entry.zeros(self.dims, count=count)
        if seed:
            self.seed(entry)
        self._entries[word] = entry
        return entry

    def put(self, word: str, entry: Entry) -> None:
        """Insert or replace an entry, validating its vector shapes"""
        self._require_build_phase("put entry")
        if not word:
            raise ValueError("Vocabulary keys must be non-empty")
        entry.location = self._check_vector(entry.location, "location")
        entry.context = self._check_vector(entry.context, "context")
        self._entries[word] = entry

    def validate_vectors(self) -> None:
        """
        Check that every entry still holds dims-long vectors.

        Vectors can be reassigned wholesale by a trainer, so this runs
        before anything is written to disk.

        Raises:
            ValueError: an entry has a vector of the wrong shape
        """
        for word, entry in self._entries.items():
            for name in ("location", "context"):
                shape = np.shape(getattr(entry, name))
                if shape != (self.dims,):
                    raise ValueError(
                        f"{name} vector of {word!r} must have shape ({self.dims},), got {shape}"
                    )

    def remove(self, word: str) -> Entry:
        self._require_build_phase("remove entry")
        return self._entries.pop(word)

    def increment(self, word: str) -> Entry:
        """Count one occurrence of word, creating its entry on first sight"""
        entry = self._entries.get(word)
        if entry is None:
            return self.create_entry(word, count=1)
        entry.count += 1
        return entry

    def seed(self, entry: Entry) -> None:
        """Draw every coordinate of both vectors uniformly from (-0.5, 0.5]"""
        entry.context[:] = 0.5 - self.rng.random(self.dims)
        entry.location[:] = 0.5 - self.rng.random(self.dims)

    def seed_all(self) -> None:
        for entry in self._entries.values():
            self.seed(entry)

    def compact(self, min_count: Optional[int] = None) -> int:
        """
        Remove every entry whose count is below min_count.

        Args:
            min_count: Threshold (defaults to the configured minimum count)

        Returns:
            Number of entries removed
        """
        self._require_build_phase("compact")
        threshold = self.config.min_count if min_count is None else min_count

        doomed = [word for word, entry in self._entries.items() if entry.count < threshold]
        for word in doomed:
            del self._entries[word]

        if doomed:
            logger.debug(f"Compaction removed {len(doomed)} entries below count {threshold}, {len(self)} remain")
        return len(doomed)

    def load(self, path: Union[str, Path], discard_count: bool = False) -> bool:
        """
        Restore entries from a binary model file.

        Args:
            path: Model file
            discard_count: Keep the counts already in the store instead of
                the persisted ones (fresh retrain over a rescanned corpus)

        Returns:
            True if the file was read into the store
        """
        self._require_build_phase("load")
        from .persistence import ModelSerializer
        return ModelSerializer(self.dims).load_into(self, path, discard_count=discard_count)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the store to a binary model file, backing up any existing one"""
        from .persistence import ModelSerializer
        return ModelSerializer(self.dims).save(self, path)

    def freeze(self) -> None:
        """Enter the serve phase; there is no way back to building"""
        if self._phase is StorePhase.SERVE:
            return
        self._phase = StorePhase.SERVE
        logger.info(f"Store frozen for serving: {len(self)} entries, {self.dims} dims")

    def vectors(self, use_context: bool = False) -> Tuple[List[str], np.ndarray]:
        """
        Stack all vectors of one kind in iteration order.

        Returns:
            (keys, matrix) where matrix has shape (len(store), dims)
        """
        keys = list(self._entries)
        matrix = np.empty((len(keys), self.dims), dtype=np.float64)
        for row, key in enumerate(keys):
            entry = self._entries[key]
            matrix[row] = entry.context if use_context else entry.location
        return keys, matrix

    def get_statistics(self) -> Dict[str, object]:
        """Get store statistics"""
        counts = [entry.count for entry in self._entries.values()]
        return {
            "entries": len(self),
            "dims": self.dims,
            "phase": self._phase.value,
            "min_count": self.config.min_count,
            "max_size": self.config.max_size,
            "total_count": int(sum(counts)),
            "lowest_count": min(counts) if counts else None,
            "highest_count": max(counts) if counts else None,
        }
