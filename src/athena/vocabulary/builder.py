"""
Vocabulary learning from a line-oriented corpus.

Streams the corpus once, counting whitespace separated tokens into an
embedding store. Memory is bounded by compacting the store whenever it
grows past its configured maximum size.
"""

import os
import time
from typing import Callable, Optional, Union
from dataclasses import dataclass
from pathlib import Path

from athena.core.logger import get_logger
from athena.core.exceptions import ResourceNotFound
from athena.embeddings.store import EmbeddingStore

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]

@dataclass
class VocabularyStats:
    """Statistics from a vocabulary pass"""
    lines_read: int = 0
    tokens_read: int = 0
    bytes_read: int = 0
    compactions: int = 0
    entries_removed: int = 0
    vocabulary_size: int = 0
    processing_time: float = 0.0

class VocabularyBuilder:
    """
    Counts token frequencies from a corpus into a store.

    Features:
    - Single streaming pass, one line at a time
    - Periodic compaction once the store exceeds max_size
    - Final compaction and one-time seeding of survivors
    - Byte-based progress reporting
    """

    def __init__(self,
                 store: EmbeddingStore,
                 max_size: Optional[int] = None,
                 min_count: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        self.store = store
        self.max_size = max_size if max_size is not None else store.config.max_size
        self.min_count = min_count if min_count is not None else store.config.min_count
        self.progress_callback = progress_callback

    def _report_progress(self, fraction: float, last_percent: int) -> int:
        if self.progress_callback:
            self.progress_callback(fraction)

        percent = int(fraction * 100)
        if percent > last_percent:
            logger.debug(f"Progress: {fraction:.3%}")
            return percent
        return last_percent

    def learn_vocabulary(self, corpus_path: Union[str, Path]) -> VocabularyStats:
        """
        Count every token of the corpus into the store.

        Args:
            corpus_path: Line-oriented, whitespace tokenised text file

        Returns:
            Statistics about the pass

        Raises:
            ResourceNotFound: corpus file does not exist
        """
        corpus_path = Path(corpus_path)
        if not corpus_path.exists():
            raise ResourceNotFound(corpus_path, kind="Corpus file")

        logger.info(f"Learning vocabulary from {corpus_path}")
        start_time = time.time()
        stats = VocabularyStats()
        total_bytes = os.path.getsize(corpus_path)
        last_percent = -1

        with open(corpus_path, "rb") as f:
            for raw_line in f:
                stats.lines_read += 1
                stats.bytes_read += len(raw_line)

                for word in raw_line.decode("utf-8", errors="replace").split():
                    self.store.increment(word)
                    stats.tokens_read += 1

                if len(self.store) > self.max_size:
                    stats.entries_removed += self.store.compact(self.min_count)
                    stats.compactions += 1

                if total_bytes:
                    last_percent = self._report_progress(stats.bytes_read / total_bytes, last_percent)

        stats.entries_removed += self.store.compact(self.min_count)
        stats.compactions += 1
        self.store.seed_all()

        stats.vocabulary_size = len(self.store)
        stats.processing_time = time.time() - start_time

        logger.info(
            f"Vocab size: {stats.vocabulary_size // 1000}k "
            f"({stats.tokens_read} tokens, {stats.lines_read} lines, "
            f"{stats.compactions} compactions, {stats.processing_time:.2f}s)"
        )
        return stats
