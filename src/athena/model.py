"""
Embedding model: build orchestration and query facade.

Ties the vocabulary builder, bigram table, embedding store, similarity
engine and persistence together. A model is built once (vocabulary scan,
bigram load, model load, compaction) and then serves queries; retraining
means constructing a new model.
"""

import numpy as np
from typing import Iterator, List, Optional, Union
from dataclasses import dataclass, field
from pathlib import Path

from athena.core.logger import get_logger
from athena.core.config import Config, get_config
from athena.core.exceptions import ResourceNotFound
from athena.embeddings.store import EmbeddingStore, StoreConfig
from athena.embeddings.similarity import Neighbour, SimilarityEngine
from athena.vocabulary.builder import ProgressCallback, VocabularyBuilder, VocabularyStats
from athena.vocabulary.bigrams import BigramTable, load_bigrams

logger = get_logger(__name__)

@dataclass
class ModelPaths:
    """Files a model reads and writes"""
    corpus: Path
    bigrams: Path
    model: Path

    @classmethod
    def from_config(cls, config: Config) -> "ModelPaths":
        return cls(corpus=config.corpus_path, bigrams=config.bigram_path, model=config.model_path)

@dataclass
class BuildReport:
    """What happened while building a model"""
    vocabulary: Optional[VocabularyStats] = None
    bigrams_added: int = 0
    model_loaded: bool = False
    entries_removed: int = 0
    vocabulary_size: int = 0
    bigram_phrases: int = 0
    warnings: List[str] = field(default_factory=list)

class EmbeddingModel:
    """
    Word embedding model for exploratory queries.

    Usage:
        model = EmbeddingModel()
        model.build(learn_vocab=False)
        model.nearest("king man: woman", 10)
    """

    def __init__(self,
                 paths: Optional[ModelPaths] = None,
                 store_config: Optional[StoreConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        self.paths = paths or ModelPaths.from_config(get_config())
        self.store = EmbeddingStore(store_config, rng=rng)
        self.bigrams = BigramTable()
        self.engine = SimilarityEngine(self.store, tokeniser=self.tokenise)
        self.progress_callback = progress_callback
        self.report: Optional[BuildReport] = None
        self._build_started = False

    @property
    def dims(self) -> int:
        return self.store.dims

    def __len__(self) -> int:
        return len(self.store)

    def build(self, learn_vocab: bool = False) -> BuildReport:
        """
        Populate the store and switch it to serving.

        Args:
            learn_vocab: Rescan the corpus for a fresh vocabulary. Counts
                persisted in an existing model file are then ignored while
                its vectors are still restored.

        Returns:
            Report of the build steps; soft failures are listed in warnings
        """
        if self._build_started:
            raise RuntimeError("Model already built; create a new model to retrain")
        self._build_started = True

        report = BuildReport()
        min_count = self.store.config.min_count

        if learn_vocab:
            builder = VocabularyBuilder(self.store, progress_callback=self.progress_callback)
            try:
                report.vocabulary = builder.learn_vocabulary(self.paths.corpus)
            except ResourceNotFound as e:
                logger.error(f"Vocabulary step skipped: {e}")
                report.warnings.append(str(e))

        report.bigrams_added = load_bigrams(self.store, self.paths.bigrams, min_count)
        report.model_loaded = self.store.load(self.paths.model, discard_count=learn_vocab)
        if not report.model_loaded and self.paths.model.exists():
            report.warnings.append(f"Model file {self.paths.model} was not loaded")

        report.entries_removed = self.store.compact(min_count)

        self.bigrams = BigramTable.from_keys(self.store.keys())
        self.store.freeze()

        report.vocabulary_size = len(self.store)
        report.bigram_phrases = len(self.bigrams)
        self.report = report

        if not len(self.store):
            logger.warning("Model is empty; queries will only return placeholder results")
        logger.info(
            f"Model built: {report.vocabulary_size} entries, {report.bigram_phrases} bigram phrases",
            extra={"extra_fields": {
                "vocabulary_size": report.vocabulary_size,
                "bigram_phrases": report.bigram_phrases,
                "model_loaded": report.model_loaded,
            }},
        )
        return report

    def tokenise(self, phrase: str) -> List[str]:
        return self.bigrams.tokenise(phrase)

    def nearest(self, phrase: str, count: Optional[int] = None, use_context: bool = False) -> List[Neighbour]:
        """Nearest neighbours of phrase by location (or context) vector"""
        return self.engine.nearest(phrase, get_config().get_nearest_count(count), use_context)

    def find_text(self, phrase: str) -> Iterator[str]:
        """
        Yield every corpus line that contains phrase verbatim.

        Raises:
            ResourceNotFound: corpus file does not exist
        """
        if not self.paths.corpus.exists():
            raise ResourceNotFound(self.paths.corpus, kind="Corpus file")

        with open(self.paths.corpus, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if phrase in line:
                    yield line

    def save(self, path: Union[str, Path, None] = None) -> Path:
        return self.store.save(path or self.paths.model)
