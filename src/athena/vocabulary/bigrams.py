"""
Bigram substitution table and phrase tokeniser.

Multi-word phrases are stored in the vocabulary as single tokens joined by
WORD_JOINER ("new_york"). The table maps the human readable form
("new york") back to the joined token so that free text typed by a user
resolves to vocabulary keys.
"""

from typing import Dict, Iterable, List, Optional, Union
from pathlib import Path

from athena.core.logger import get_logger
from athena.embeddings.store import EmbeddingStore

logger = get_logger(__name__)

WORD_JOINER = "_"

def load_bigrams(store: EmbeddingStore, path: Union[str, Path], min_count: Optional[int] = None) -> int:
    """
    Add pre-computed joined tokens to the store.

    Each line of the file holds one joined token. Tokens not yet in the
    store are created with the pruning threshold as their count (so the
    next compaction keeps them) and seeded immediately. A missing file is
    not an error.

    Args:
        store: Store to populate
        path: Bigram file
        min_count: Count for new entries (defaults to the store's minimum count)

    Returns:
        Number of entries added
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No bigram file at {path}, skipping")
        return 0

    count = store.config.min_count if min_count is None else min_count
    added = 0
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            token = line.strip()
            if not token or token in store:
                continue
            store.create_entry(token, count=count, seed=True)
            added += 1

    logger.info(f"Loaded {added} bigrams from {path}")
    return added

class BigramTable:
    """
    Ordered phrase -> joined token substitutions.

    Substitutions are applied by literal string replacement in insertion
    order. There is no longest-match priority, so overlapping phrases
    ("new york" and "york city") tokenise differently depending on which
    was registered first.
    """

    def __init__(self, joiner: str = WORD_JOINER):
        self.joiner = joiner
        self._substitutions: Dict[str, str] = {}

    @classmethod
    def from_keys(cls, keys: Iterable[str], joiner: str = WORD_JOINER) -> "BigramTable":
        """Register every key containing the joiner, in iteration order"""
        table = cls(joiner)
        for key in keys:
            if joiner in key:
                table.add(key)
        return table

    def add(self, token: str) -> None:
        phrase = token.replace(self.joiner, " ")
        if phrase not in self._substitutions:
            self._substitutions[phrase] = token

    def __len__(self) -> int:
        return len(self._substitutions)

    def __contains__(self, phrase: str) -> bool:
        return phrase in self._substitutions

    def items(self):
        return self._substitutions.items()

    def substitute(self, phrase: str) -> str:
        for spaced, joined in self._substitutions.items():
            phrase = phrase.replace(spaced, joined)
        return phrase

    def tokenise(self, phrase: str) -> List[str]:
        """Apply substitutions, then split on whitespace"""
        return self.substitute(phrase).split()
