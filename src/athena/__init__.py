"""
ATHENA - word embedding explorer

Learns a bounded vocabulary from a text corpus, keeps a location and a
context vector per word, and answers nearest neighbour and analogy queries.
"""

__version__ = "0.3.0"

# Import main components
from .core.config import get_config
from .core.logger import get_logger
from .model import EmbeddingModel, BuildReport, ModelPaths

__all__ = [
    "get_config",
    "get_logger",
    "EmbeddingModel",
    "BuildReport",
    "ModelPaths",
]
