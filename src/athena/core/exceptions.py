"""
Error taxonomy for the ATHENA embedding store.

Missing files and dimensionality mismatches are soft failures: the component
that meets them logs the problem and leaves the store unmodified. The
exceptions below carry those conditions between layers.
"""

from pathlib import Path
from typing import Union


class AthenaError(Exception):
    """Base class for all ATHENA errors"""


class ResourceNotFound(AthenaError):
    """A corpus, bigram or model file is absent"""

    def __init__(self, path: Union[str, Path], kind: str = "file"):
        self.path = Path(path)
        self.kind = kind
        super().__init__(f"{kind} not found: {self.path}")


class FormatMismatch(AthenaError):
    """Persisted dimensionality differs from the store's configured dims"""

    def __init__(self, expected: int, found: int, path: Union[str, Path, None] = None):
        self.expected = expected
        self.found = found
        self.path = Path(path) if path is not None else None
        location = f" in {self.path}" if self.path else ""
        super().__init__(f"Dimensions don't match{location}: expected {expected}, found {found}")


class ModelFormatError(AthenaError):
    """Model file is truncated or otherwise unreadable"""


class StoreFrozenError(AthenaError):
    """Structural mutation attempted on a store in the serve phase"""
