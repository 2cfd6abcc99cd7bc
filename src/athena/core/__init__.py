"""
ATHENA core: configuration, logging and the error taxonomy.
"""

from .config import Config, get_config
from .logger import get_logger
from .exceptions import (
    AthenaError,
    ResourceNotFound,
    FormatMismatch,
    ModelFormatError,
    StoreFrozenError,
)

# Export main components
__all__ = [
    "Config",
    "get_config",
    "get_logger",
    "AthenaError",
    "ResourceNotFound",
    "FormatMismatch",
    "ModelFormatError",
    "StoreFrozenError",
]
