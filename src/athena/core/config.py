"""Configuration management for ATHENA"""

import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

# Load .env file if exists
load_dotenv()


class Config:
    """Central configuration for the ATHENA embedding store"""

    def __init__(self):
        # Embedding store shape
        self.DIMS = int(os.getenv("ATHENA_DIMS", "128"))
        self.MAX_SIZE = int(float(os.getenv("ATHENA_MAX_SIZE", "1e6")))
        self.MIN_COUNT = int(os.getenv("ATHENA_MIN_COUNT", "16"))

        # Reproducible seeding (unset means a fresh entropy source)
        seed = os.getenv("ATHENA_RANDOM_SEED")
        self.RANDOM_SEED = int(seed) if seed else None

        # Data files
        self.DATA_DIR = os.getenv("ATHENA_DATA_DIR", "./data")
        self.CORPUS_FILE = os.getenv("ATHENA_CORPUS_FILE", "corpus_1.txt")
        self.BIGRAM_FILE = os.getenv("ATHENA_BIGRAM_FILE", "bigrams.txt")
        self.MODEL_FILE = os.getenv("ATHENA_MODEL_FILE", "model.bin")

        # Query defaults
        self.NEAREST_COUNT = int(os.getenv("ATHENA_NEAREST_COUNT", "10"))

        # Logging configuration
        self.LOG_LEVEL = os.getenv("ATHENA_LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("ATHENA_LOG_FORMAT", "json")
        self.LOG_FILE = os.getenv("ATHENA_LOG_FILE", "./logs/athena.log")

        # Create necessary directories
        self._create_directories()

    def _create_directories(self):
        """Create necessary directories if they don't exist"""
        dirs = [Path(self.DATA_DIR)]
        if self.LOG_FILE:
            dirs.append(Path(self.LOG_FILE).parent)
        for dir_path in dirs:
            dir_path.mkdir(parents=True, exist_ok=True)

    def resolve(self, file_name: str) -> Path:
        """
        Resolve a data file name against the data directory

        Absolute paths are returned unchanged.
        """
        path = Path(file_name)
        if path.is_absolute():
            return path
        return Path(self.DATA_DIR) / path

    @property
    def corpus_path(self) -> Path:
        return self.resolve(self.CORPUS_FILE)

    @property
    def bigram_path(self) -> Path:
        return self.resolve(self.BIGRAM_FILE)

    @property
    def model_path(self) -> Path:
        return self.resolve(self.MODEL_FILE)

    def get_nearest_count(self, count: Optional[int] = None) -> int:
        """
        Get neighbour count with fallback to default

        Args:
            count: Optional count override

        Returns:
            Count to use (provided or default)
        """
        return self.NEAREST_COUNT if count is None else count

    def validate(self) -> List[str]:
        """
        Validate configuration

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.DIMS < 1:
            errors.append(f"ATHENA_DIMS must be positive, got {self.DIMS}")

        if self.MIN_COUNT < 1:
            errors.append(f"ATHENA_MIN_COUNT must be positive, got {self.MIN_COUNT}")

        if self.MAX_SIZE < 1:
            errors.append(f"ATHENA_MAX_SIZE must be positive, got {self.MAX_SIZE}")

        if self.NEAREST_COUNT < 1:
            errors.append(f"ATHENA_NEAREST_COUNT must be positive, got {self.NEAREST_COUNT}")

        if self.LOG_FORMAT not in ("json", "text"):
            errors.append(f"ATHENA_LOG_FORMAT must be 'json' or 'text', got {self.LOG_FORMAT}")

        if not self.corpus_path.exists():
            errors.append(f"Corpus file not found: {self.corpus_path}")

        return errors

    def __repr__(self):
        return f"<ATHENA Config: dims={self.DIMS}, min_count={self.MIN_COUNT}, data={self.DATA_DIR}>"


# Global config instance
config = Config()

def get_config() -> Config:
    """Get global config instance"""
    return config
