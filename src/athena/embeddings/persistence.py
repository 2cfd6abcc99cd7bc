"""
Binary persistence for embedding stores.

Model file layout (little-endian):

    int32   entry count
    int32   dims
    repeat entry count times:
        string  key       7-bit encoded varint byte length, then UTF-8 bytes
        int32   count
        double  location[dims]
        double  context[dims]

An existing model file is renamed to a timestamped backup before every save.
"""

import struct
import numpy as np
from typing import BinaryIO, List, Optional, Tuple, Union
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from athena.core.logger import get_logger
from athena.core.exceptions import FormatMismatch, ModelFormatError, ResourceNotFound
from .store import EmbeddingStore, Entry

logger = get_logger(__name__)

_INT32 = struct.Struct("<i")
_HEADER = struct.Struct("<ii")
_VECTOR_DTYPE = np.dtype("<f8")
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M"

@dataclass
class ModelRecord:
    """One decoded entry of a model file"""
    key: str
    count: int
    location: np.ndarray
    context: np.ndarray

def write_string(stream: BinaryIO, value: str) -> None:
    """Write a string as a varint byte length followed by UTF-8 bytes"""
    data = value.encode("utf-8")
    length = len(data)
    prefix = bytearray()
    while length >= 0x80:
        prefix.append((length & 0x7F) | 0x80)
        length >>= 7
    prefix.append(length)
    stream.write(bytes(prefix))
    stream.write(data)

def read_string(stream: BinaryIO) -> str:
    length = 0
    shift = 0
    while True:
        raw = stream.read(1)
        if not raw:
            raise ModelFormatError("Unexpected end of file while reading string length")
        byte = raw[0]
        length |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
        if shift > 28:
            raise ModelFormatError("String length prefix is too long")

    data = _read_exact(stream, length)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ModelFormatError(f"Invalid UTF-8 key: {e}") from e

def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ModelFormatError(f"Unexpected end of file: wanted {size} bytes, got {len(data)}")
    return data

def backup_path(path: Path, now: Optional[datetime] = None) -> Path:
    """
    Pick the backup name for an existing model file.

    model.bin becomes model_<YYYYMMDDHHMM>.bak next to it; a numeric suffix
    is appended when that name is already taken.
    """
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    candidate = path.with_name(f"{path.stem}_{stamp}.bak")
    suffix = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}_{stamp}_{suffix}.bak")
        suffix += 1
    return candidate

class ModelSerializer:
    """Reads and writes the binary model format for a fixed dimensionality"""

    def __init__(self, dims: int):
        self.dims = dims

    def write(self, stream: BinaryIO, store: EmbeddingStore) -> int:
        """Serialize every entry in store iteration order"""
        if store.dims != self.dims:
            raise ValueError(f"Store has {store.dims} dims, serializer expects {self.dims}")
        store.validate_vectors()

        stream.write(_HEADER.pack(len(store), self.dims))
        written = 0
        for key, entry in store.items():
            write_string(stream, key)
            stream.write(_INT32.pack(entry.count))
            stream.write(np.asarray(entry.location, dtype=_VECTOR_DTYPE).tobytes())
            stream.write(np.asarray(entry.context, dtype=_VECTOR_DTYPE).tobytes())
            written += 1
        return written

    def read_header(self, stream: BinaryIO) -> Tuple[int, int]:
        entry_count, dims = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        if entry_count < 0:
            raise ModelFormatError(f"Negative entry count in header: {entry_count}")
        return entry_count, dims

    def read(self, stream: BinaryIO) -> List[ModelRecord]:
        """
        Decode a whole model stream.

        Raises:
            FormatMismatch: header dims differ from this serializer's dims
            ModelFormatError: stream is truncated or malformed
        """
        entry_count, dims = self.read_header(stream)
        if dims != self.dims:
            raise FormatMismatch(self.dims, dims)

        vector_bytes = self.dims * _VECTOR_DTYPE.itemsize
        records = []
        for _ in range(entry_count):
            key = read_string(stream)
            if not key:
                raise ModelFormatError("Empty vocabulary key in model file")
            (count,) = _INT32.unpack(_read_exact(stream, _INT32.size))
            location = np.frombuffer(_read_exact(stream, vector_bytes), dtype=_VECTOR_DTYPE).astype(np.float64)
            context = np.frombuffer(_read_exact(stream, vector_bytes), dtype=_VECTOR_DTYPE).astype(np.float64)
            records.append(ModelRecord(key=key, count=count, location=location, context=context))
        return records

    def save(self, store: EmbeddingStore, path: Union[str, Path]) -> Path:
        """
        Save store to path, renaming any existing file to a backup first.

        Returns:
            Path of the written model file
        """
        if store.dims != self.dims:
            raise ValueError(f"Store has {store.dims} dims, serializer expects {self.dims}")
        store.validate_vectors()

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.exists():
            backup = backup_path(path)
            path.rename(backup)
            logger.info(f"Backed up previous model to {backup}")

        logger.info(f"Saving model: {len(store)} entries, {self.dims} dims -> {path}")
        with open(path, "wb") as stream:
            self.write(stream, store)
        return path

    def load_into(self, store: EmbeddingStore, path: Union[str, Path], discard_count: bool = False) -> bool:
        """
        Restore entries from path into store.

        Vectors are always restored verbatim. With discard_count the
        persisted counts are ignored: keys already in the store keep their
        scanned count and new keys start at zero.

        Returns:
            True if entries were loaded, False if the file is absent or was
            written with a different dimensionality
        """
        path = Path(path)
        try:
            if not path.exists():
                raise ResourceNotFound(path, kind="Model file")

            logger.info(f"Loading model from {path}")
            with open(path, "rb") as stream:
                records = self.read(stream)

        except ResourceNotFound as e:
            logger.info(f"No model loaded: {e}")
            return False
        except FormatMismatch as e:
            logger.warning(f"Model not loaded from {path}: {e}")
            return False

        created = 0
        for record in records:
            entry = store.get(record.key)
            if entry is None:
                store.put(record.key, Entry(
                    count=0 if discard_count else record.count,
                    location=record.location,
                    context=record.context,
                ))
                created += 1
                continue

            if not discard_count:
                entry.count = record.count
            entry.location[:] = record.location
            entry.context[:] = record.context

        logger.info(f"Loaded {len(records)} entries ({created} new) from {path}")
        return True
