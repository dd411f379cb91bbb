"""Reader for the IDX binary format used by the MNIST database.

See http://yann.lecun.com/exdb/mnist/ for the format description. Only unsigned
byte files with one to three dimensions are supported.

Files with more than one dimension are split into records along the first
dimension and each record is flattened into a column vector: a ``10x6x4`` file
yields ten ``24x1`` matrices. One-dimensional files hold class labels and every
byte becomes a one-hot column vector, so byte ``4`` decodes to
``[0, 0, 0, 0, 1, 0, 0, 0, 0, 0]``.
"""
from __future__ import annotations

import gzip
import logging
import math
import struct
from pathlib import Path
from typing import BinaryIO, Iterator

import numpy as np

from ..matrix import Matrix

logger = logging.getLogger(__name__)

UNSIGNED_BYTE = 0x08
MAX_DIMENSIONS = 3
DEFAULT_NUM_CLASSES = 10


class IDXFormatError(ValueError):
    """Raised when an IDX stream is corrupted or uses an unsupported layout."""


class IDXReader:
    """Forward-only cursor over the records of an IDX stream.

    The header is validated on construction. ``length`` is the number of
    records and ``record_size`` the number of bytes per record, or 0 for a
    label file.
    """

    def __init__(self, stream: BinaryIO, name: str | None = None, num_classes: int = DEFAULT_NUM_CLASSES) -> None:
        self._stream = stream
        self.name = name or getattr(stream, "name", "<stream>")
        self.num_classes = num_classes
        self._position = 0
        self.dims = self._read_header()
        self.length = self.dims[0]
        self.record_size = math.prod(self.dims[1:]) if len(self.dims) > 1 else 0
        logger.debug("Opened IDX file '%s' with dimensions %s", self.name, self.dims)

    @classmethod
    def open(cls, path: Path | str, num_classes: int = DEFAULT_NUM_CLASSES) -> "IDXReader":
        """Open an IDX file, decompressing it on the fly when it ends in ``.gz``."""
        source = Path(path)
        stream: BinaryIO
        if source.suffix == ".gz":
            stream = gzip.open(source, "rb")  # type: ignore[assignment]
        else:
            stream = source.open("rb")
        try:
            return cls(stream, name=str(source), num_classes=num_classes)
        except BaseException:
            stream.close()
            raise

    def _read_exact(self, count: int) -> bytes:
        try:
            data = self._stream.read(count)
        except (OSError, EOFError) as exc:
            raise IDXFormatError(f"The file '{self.name}' is corrupted: {exc}") from exc
        if len(data) != count:
            raise IDXFormatError(
                f"The file '{self.name}' is truncated: expected {count} bytes, got {len(data)}"
            )
        return data

    def _read_header(self) -> tuple[int, ...]:
        magic = self._read_exact(4)
        if magic[0] != 0 or magic[1] != 0:
            raise IDXFormatError(f"The file '{self.name}' is corrupted: the first two bytes must be zero.")
        if magic[2] != UNSIGNED_BYTE:
            raise IDXFormatError(
                f"The file '{self.name}' has data type 0x{magic[2]:02x}. "
                "Only unsigned byte (0x08) IDX files are supported."
            )
        num_dims = magic[3]
        if num_dims == 0:
            raise IDXFormatError(
                f"The file '{self.name}' has 0 dimensions. The data must have at least one dimension."
            )
        if num_dims > MAX_DIMENSIONS:
            raise IDXFormatError(
                f"The file '{self.name}' has {num_dims} dimensions. Only 1, 2 or 3 dimensions are supported."
            )
        return struct.unpack(f">{num_dims}I", self._read_exact(4 * num_dims))

    def has_more(self) -> bool:
        return self._position < self.length

    def next_record(self, augment: bool = False) -> Matrix:
        """Decode the next record as a column vector.

        Image records are scaled to ``[0, 1]``; with ``augment`` a trailing 1.0
        is appended for use as a bias input. Augmenting does not apply to labels.
        """
        if not self.has_more():
            raise IDXFormatError(f"The file '{self.name}' has no more records (length {self.length}).")

        if self.record_size == 0:
            value = self._read_exact(1)[0]
            if value >= self.num_classes:
                raise IDXFormatError(
                    f"The file '{self.name}' contains label {value}, "
                    f"expected a value below {self.num_classes}."
                )
            one_hot = np.zeros((self.num_classes, 1), dtype=np.float64)
            one_hot[value, 0] = 1.0
            self._position += 1
            return Matrix(one_hot)

        raw = np.frombuffer(self._read_exact(self.record_size), dtype=np.uint8)
        pixels = raw.astype(np.float64) / 255.0
        if augment:
            pixels = np.append(pixels, 1.0)
        self._position += 1
        return Matrix(pixels)

    def __iter__(self) -> Iterator[Matrix]:
        while self.has_more():
            yield self.next_record()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "IDXReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
