"""Binary serialisation of trained networks.

Layout, all integers and floats big-endian:

- 6 bytes: the ASCII signature ``neural``
- 4 bytes: number of layers, counting the input layer
- 4 bytes per layer: number of neurons, input layer first
- 8 bytes per weight: IEEE-754 doubles, one weight matrix after another,
  each stored row by row
"""
from __future__ import annotations

import logging
import struct
from pathlib import Path

import numpy as np

from .matrix import Matrix
from .models.network import Network

logger = logging.getLogger(__name__)

SIGNATURE = b"neural"
_COUNT = struct.Struct(">I")
_HEADER_SIZE = len(SIGNATURE) + _COUNT.size
_WEIGHT_DTYPE = np.dtype(">f8")


class NetworkFormatError(ValueError):
    """Raised when a saved network cannot be decoded."""


def encoded_size(sizes: list[int]) -> int:
    weights = sum(rows * cols for cols, rows in zip(sizes, sizes[1:]))
    return _HEADER_SIZE + _COUNT.size * len(sizes) + _WEIGHT_DTYPE.itemsize * weights


def encode_network(network: Network) -> bytes:
    sizes = network.sizes
    parts = [SIGNATURE, _COUNT.pack(len(sizes))]
    parts.extend(_COUNT.pack(size) for size in sizes)
    parts.extend(w.to_numpy().astype(_WEIGHT_DTYPE).tobytes(order="C") for w in network.weights)
    return b"".join(parts)


def decode_network(
    payload: bytes,
    rng: np.random.Generator | None = None,
    strict: bool = True,
) -> Network:
    if len(payload) < _HEADER_SIZE or payload[: len(SIGNATURE)] != SIGNATURE:
        raise NetworkFormatError("The saved neural network is corrupted: missing 'neural' signature")

    (layer_count,) = _COUNT.unpack_from(payload, len(SIGNATURE))
    if layer_count < 2:
        raise NetworkFormatError(f"The saved neural network has {layer_count} layers, at least 2 are required")
    sizes_end = _HEADER_SIZE + _COUNT.size * layer_count
    if len(payload) < sizes_end:
        raise NetworkFormatError("The saved neural network is truncated inside the layer sizes")
    sizes = list(struct.unpack_from(f">{layer_count}I", payload, _HEADER_SIZE))
    if 0 in sizes:
        raise NetworkFormatError(f"The saved neural network has an empty layer: {sizes}")

    expected = encoded_size(sizes)
    if len(payload) != expected:
        raise NetworkFormatError(
            f"The saved neural network has {len(payload)} bytes, expected {expected} for layer sizes {sizes}"
        )

    weights = []
    offset = sizes_end
    for cols, rows in zip(sizes, sizes[1:]):
        values = np.frombuffer(payload, dtype=_WEIGHT_DTYPE, count=rows * cols, offset=offset)
        weights.append(Matrix(values.astype(np.float64).reshape(rows, cols), strict=strict))
        offset += values.nbytes
    return Network(weights, rng=rng, strict=strict)


def save_network(network: Network, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(encode_network(network))
    logger.info("Saved network %s to %s", network.sizes, target)


def load_network(
    source: Path,
    rng: np.random.Generator | None = None,
    strict: bool = True,
) -> Network:
    if not source.exists():
        raise FileNotFoundError(f"No saved network at {source}")
    network = decode_network(source.read_bytes(), rng=rng, strict=strict)
    logger.info("Loaded network %s from %s", network.sizes, source)
    return network
