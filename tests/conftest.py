"""
conftest.py
~~~~~~~~~~~

Shared fixtures: seeded generators and writers for synthetic IDX files.
"""

import gzip
import struct

import numpy as np
import pytest

from digitnet.data import DataPoint
from digitnet.matrix import Matrix


def idx_bytes(dims, payload, type_tag=0x08):
    """Build the raw bytes of an IDX file with the given dimensions and body."""
    header = bytes([0, 0, type_tag, len(dims)]) + struct.pack(f">{len(dims)}I", *dims)
    return header + bytes(payload)


@pytest.fixture
def rng():
    """A generator with a fixed seed."""
    return np.random.default_rng(1234)


@pytest.fixture
def write_idx(tmp_path):
    """Factory writing an IDX file under tmp_path and returning its path."""
    def _write(name, dims, payload, compress=False):
        path = tmp_path / name
        data = idx_bytes(dims, payload)
        if compress:
            with gzip.open(path, "wb") as f:
                f.write(data)
        else:
            path.write_bytes(data)
        return path

    return _write


def one_hot(index, size=2):
    values = np.zeros(size)
    values[index] = 1.0
    return Matrix(values)


@pytest.fixture
def separable_points():
    """Two well separated classes with the bias feature already appended."""
    def _build(copies):
        points = []
        for _ in range(copies):
            points.append(DataPoint(Matrix([0.0, 0.0, 1.0]), one_hot(0)))
            points.append(DataPoint(Matrix([1.0, 1.0, 1.0]), one_hot(1)))
        return points

    return _build
