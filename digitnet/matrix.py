"""Immutable dense matrices backed by NumPy."""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import numpy as np

logger = logging.getLogger(__name__)


class ShapeMismatchError(ValueError):
    """Raised when matrix operands have incompatible shapes."""


class Matrix:
    """A dense ``rows x cols`` matrix of float64 values.

    Every operation returns a new matrix; the stored array is read-only. A
    one-dimensional input becomes a column vector.

    With ``strict=False`` shape mismatches are logged instead of raised and the
    operation is carried out over the overlapping region of the operands.
    """

    __slots__ = ("_values", "_strict")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, values: Any, strict: bool = True) -> None:
        array = np.array(values, dtype=np.float64)
        if array.ndim == 1:
            array = array.reshape(-1, 1)
        if array.ndim != 2:
            raise ValueError(f"Matrix values must be 1D or 2D, got {array.ndim} dimensions")
        if array.size == 0:
            raise ValueError("Matrix must have at least one row and one column")
        array.setflags(write=False)
        self._values = array
        self._strict = strict

    @classmethod
    def _wrap(cls, array: np.ndarray, strict: bool) -> "Matrix":
        # Skips the defensive copy for arrays created inside this module.
        matrix = cls.__new__(cls)
        array.setflags(write=False)
        matrix._values = array
        matrix._strict = strict
        return matrix

    @classmethod
    def zeros(cls, rows: int, cols: int = 1, strict: bool = True) -> "Matrix":
        return cls._wrap(np.zeros((rows, cols), dtype=np.float64), strict)

    @classmethod
    def column(cls, values: Iterable[float], strict: bool = True) -> "Matrix":
        return cls(np.fromiter(values, dtype=np.float64), strict=strict)

    @classmethod
    def random_gaussian(
        cls,
        rows: int,
        cols: int,
        std_dev: float,
        rng: np.random.Generator | None = None,
        strict: bool = True,
    ) -> "Matrix":
        generator = rng if rng is not None else np.random.default_rng()
        return cls._wrap(generator.normal(0.0, std_dev, size=(rows, cols)), strict)

    @property
    def rows(self) -> int:
        return self._values.shape[0]

    @property
    def cols(self) -> int:
        return self._values.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def size(self) -> int:
        return self.rows * self.cols

    @property
    def strict(self) -> bool:
        return self._strict

    def with_strict(self, strict: bool) -> "Matrix":
        """Return the same values with the given shape-checking mode."""
        if strict == self._strict:
            return self
        return Matrix._wrap(self._values, strict)

    def to_numpy(self) -> np.ndarray:
        return self._values.copy()

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return self._values.astype(dtype) if dtype is not None else self._values.copy()

    def __getitem__(self, index: tuple[int, int]) -> float:
        row, col = index
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Index ({row}, {col}) out of bounds for matrix of shape {self.shape}")
        return float(self._values[row, col])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._values, other._values))

    def __repr__(self) -> str:
        return f"Matrix(shape={self.shape}, strict={self._strict})"

    def __str__(self) -> str:
        lines = []
        for row in self._values:
            cells = []
            for value in row:
                text = str(round(float(value), 2))
                if value >= 0:
                    text = " " + text
                cells.append(text.ljust(6))
            lines.append("".join(cells))
        return "\n".join(lines)

    def _mismatch(self, operation: str, symbol: str, other: "Matrix") -> None:
        message = (
            f"Incompatible shapes for {operation}: "
            f"{self.shape} {symbol} {other.shape}"
        )
        if self._strict and other._strict:
            raise ShapeMismatchError(message)
        logger.warning(message)

    def _conformed(self, other: "Matrix") -> np.ndarray:
        """Return ``other``'s values cropped or zero-padded to this shape."""
        if other.shape == self.shape:
            return other._values
        padded = np.zeros(self.shape, dtype=np.float64)
        rows = min(self.rows, other.rows)
        cols = min(self.cols, other.cols)
        padded[:rows, :cols] = other._values[:rows, :cols]
        return padded

    def multiply(self, other: "Matrix | float") -> "Matrix":
        """Matrix product with another matrix, or elementwise scaling by a number."""
        if not isinstance(other, Matrix):
            return Matrix._wrap(self._values * float(other), self._strict)

        strict = self._strict and other._strict
        if self.cols != other.rows:
            self._mismatch("matrix multiplication", "x", other)
            inner = min(self.cols, other.rows)
            return Matrix._wrap(self._values[:, :inner] @ other._values[:inner, :], strict)
        return Matrix._wrap(self._values @ other._values, strict)

    def elementwise_multiply(self, other: "Matrix") -> "Matrix":
        if self.shape != other.shape:
            self._mismatch("element-wise matrix multiplication", "*", other)
        return Matrix._wrap(self._values * self._conformed(other), self._strict and other._strict)

    def add(self, other: "Matrix | None") -> "Matrix":
        """Elementwise sum. ``None`` stands for an empty accumulator and returns ``self``."""
        if other is None:
            return self
        if self.shape != other.shape:
            self._mismatch("matrix addition", "+", other)
        return Matrix._wrap(self._values + self._conformed(other), self._strict and other._strict)

    def subtract(self, other: "Matrix | None") -> "Matrix":
        if other is None:
            return self
        if self.shape != other.shape:
            self._mismatch("matrix subtraction", "-", other)
        return Matrix._wrap(self._values - self._conformed(other), self._strict and other._strict)

    def map(self, func: Callable[[float], float]) -> "Matrix":
        """Apply a scalar function to every element."""
        mapped = np.fromiter((func(float(v)) for v in self._values.flat), dtype=np.float64, count=self.size)
        return Matrix._wrap(mapped.reshape(self.shape), self._strict)

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self._values.T.copy(), self._strict)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def argmax(self) -> tuple[int, int]:
        """Position of the maximum element; ties resolve to the first in row-major order.

        NaN never compares greater, so NaNs are skipped unless the first element
        is NaN, in which case nothing can beat it and ``(0, 0)`` is returned.
        """
        if np.isnan(self._values[0, 0]):
            return 0, 0
        flat_index = int(np.nanargmax(self._values))
        row, col = divmod(flat_index, self.cols)
        return row, col

    def __matmul__(self, other: "Matrix") -> "Matrix":
        return self.multiply(other)

    def __mul__(self, other: float) -> "Matrix":
        if isinstance(other, Matrix):
            return NotImplemented
        return self.multiply(other)

    __rmul__ = __mul__

    def __add__(self, other: "Matrix") -> "Matrix":
        return self.add(other)

    def __sub__(self, other: "Matrix") -> "Matrix":
        return self.subtract(other)
