"""Inference helpers for applying a trained network to images."""
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from .matrix import Matrix
from .models.network import Network


def load_bitmap_from_path(image_path: Path, image_size: int = 28, invert: bool = False) -> np.ndarray:
    """Load an image as a ``image_size x image_size`` array scaled to ``[0, 1]``.

    MNIST digits are light strokes on a dark background; pass ``invert`` for
    dark-on-light drawings.
    """
    image = Image.open(image_path).convert("L")
    resized = image.resize((image_size, image_size), Image.Resampling.LANCZOS)
    arr = np.asarray(resized, dtype=np.float64) / 255.0
    if invert:
        arr = 1.0 - arr
    return arr


def prepare_input(bitmap: np.ndarray, augment: bool = True) -> Matrix:
    if bitmap.ndim == 2:
        flattened = bitmap.reshape(-1)
    elif bitmap.ndim == 3 and bitmap.shape[0] == 1:
        flattened = bitmap.reshape(-1)
    else:
        raise ValueError("Bitmap must be a 2D array with shape (H, W)")
    if augment:
        flattened = np.append(flattened, 1.0)
    return Matrix(flattened)


def predict_digit(network: Network, bitmap: np.ndarray, augment: bool = True) -> tuple[int, float, np.ndarray]:
    outputs = network.feed_forward(prepare_input(bitmap, augment=augment)).to_numpy().reshape(-1)
    predicted = int(np.argmax(outputs))
    return predicted, float(outputs[predicted]), outputs


def save_bitmap(data: Matrix, target: Path, image_size: int = 28) -> None:
    """Write a feature column back out as a greyscale image.

    A trailing bias feature, if present, is dropped.
    """
    pixels = data.to_numpy().reshape(-1)[: image_size * image_size]
    if pixels.size != image_size * image_size:
        raise ValueError(f"Expected at least {image_size * image_size} values, got {pixels.size}")
    grey = np.clip(np.round(pixels * 255.0), 0, 255).astype(np.uint8)
    target.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(grey.reshape(image_size, image_size)).save(target)
