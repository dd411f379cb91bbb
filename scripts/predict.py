#!/usr/bin/env python3
"""Classify the handwritten digit in an image file using a saved network."""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


import numpy as np

from digitnet.config import DEFAULT_CONFIG
from digitnet.inference import load_bitmap_from_path, predict_digit
from digitnet.persistence import load_network


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Predict the digit drawn in a greyscale image")
    parser.add_argument("--network", type=Path, default=DEFAULT_CONFIG.network_path, help="Path to the saved network file")
    parser.add_argument("--image", type=Path, required=True, help="Path to an image of a single digit (PNG, JPEG, etc.)")
    parser.add_argument("--invert", action="store_true", help="Treat the image as dark strokes on a light background")
    parser.add_argument("--top-k", type=int, default=3, help="Show the top-k most likely digits")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    network = load_network(args.network)
    bitmap = load_bitmap_from_path(args.image, DEFAULT_CONFIG.image_size, invert=args.invert)
    digit, activation, outputs = predict_digit(network, bitmap)

    print(f"Prediction: {digit}")
    print(f"Activation: {activation:.4f}")

    top_k = min(args.top_k, len(outputs))
    indices = np.argsort(outputs)[::-1][:top_k]
    print("Top candidates:")
    for idx in indices:
        print(f"  {int(idx)} -> {outputs[idx]:.4f}")


if __name__ == "__main__":
    main()
