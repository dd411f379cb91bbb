#!/usr/bin/env python3
"""Evaluate a saved network on one of the MNIST splits."""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from digitnet.config import DEFAULT_CONFIG
from digitnet.data import IDXFormatError, load_split
from digitnet.logging_config import configure_logging
from digitnet.persistence import NetworkFormatError, load_network


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate a trained digit recognition network")
    parser.add_argument("--network", type=Path, default=DEFAULT_CONFIG.network_path, help="Path to the saved network file")
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_CONFIG.data_dir, help="Directory holding the MNIST IDX files")
    parser.add_argument("--split", choices=["training", "test"], default="test", help="Which split to evaluate")
    parser.add_argument("--max-samples", type=int, default=None, help="Optional cap on evaluated samples")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()

    try:
        network = load_network(args.network)
        dataset = load_split(args.data_dir, args.split, augment=True, max_length=args.max_samples)
    except (NetworkFormatError, IDXFormatError, OSError) as exc:
        print(f"Evaluation failed: {exc}", file=sys.stderr)
        sys.exit(1)

    report = network.evaluate(dataset)
    for label in range(len(report.total)):
        print(f"{label}: {report.class_accuracy(label):6.2f}% ({report.correct[label]}/{report.total[label]})")
    print(f"{args.split.title()} accuracy: {report.accuracy:.2f}%")


if __name__ == "__main__":
    main()
