"""Labelled samples and loaders for paired IDX files."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..matrix import Matrix
from .idx import DEFAULT_NUM_CLASSES, IDXReader

logger = logging.getLogger(__name__)

SPLITS = ("training", "test")


@dataclass(frozen=True, slots=True)
class DataPoint:
    """One labelled example: an ``n x 1`` feature column and a one-hot label column."""

    data: Matrix
    label: Matrix

    @property
    def target(self) -> int:
        return self.label.argmax()[0]


def load_dataset(
    data_path: Path | str,
    labels_path: Path | str,
    augment: bool = False,
    max_length: int | None = None,
    num_classes: int = DEFAULT_NUM_CLASSES,
) -> list[DataPoint]:
    """Pair the records of a data file and a label file by position.

    The result is truncated to the shorter of the two files and, when given, to
    ``max_length``.
    """
    with IDXReader.open(data_path, num_classes=num_classes) as data, IDXReader.open(
        labels_path, num_classes=num_classes
    ) as labels:
        count = min(data.length, labels.length)
        if max_length is not None:
            if max_length < 0:
                raise ValueError(f"max_length must be non-negative, got {max_length}")
            count = min(count, max_length)
        if data.length != labels.length:
            logger.warning(
                "Record count mismatch: %s has %d records, %s has %d",
                data.name, data.length, labels.name, labels.length,
            )
        dataset = [DataPoint(data.next_record(augment), labels.next_record()) for _ in range(count)]

    logger.info("Loaded %d samples from %s", len(dataset), data_path)
    return dataset


def split_paths(data_dir: Path, split: str) -> tuple[Path, Path]:
    """Locate the data and label files for ``split``, preferring uncompressed files."""
    if split not in SPLITS:
        raise ValueError(f"Unknown split '{split}', expected one of {SPLITS}")
    paths = []
    for kind in ("data", "labels"):
        plain = data_dir / f"{split}_{kind}"
        compressed = plain.with_name(plain.name + ".gz")
        if plain.exists():
            paths.append(plain)
        elif compressed.exists():
            paths.append(compressed)
        else:
            raise FileNotFoundError(f"Missing {split} {kind} file under {data_dir}")
    return paths[0], paths[1]


def load_split(
    data_dir: Path,
    split: str,
    augment: bool = False,
    max_length: int | None = None,
    num_classes: int = DEFAULT_NUM_CLASSES,
) -> list[DataPoint]:
    data_path, labels_path = split_paths(data_dir, split)
    return load_dataset(data_path, labels_path, augment=augment, max_length=max_length, num_classes=num_classes)
