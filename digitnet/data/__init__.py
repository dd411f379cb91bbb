"""Data helpers for digitnet."""
from .dataset import DataPoint, load_dataset, load_split, split_paths
from .idx import IDXFormatError, IDXReader

__all__ = [
    "DataPoint",
    "IDXFormatError",
    "IDXReader",
    "load_dataset",
    "load_split",
    "split_paths",
]
