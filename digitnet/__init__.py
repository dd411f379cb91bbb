"""Public API for the handwritten digit recognition project."""
from .config import DEFAULT_CONFIG, DEFAULT_TRAINING_CONFIG, ProjectConfig, TrainingConfig
from .data import DataPoint, IDXFormatError, IDXReader, load_dataset, load_split
from .inference import predict_digit
from .matrix import Matrix, ShapeMismatchError
from .models.network import AccuracyReport, Network
from .persistence import NetworkFormatError, load_network, save_network

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_TRAINING_CONFIG",
    "ProjectConfig",
    "TrainingConfig",
    "DataPoint",
    "IDXFormatError",
    "IDXReader",
    "load_dataset",
    "load_split",
    "Matrix",
    "ShapeMismatchError",
    "AccuracyReport",
    "Network",
    "NetworkFormatError",
    "load_network",
    "save_network",
    "predict_digit",
]
