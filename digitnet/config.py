"""Default configuration values for the digit recognition project."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectConfig:
    data_dir: Path
    artifacts_dir: Path
    image_size: int = 28
    num_classes: int = 10

    @property
    def bitmap_shape(self) -> tuple[int, int]:
        return (self.image_size, self.image_size)

    @property
    def input_dim(self) -> int:
        # One extra input carries the constant bias feature.
        return self.image_size * self.image_size + 1

    @property
    def network_path(self) -> Path:
        return self.artifacts_dir / "network"


@dataclass(frozen=True)
class TrainingConfig:
    epochs: int = 30
    batch_size: int = 10
    learning_rate: float = 0.5
    regularization: float = 5.0
    hidden_sizes: tuple[int, ...] = (101,)
    seed: int | None = None
    max_training: int | None = None
    max_test: int | None = None

    def layer_sizes(self, input_dim: int, num_classes: int) -> tuple[int, ...]:
        return (input_dim, *self.hidden_sizes, num_classes)


DEFAULT_CONFIG = ProjectConfig(
    data_dir=Path("data"),
    artifacts_dir=Path("artifacts"),
)

DEFAULT_TRAINING_CONFIG = TrainingConfig()
