"""A fully-connected sigmoid network trained with mini-batch gradient descent."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import MutableSequence, Sequence

import numpy as np
from tqdm import tqdm

from ..data.dataset import DataPoint
from ..matrix import Matrix, ShapeMismatchError

logger = logging.getLogger(__name__)


def sigmoid(z: float) -> float:
    # Split on the sign so exp() never overflows.
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


def sigmoid_prime(z: float) -> float:
    s = sigmoid(z)
    return s * (1.0 - s)


@dataclass(frozen=True)
class AccuracyReport:
    """Per-class and overall classification accuracy after an epoch."""

    epoch: int
    correct: tuple[int, ...]
    total: tuple[int, ...]

    @property
    def total_correct(self) -> int:
        return sum(self.correct)

    @property
    def total_count(self) -> int:
        return sum(self.total)

    def class_accuracy(self, label: int) -> float:
        if self.total[label] == 0:
            return 0.0
        return 100.0 * self.correct[label] / self.total[label]

    @property
    def accuracy(self) -> float:
        if self.total_count == 0:
            return 0.0
        return 100.0 * self.total_correct / self.total_count

    def format(self) -> str:
        classes = ", ".join(f"{label}: {self.class_accuracy(label):05.2f}%" for label in range(len(self.total)))
        return f"Epoch {self.epoch}: Accuracy = {{{classes}, Total: {self.accuracy:.2f}%}}"


class Network:
    """Feed-forward network described entirely by its weight matrices.

    ``weights[l]`` maps the activations of layer ``l`` to the weighted inputs of
    layer ``l + 1``. There are no bias vectors: a bias for the first layer is
    obtained by appending a constant 1.0 to every input, which gives
    ``weights[0]`` one extra column. Deeper layers have no bias.
    """

    def __init__(
        self,
        weights: Sequence[Matrix],
        rng: np.random.Generator | None = None,
        strict: bool = True,
    ) -> None:
        if not weights:
            raise ValueError("A network needs at least one weight matrix")
        self.strict = strict
        self.rng = rng if rng is not None else np.random.default_rng()
        for i in range(1, len(weights)):
            if weights[i].cols != weights[i - 1].rows:
                message = (
                    f"Invalid dimensions for weight matrices: layer {i - 1} has shape "
                    f"{weights[i - 1].shape}, layer {i} has shape {weights[i].shape}"
                )
                if strict:
                    raise ShapeMismatchError(message)
                logger.warning(message)
        self._weights: list[Matrix] = [w.with_strict(strict) for w in weights]

    @classmethod
    def from_sizes(
        cls,
        *sizes: int,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        strict: bool = True,
    ) -> "Network":
        """Create a network with random weights for the given layer sizes.

        The first size must already count the constant bias input. Weights are
        drawn with standard deviation ``1/sqrt(fan_in)`` so that weighted inputs
        start out small and the sigmoid neurons are not saturated.
        """
        if len(sizes) < 2:
            raise ValueError("A network needs at least an input and an output layer")
        if any(size < 1 for size in sizes):
            raise ValueError(f"Layer sizes must be positive, got {sizes}")
        generator = rng if rng is not None else np.random.default_rng(seed)
        weights = [
            Matrix.random_gaussian(sizes[l + 1], sizes[l], 1 / math.sqrt(sizes[l]), rng=generator, strict=strict)
            for l in range(len(sizes) - 1)
        ]
        return cls(weights, rng=generator, strict=strict)

    @property
    def weights(self) -> tuple[Matrix, ...]:
        return tuple(self._weights)

    @property
    def layers(self) -> int:
        return len(self._weights)

    @property
    def sizes(self) -> list[int]:
        return [self._weights[0].cols] + [w.rows for w in self._weights]

    def __repr__(self) -> str:
        return f"Network(sizes={self.sizes})"

    def _check_input(self, data: Matrix) -> None:
        if data.rows != self._weights[0].cols:
            message = (
                f"Input has {data.rows} rows but the network expects {self._weights[0].cols}"
            )
            if self.strict:
                raise ShapeMismatchError(message)
            logger.warning(message)

    def feed_forward(self, data: Matrix) -> Matrix:
        """Return the output layer activations for an ``n x 1`` input column."""
        self._check_input(data)
        activation = data
        for w in self._weights:
            activation = w.multiply(activation).map(sigmoid)
        return activation

    def predict(self, data: Matrix) -> int:
        return self.feed_forward(data).argmax()[0]

    def back_propagate(self, example: DataPoint) -> list[Matrix]:
        """Gradient of the cross-entropy cost of one example for every weight matrix.

        With a sigmoid output layer and cross-entropy cost the output error is
        simply ``a_L - y``; the sigmoid derivative cancels out.
        """
        self._check_input(example.data)
        activations = [example.data]
        weighted_inputs: list[Matrix] = []
        for w in self._weights:
            z = w.multiply(activations[-1])
            weighted_inputs.append(z)
            activations.append(z.map(sigmoid))

        # deltas[l] is the error at the output of weights[l]
        deltas: list[Matrix] = [None] * self.layers  # type: ignore[list-item]
        deltas[-1] = activations[-1].subtract(example.label)
        for l in range(self.layers - 2, -1, -1):
            deltas[l] = (
                self._weights[l + 1].transpose()
                .multiply(deltas[l + 1])
                .elementwise_multiply(weighted_inputs[l].map(sigmoid_prime))
            )

        return [deltas[l].multiply(activations[l].transpose()) for l in range(self.layers)]

    def train_mini_batch(
        self,
        batch: Sequence[DataPoint],
        learning_rate: float,
        regularization: float,
        training_size: int,
    ) -> None:
        """Take one gradient step using the averaged gradient of ``batch``.

        Weights also decay by ``learning_rate * regularization / training_size``
        (L2 regularisation scaled by the size of the whole training set).
        """
        if not batch:
            return
        nabla: list[Matrix | None] = [None] * self.layers
        for example in batch:
            gradients = self.back_propagate(example)
            nabla = [g.add(n) for g, n in zip(gradients, nabla)]

        decay = 1 - learning_rate * regularization / training_size
        step = learning_rate / len(batch)
        self._weights = [
            w.multiply(decay).subtract(n.multiply(step))  # type: ignore[union-attr]
            for w, n in zip(self._weights, nabla)
        ]

    def train(
        self,
        training_set: MutableSequence[DataPoint],
        test_set: Sequence[DataPoint],
        epochs: int,
        batch_size: int,
        learning_rate: float,
        regularization: float,
        show_progress: bool = False,
    ) -> list[AccuracyReport]:
        """Run stochastic gradient descent over ``epochs`` passes of ``training_set``.

        The training set is shuffled in place at the start of every epoch and cut
        into consecutive mini-batches; a trailing partial batch is skipped. The
        test set is only used to report accuracy, once before training and once
        after every epoch.
        """
        if epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        history = [self._report(test_set, 0)]
        num_batches = len(training_set) // batch_size
        for epoch in range(1, epochs + 1):
            self.rng.shuffle(training_set)
            batches = range(num_batches)
            if show_progress:
                batches = tqdm(batches, desc=f"Epoch {epoch}/{epochs}", unit="batch", leave=False)
            for batch in batches:
                start = batch * batch_size
                self.train_mini_batch(
                    training_set[start:start + batch_size],
                    learning_rate,
                    regularization,
                    len(training_set),
                )
            history.append(self._report(test_set, epoch))
        return history

    def _report(self, test_set: Sequence[DataPoint], epoch: int) -> AccuracyReport:
        report = self.evaluate(test_set, epoch)
        logger.info(report.format())
        return report

    def evaluate(self, test_set: Sequence[DataPoint], epoch: int = 0) -> AccuracyReport:
        num_classes = self._weights[-1].rows
        correct = [0] * num_classes
        total = [0] * num_classes
        for example in test_set:
            if example.label.rows != num_classes:
                raise ShapeMismatchError(
                    f"Label has {example.label.rows} rows but the network has {num_classes} outputs"
                )
            predicted = self.predict(example.data)
            expected = example.target
            total[expected] += 1
            if predicted == expected:
                correct[predicted] += 1
        return AccuracyReport(epoch=epoch, correct=tuple(correct), total=tuple(total))
