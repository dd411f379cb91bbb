#!/usr/bin/env python3
"""Train the digit recognition network on the MNIST IDX files."""
from __future__ import annotations

import argparse
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from digitnet.config import DEFAULT_CONFIG, DEFAULT_TRAINING_CONFIG, ProjectConfig, TrainingConfig
from digitnet.data import IDXFormatError, load_split
from digitnet.logging_config import configure_logging
from digitnet.models.network import Network
from digitnet.persistence import save_network

logger = logging.getLogger("digitnet.scripts.train")


def parse_args() -> argparse.Namespace:
    defaults = DEFAULT_TRAINING_CONFIG
    parser = argparse.ArgumentParser(description="Train a sigmoid network to recognise 28x28 handwritten digits.")
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_CONFIG.data_dir, help="Directory holding the MNIST IDX files")
    parser.add_argument("--artifacts-dir", type=Path, default=DEFAULT_CONFIG.artifacts_dir, help="Where to store trained networks and metrics")
    parser.add_argument("--epochs", type=int, default=defaults.epochs, help="Number of training epochs")
    parser.add_argument("--batch-size", type=int, default=defaults.batch_size, help="Mini-batch size")
    parser.add_argument("--learning-rate", type=float, default=defaults.learning_rate, help="Learning rate for gradient descent")
    parser.add_argument("--regularization", type=float, default=defaults.regularization, help="L2 weight decay strength")
    parser.add_argument("--hidden-sizes", type=int, nargs="*", default=list(defaults.hidden_sizes), help="Width of each hidden layer")
    parser.add_argument("--seed", type=int, default=defaults.seed, help="Random seed for reproducibility")
    parser.add_argument("--max-training", type=int, default=defaults.max_training, help="Optional cap on training samples")
    parser.add_argument("--max-test", type=int, default=defaults.max_test, help="Optional cap on test samples")
    parser.add_argument("--no-progress", action="store_true", help="Hide the per-epoch progress bar")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()

    config = TrainingConfig(
        epochs=args.epochs,
        batch_size=args.batch_size,
        learning_rate=args.learning_rate,
        regularization=args.regularization,
        hidden_sizes=tuple(args.hidden_sizes),
        seed=args.seed,
        max_training=args.max_training,
        max_test=args.max_test,
    )

    try:
        training_set = load_split(args.data_dir, "training", augment=True, max_length=config.max_training)
        test_set = load_split(args.data_dir, "test", augment=True, max_length=config.max_test)
    except (IDXFormatError, OSError) as exc:
        print(f"Could not load the dataset: {exc}", file=sys.stderr)
        sys.exit(1)

    sizes = config.layer_sizes(DEFAULT_CONFIG.input_dim, DEFAULT_CONFIG.num_classes)
    network = Network.from_sizes(*sizes, seed=config.seed)
    logger.info("Training network %s on %d samples", network.sizes, len(training_set))

    history = network.train(
        training_set,
        test_set,
        epochs=config.epochs,
        batch_size=config.batch_size,
        learning_rate=config.learning_rate,
        regularization=config.regularization,
        show_progress=not args.no_progress,
    )

    timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    run_dir = args.artifacts_dir / f"run-{timestamp}"
    save_network(network, run_dir / "network")
    # The latest run is also kept where evaluate.py and predict.py look by default.
    project = ProjectConfig(data_dir=args.data_dir, artifacts_dir=args.artifacts_dir)
    save_network(network, project.network_path)

    metrics_path = run_dir / "metrics.json"
    metrics_path.write_text(
        json.dumps(
            {
                "sizes": network.sizes,
                "epochs": config.epochs,
                "batch_size": config.batch_size,
                "learning_rate": config.learning_rate,
                "regularization": config.regularization,
                "seed": config.seed,
                "history": [
                    {
                        "epoch": report.epoch,
                        "accuracy": report.accuracy,
                        "class_accuracy": [report.class_accuracy(label) for label in range(len(report.total))],
                    }
                    for report in history
                ],
            },
            indent=2,
        )
    )

    print(f"Training complete. Test accuracy: {history[-1].accuracy:.2f}%")
    print(f"Artifacts saved to {run_dir}")
    print(f"Latest network saved to {project.network_path}")


if __name__ == "__main__":
    main()
