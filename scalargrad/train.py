"""
Training helpers for scalargrad networks.

A minimal gradient-descent loop: forward every example, mean squared error,
zero_grad, backward, SGD update. Running this module trains a small MLP on a
fixed four-example toy dataset.
"""

import argparse
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from scalargrad.nn import MLP

logger = logging.getLogger(__name__)

# Four fixed examples with three features each, targets in {-1, 1}
DEMO_XS = [
    [2.0, 3.0, -1.0],
    [3.0, -1.0, 0.5],
    [0.5, 1.0, 1.0],
    [1.0, 1.0, -1.0],
]
DEMO_YS = [1.0, -1.0, -1.0, 1.0]


@dataclass
class TrainConfig:
    """Hyperparameters for train() and the demo CLI."""

    steps: int = 100
    learning_rate: float = 0.05
    seed: Optional[int] = None
    layer_sizes: List[int] = field(default_factory=lambda: [4, 4, 1])
    log_every: int = 10


def mse_loss(predictions, targets):
    """
    Mean Squared Error: 1/n * sum((prediction - target)²)

    Args:
        predictions: Sequence of Values
        targets: Sequence of numbers or Values, same length

    Returns:
        Scalar Value whose graph reaches every prediction
    """
    if len(predictions) != len(targets):
        raise ValueError(f"got {len(predictions)} predictions for {len(targets)} targets")
    if not predictions:
        raise ValueError("mse_loss needs at least one prediction")

    total = sum(((yp - yt) ** 2 for yp, yt in zip(predictions, targets)), start=0.0)
    return total / len(predictions)


def sgd_step(parameters, learning_rate):
    """Plain gradient descent: p.data -= learning_rate * p.grad"""
    for p in parameters:
        p.data -= learning_rate * p.grad


def train(model, xs, ys, config=None):
    """
    Fit model to (xs, ys) with full-batch gradient descent.

    Args:
        model: A Module whose __call__ maps one example to a single Value
        xs: List of input examples
        ys: List of scalar targets
        config: TrainConfig (defaults used when None)

    Returns:
        list: Loss value (float) of every step, before that step's update
    """
    config = config or TrainConfig()
    if len(xs) != len(ys):
        raise ValueError(f"got {len(xs)} examples for {len(ys)} targets")

    history = []
    for step in range(1, config.steps + 1):
        ypred = [model(x) for x in xs]
        loss = mse_loss(ypred, ys)

        model.zero_grad()
        loss.backward()
        sgd_step(model.parameters(), config.learning_rate)

        history.append(float(loss.data))
        if step % config.log_every == 0 or step == config.steps:
            logger.info("step %d loss %.6f", step, loss.data)

    return history


def main(argv=None):
    parser = argparse.ArgumentParser(description="Train a tanh MLP on a four-example toy dataset.")
    parser.add_argument("--steps", type=int, default=TrainConfig.steps)
    parser.add_argument("--lr", type=float, default=TrainConfig.learning_rate, help="learning rate")
    parser.add_argument("--seed", type=int, default=None, help="seed for weight initialization")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every backward pass")
    args = parser.parse_args(argv)
    if args.steps < 1:
        parser.error("--steps must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    config = TrainConfig(steps=args.steps, learning_rate=args.lr, seed=args.seed)
    model = MLP(len(DEMO_XS[0]), config.layer_sizes, rng=config.seed)
    logger.info("training %r with %d parameters", model, len(model.parameters()))

    history = train(model, DEMO_XS, DEMO_YS, config)

    logger.info("final loss %.6f", history[-1])
    for x, y in zip(DEMO_XS, DEMO_YS):
        logger.info("input %s target %+.1f prediction %+.4f", x, y, model(x).data)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
