import math
from typing import Sequence

import numpy as np
import pandas as pd
from ddtrace.trace import tracer

from analysis.models import CorrelationMethod, CorrelationResult
from core.exceptions import LengthMismatchError


def _as_arrays(x: Sequence[float], y: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    if len(x) != len(y):
        raise LengthMismatchError(
            f"Input sequences must have the same length ({len(x)} != {len(y)})."
        )
    return np.asarray(x, dtype=float), np.asarray(y, dtype=float)


def _is_constant(values: np.ndarray) -> bool:
    return bool(np.all(values == values[0]))


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Sample Pearson correlation of two equal-length sequences.

    Returns NaN when fewer than two points are given or when either sequence
    does not vary.
    """
    x_values, y_values = _as_arrays(x, y)
    n = len(x_values)
    if n < 2:
        return math.nan

    if _is_constant(x_values) or _is_constant(y_values):
        return math.nan

    # Scale into [-1, 1] so the squared deviations cannot overflow
    x_values = x_values / np.max(np.abs(x_values))
    y_values = y_values / np.max(np.abs(y_values))

    std_x = x_values.std(ddof=1)
    std_y = y_values.std(ddof=1)
    if std_x == 0 or std_y == 0:
        return math.nan

    covariance = np.sum((x_values - x_values.mean()) * (y_values - y_values.mean()))
    covariance /= n - 1

    # Rounding can push a perfect correlation just past 1
    return float(np.clip(covariance / (std_x * std_y), -1.0, 1.0))


def rank(values: Sequence[float]) -> list[float]:
    """1-based ranks in the original order, ties share their average rank."""
    return pd.Series(values, dtype=float).rank(method="average").tolist()


def spearman(x: Sequence[float], y: Sequence[float]) -> float:
    if len(x) != len(y):
        raise LengthMismatchError(
            f"Input sequences must have the same length ({len(x)} != {len(y)})."
        )
    if len(x) < 2:
        return math.nan

    return pearson(rank(x), rank(y))


CORRELATION_FUNCTIONS = {
    CorrelationMethod.PEARSON: pearson,
    CorrelationMethod.SPEARMAN: spearman,
}


def select_method(suggested_method: str) -> CorrelationMethod:
    if "spearman" in suggested_method.lower():
        return CorrelationMethod.SPEARMAN
    return CorrelationMethod.PEARSON


@tracer.wrap("correlation.correlate")
def correlate(
    x: Sequence[float],
    y: Sequence[float],
    method: CorrelationMethod = CorrelationMethod.PEARSON,
) -> CorrelationResult:
    coefficient = CORRELATION_FUNCTIONS[method](x, y)
    return CorrelationResult(coefficient=coefficient, method=method)


def describe_strength(coefficient: float) -> str:
    abs_coefficient = abs(coefficient)
    if abs_coefficient >= 0.7:
        strength = "Strong"
    elif abs_coefficient >= 0.4:
        strength = "Moderate"
    elif abs_coefficient >= 0.1:
        strength = "Weak"
    else:
        strength = "Very Weak or No"

    direction = "positive" if coefficient > 0 else "negative"
    return f"{strength} {direction}"
