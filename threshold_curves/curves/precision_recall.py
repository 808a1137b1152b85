"""Precision-recall curve from the same threshold sweep as ``curves.roc``.

Precision uses the sweep's zero-denominator convention: a threshold that
predicts no positives has precision 0.0.
"""
from __future__ import annotations

from typing import Hashable, Iterable, List, Optional, Sequence, Tuple
import logging

import numpy as np
from sklearn.metrics import auc

from .common import ConfusionTally, PRCurvePoint, sweep_tallies, validate_inputs

LOGGER = logging.getLogger(__name__)


def sort_pr_curve(points: Iterable[Tuple[float, float, float]]) -> List[PRCurvePoint]:
    curve = [PRCurvePoint(*point) for point in points]
    return sorted(curve, key=lambda p: (p.recall, -p.precision, -p.threshold))


def pr_points(tallies: Iterable[Tuple[float, ConfusionTally]]) -> List[PRCurvePoint]:
    return sort_pr_curve(PRCurvePoint(thr, tally.tpr, tally.precision) for thr, tally in tallies)


def build_pr_curve(
    records: Iterable[Tuple[Hashable, float]],
    positive_class: Hashable,
    thresholds: Optional[Sequence[float]] = None,
    labels: Optional[Sequence[Hashable]] = None,
) -> List[PRCurvePoint]:
    """Sweep ``thresholds`` and return the sorted ``(threshold, recall, precision)`` curve."""
    y_true_bin, y_prob, grid = validate_inputs(records, positive_class, thresholds, labels)
    curve = pr_points(sweep_tallies(y_true_bin, y_prob, grid))
    LOGGER.debug("Built PR curve from %d records over %d thresholds", len(y_prob), len(grid))
    return curve


def integrate_pr_auc(curve: Iterable[Tuple[float, float, float]]) -> float:
    ordered = sort_pr_curve(curve)
    if len(ordered) < 2:
        return 0.0
    recall = np.array([p.recall for p in ordered])
    precision = np.array([p.precision for p in ordered])
    return float(auc(recall, precision))


def average_precision(curve: Iterable[Tuple[float, float, float]]) -> float:
    """Step-wise sum of precision weighted by each recall increment.

    Within a run of equal recall the first point (highest precision) is the
    one that carries the increment.
    """
    total = 0.0
    previous_recall = 0.0
    for point in sort_pr_curve(curve):
        if point.recall > previous_recall:
            total += (point.recall - previous_recall) * point.precision
            previous_recall = point.recall
    return float(total)
