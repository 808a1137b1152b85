"""Receiver-operating-characteristic curve from a threshold sweep.

Each threshold derives its own responses from the untouched records. The
collected points are re-sorted so tied scores cannot make the staircase
step backwards.
"""
from __future__ import annotations

from typing import Hashable, Iterable, List, Optional, Sequence, Tuple
import logging

import numpy as np
from sklearn.metrics import auc

from .common import ConfusionTally, CurvePoint, sweep_tallies, validate_inputs

LOGGER = logging.getLogger(__name__)


def sort_curve(points: Iterable[Tuple[float, float, float]]) -> List[CurvePoint]:
    """Order points by ascending fpr, then ascending tpr, then descending threshold."""
    curve = [CurvePoint(*point) for point in points]
    return sorted(curve, key=lambda p: (p.fpr, p.tpr, -p.threshold))


def roc_points(tallies: Iterable[Tuple[float, ConfusionTally]]) -> List[CurvePoint]:
    """Sorted ROC curve from an already computed sweep."""
    return sort_curve(CurvePoint(thr, tally.fpr, tally.tpr) for thr, tally in tallies)


def build_roc_curve(
    records: Iterable[Tuple[Hashable, float]],
    positive_class: Hashable,
    thresholds: Optional[Sequence[float]] = None,
    labels: Optional[Sequence[Hashable]] = None,
) -> List[CurvePoint]:
    """Sweep ``thresholds`` and return the sorted ``(threshold, fpr, tpr)`` curve.

    A record is predicted positive when ``score >= threshold``. Rates with a
    zero denominator are 0.0, so a single-class record set yields a
    degenerate curve instead of an error. ``thresholds=None`` uses the uniform 101-point grid.
    """
    y_true_bin, y_prob, grid = validate_inputs(records, positive_class, thresholds, labels)
    curve = roc_points(sweep_tallies(y_true_bin, y_prob, grid))
    LOGGER.debug("Built ROC curve from %d records over %d thresholds", len(y_prob), len(grid))
    return curve


def integrate_auc(curve: Iterable[Tuple[float, float, float]]) -> float:
    """Trapezoidal area under the ``(fpr, tpr)`` points of a curve.

    The points are sorted first, so the result does not depend on input order.
    A curve with fewer than two points has no area.
    """
    ordered = sort_curve(curve)
    if len(ordered) < 2:
        return 0.0
    fpr = np.array([p.fpr for p in ordered])
    tpr = np.array([p.tpr for p in ordered])
    return float(auc(fpr, tpr))
