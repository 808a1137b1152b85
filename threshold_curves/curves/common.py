"""Common sweep utilities shared by the ROC and precision-recall builders.

This module centralizes shared code: the sweep configuration, record and
tally containers, input validation, threshold grids, the per-threshold
confusion tally, the tabular sweep, and operating-point selection. The curve
builders in ``curves.roc`` and ``curves.precision_recall`` import from here to
avoid duplication.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Hashable, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import logging

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from ..exceptions import InvalidInput

LOGGER = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 101


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class SweepConfig:
    predictions_path: Path
    positive_class: str
    negative_class: Optional[str] = None
    truth_column: str = "truth"
    score_column: str = "score"
    fold_column: Optional[str] = None
    grid: str = "uniform"  # "uniform" | "scores"
    grid_size: int = DEFAULT_GRID_SIZE
    target_recall: Optional[float] = None
    min_precision: Optional[float] = None
    max_fpr: Optional[float] = None
    f_beta: float = 2.0
    log_level: str = "INFO"
    output_dir: Path = Path("outputs")
    sweep_table_path: Path = Path("outputs/tables/threshold_sweep.csv")
    roc_table_path: Path = Path("outputs/tables/roc_curve.csv")
    pr_table_path: Path = Path("outputs/tables/pr_curve.csv")
    fold_table_path: Path = Path("outputs/tables/fold_auc.csv")
    roc_curve_path: Path = Path("outputs/figures/roc_curve.png")
    pr_curve_path: Path = Path("outputs/figures/pr_curve.png")
    fold_auc_path: Path = Path("outputs/figures/fold_auc.png")
    operating_point_path: Path = Path("outputs/notes/operating_point.json")
    notes_path: Path = Path("outputs/notes/threshold_sweep.md")


# ---------------------------------------------------------------------------
# Records, tallies and curve points
# ---------------------------------------------------------------------------

class PredictionRecord(NamedTuple):
    """One held-out observation: its ground truth and positive-class score."""

    truth: Hashable
    score: float


class CurvePoint(NamedTuple):
    threshold: float
    fpr: float
    tpr: float


class PRCurvePoint(NamedTuple):
    threshold: float
    recall: float
    precision: float


def _safe_rate(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


@dataclass(frozen=True)
class ConfusionTally:
    """Confusion counts of the derived responses at a single threshold."""

    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @property
    def tpr(self) -> float:
        return _safe_rate(self.tp, self.tp + self.fn)

    @property
    def fpr(self) -> float:
        return _safe_rate(self.fp, self.fp + self.tn)

    @property
    def tnr(self) -> float:
        return _safe_rate(self.tn, self.tn + self.fp)

    @property
    def precision(self) -> float:
        return _safe_rate(self.tp, self.tp + self.fp)

    @property
    def accuracy(self) -> float:
        return (self.tp + self.tn) / max(1, self.total)

    def as_dict(self, threshold: float) -> Dict[str, float]:
        return {
            "threshold": float(threshold),
            "TP": float(self.tp),
            "FP": float(self.fp),
            "TN": float(self.tn),
            "FN": float(self.fn),
            "TPR": float(self.tpr),
            "TNR": float(self.tnr),
            "FPR": float(self.fpr),
            "precision": float(self.precision),
            "accuracy": float(self.accuracy),
        }


# ---------------------------------------------------------------------------
# Threshold grids
# ---------------------------------------------------------------------------

def uniform_grid(num: int = DEFAULT_GRID_SIZE) -> np.ndarray:
    """Evenly spaced thresholds from 0.0 to 1.0 inclusive.

    The grid ignores the score distribution, so structure between two grid
    points is not resolved. Use ``score_grid`` for an exact curve.
    """
    if num < 2:
        raise InvalidInput(f"A uniform grid needs at least 2 points, got {num}")
    return np.linspace(0.0, 1.0, num)


def score_grid(scores: Iterable[float]) -> np.ndarray:
    """Unique observed scores plus both endpoints, in ascending order."""
    values = np.asarray(list(scores), dtype=float)
    return np.unique(np.concatenate(([0.0], values, [1.0])))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _unique_in_order(values: Iterable[Hashable]) -> List[Hashable]:
    seen: List[Hashable] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def validate_inputs(
    records: Iterable[Tuple[Hashable, float]],
    positive_class: Hashable,
    thresholds: Optional[Sequence[float]] = None,
    labels: Optional[Sequence[Hashable]] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Check the sweep inputs and convert them to arrays.

    Returns ``(y_true_bin, y_prob, thresholds)`` where ``y_true_bin`` is 1 for
    the positive class. Without ``labels`` at most two truth labels may be
    observed; when both appear, ``positive_class`` must be one of them. A
    single observed label is all-positive if it equals ``positive_class`` and
    all-negative otherwise. ``labels`` declares the pair explicitly.
    """
    try:
        pairs = [(truth, score) for truth, score in records]
    except (TypeError, ValueError) as exc:
        raise InvalidInput("Records must be (truth, score) pairs") from exc
    if not pairs:
        raise InvalidInput("Cannot build a curve from an empty record set")

    truths = [truth for truth, _ in pairs]
    observed = _unique_in_order(truths)
    if labels is None:
        if len(observed) > 2:
            raise InvalidInput(
                f"Expected at most two distinct truth labels, found {len(observed)}: {observed}"
            )
        label_pair = observed if len(observed) == 2 else observed + [positive_class]
    else:
        label_pair = list(labels)
        if len(label_pair) != 2 or label_pair[0] == label_pair[1]:
            raise InvalidInput(f"Labels must be two distinct values, got {label_pair}")
        unknown = [label for label in observed if label not in label_pair]
        if unknown:
            raise InvalidInput(f"Truth labels {unknown} are not among declared labels {label_pair}")

    if positive_class not in label_pair:
        raise InvalidInput(
            f"Positive class {positive_class!r} not found among labels {label_pair}"
        )

    try:
        y_prob = np.asarray([score for _, score in pairs], dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInput("Scores must be numeric probabilities") from exc
    if np.isnan(y_prob).any() or (y_prob < 0.0).any() or (y_prob > 1.0).any():
        raise InvalidInput("Scores must lie in the closed interval [0, 1]")

    if thresholds is None:
        grid = uniform_grid()
    else:
        try:
            grid = np.asarray(list(thresholds), dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInput("Thresholds must be numeric") from exc
    if grid.size:
        if np.isnan(grid).any() or (grid < 0.0).any() or (grid > 1.0).any():
            raise InvalidInput("Thresholds must lie in the closed interval [0, 1]")
        if (np.diff(grid) < 0).any():
            raise InvalidInput("Thresholds must be non-decreasing")

    y_true_bin = np.asarray([truth == positive_class for truth in truths], dtype=int)
    return y_true_bin, y_prob, grid


# ---------------------------------------------------------------------------
# Confusion tallies
# ---------------------------------------------------------------------------

def confusion_from_threshold(y_true_bin: np.ndarray, y_prob: np.ndarray, thr: float) -> ConfusionTally:
    # Boundary-inclusive: a score equal to the threshold is a positive response.
    y_pred_bin = (y_prob >= thr).astype(int)
    tn, fp, fn, tp = confusion_matrix(y_true_bin, y_pred_bin, labels=[0, 1]).ravel()
    return ConfusionTally(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))


def sweep_tallies(
    y_true_bin: np.ndarray, y_prob: np.ndarray, thresholds: np.ndarray
) -> List[Tuple[float, ConfusionTally]]:
    """Tally every threshold independently, in grid order."""
    return [(float(thr), confusion_from_threshold(y_true_bin, y_prob, thr)) for thr in thresholds]


def tallies_to_frame(tallies: Sequence[Tuple[float, ConfusionTally]]) -> pd.DataFrame:
    rows = [tally.as_dict(thr) for thr, tally in tallies]
    columns = ["threshold", "TP", "FP", "TN", "FN", "TPR", "TNR", "FPR", "precision", "accuracy"]
    return pd.DataFrame(rows, columns=columns)


def sweep_table(
    records: Iterable[Tuple[Hashable, float]],
    positive_class: Hashable,
    thresholds: Optional[Sequence[float]] = None,
    labels: Optional[Sequence[Hashable]] = None,
) -> pd.DataFrame:
    """One row per threshold with the confusion counts and derived rates."""
    y_true_bin, y_prob, grid = validate_inputs(records, positive_class, thresholds, labels)
    return tallies_to_frame(sweep_tallies(y_true_bin, y_prob, grid))


# ---------------------------------------------------------------------------
# Operating point selection
# ---------------------------------------------------------------------------

def select_operating_threshold(
    sweep: pd.DataFrame,
    target_recall: float,
    min_precision: Optional[float] = None,
    max_fpr: Optional[float] = None,
    f_beta: float = 2.0,
) -> Tuple[float, Dict[str, Any]]:
    """Pick a threshold from a sweep table.

    The largest threshold meeting the recall target (and the optional
    precision and FPR constraints) wins. If none qualifies, the threshold
    with the best F-beta is used, and failing that the lowest threshold.
    """
    if sweep.empty:
        raise InvalidInput("Cannot select an operating point from an empty sweep")

    if float(sweep["TP"].iloc[0] + sweep["FN"].iloc[0]) == 0:
        return 0.5, {"policy": "no_positives", "recall": 0.0, "precision": 0.0, "fpr": 0.0}

    feasible = sweep[sweep["TPR"] + 1e-12 >= target_recall]
    if min_precision is not None:
        feasible = feasible[feasible["precision"] + 1e-12 >= min_precision]
    if max_fpr is not None:
        feasible = feasible[feasible["FPR"] - 1e-12 <= max_fpr]

    def describe(row: pd.Series, policy: str) -> Dict[str, Any]:
        return {
            "policy": policy,
            "recall": float(row["TPR"]),
            "precision": float(row["precision"]),
            "fpr": float(row["FPR"]),
        }

    if not feasible.empty:
        best = feasible.sort_values("threshold").iloc[-1]
        return float(best["threshold"]), describe(best, "constrained")

    beta2 = f_beta * f_beta
    precision = sweep["precision"].to_numpy()
    recall = sweep["TPR"].to_numpy()
    denom = beta2 * precision + recall
    fbeta = np.where(denom > 0, (1 + beta2) * precision * recall / np.where(denom > 0, denom, 1.0), 0.0)
    scored = sweep.assign(fbeta=fbeta).sort_values(["fbeta", "threshold"])
    best = scored.iloc[-1]
    if best["fbeta"] > 0:
        meta = describe(best, "fbeta")
        meta["fbeta"] = float(best["fbeta"])
        return float(best["threshold"]), meta

    lowest = sweep.sort_values("threshold").iloc[0]
    LOGGER.warning("No threshold reaches a positive F-beta; falling back to the lowest threshold.")
    return float(lowest["threshold"]), describe(lowest, "min_threshold")



# ---------------------------------------------------------------------------
# Tabular inputs
# ---------------------------------------------------------------------------

def records_from_frame(
    frame: pd.DataFrame, truth_column: str = "truth", score_column: str = "score"
) -> List[PredictionRecord]:
    missing = {truth_column, score_column} - set(frame.columns)
    if missing:
        raise KeyError(f"Predictions missing columns: {', '.join(sorted(missing))}")
    return [
        PredictionRecord(truth, score)
        for truth, score in zip(frame[truth_column].tolist(), frame[score_column].tolist())
    ]
