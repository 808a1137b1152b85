"""Per-fold ROC evaluation over a resampled prediction table.

Every fold is evaluated against the label pair of the whole table, so a fold
that happens to contain a single class produces a degenerate curve and AUC
rather than aborting the batch.
"""
from __future__ import annotations

from typing import Any, Dict, Hashable, Optional, Sequence
import logging

import numpy as np
import pandas as pd

from .common import records_from_frame, validate_inputs
from .roc import build_roc_curve, integrate_auc

LOGGER = logging.getLogger(__name__)


def evaluate_folds(
    frame: pd.DataFrame,
    positive_class: Hashable,
    thresholds: Optional[Sequence[float]] = None,
    truth_column: str = "truth",
    score_column: str = "score",
    fold_column: str = "fold",
    negative_class: Optional[Hashable] = None,
) -> pd.DataFrame:
    """Build one ROC curve per fold and return a table of fold AUCs."""
    if fold_column not in frame.columns:
        raise KeyError(f"Predictions missing fold column: {fold_column}")

    all_records = records_from_frame(frame, truth_column, score_column)
    if negative_class is None:
        validate_inputs(all_records, positive_class, thresholds)
        others = [t for t in frame[truth_column].unique().tolist() if t != positive_class]
        labels = [positive_class, others[0]] if others else None
    else:
        labels = [positive_class, negative_class]
        validate_inputs(all_records, positive_class, thresholds, labels)

    rows = []
    for fold, fold_frame in frame.groupby(fold_column, sort=True):
        records = records_from_frame(fold_frame, truth_column, score_column)
        n_positive = int(sum(1 for r in records if r.truth == positive_class))
        degenerate = n_positive in (0, len(records))
        if degenerate:
            LOGGER.warning(
                "Fold %s contains a single class (%d/%d positive); its curve is degenerate.",
                fold,
                n_positive,
                len(records),
            )
        curve = build_roc_curve(records, positive_class, thresholds, labels=labels)
        rows.append(
            {
                "fold": fold,
                "n": len(records),
                "n_positive": n_positive,
                "auc": integrate_auc(curve),
                "degenerate": degenerate,
            }
        )
    LOGGER.info("Evaluated %d folds", len(rows))
    return pd.DataFrame(rows, columns=["fold", "n", "n_positive", "auc", "degenerate"])


def summarize_folds(fold_table: pd.DataFrame) -> Dict[str, Any]:
    """Aggregate AUC over the folds that contain both classes."""
    valid = fold_table.loc[~fold_table["degenerate"].astype(bool), "auc"].to_numpy(dtype=float)
    summary: Dict[str, Any] = {
        "n_folds": int(len(fold_table)),
        "n_degenerate": int(len(fold_table) - len(valid)),
    }
    if len(valid) == 0:
        summary.update({"auc_mean": None, "auc_std": None, "auc_min": None, "auc_max": None})
        return summary
    summary.update(
        {
            "auc_mean": float(np.mean(valid)),
            "auc_std": float(np.std(valid)),
            "auc_min": float(np.min(valid)),
            "auc_max": float(np.max(valid)),
        }
    )
    return summary
