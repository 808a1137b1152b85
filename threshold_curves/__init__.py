"""Threshold Curves — Overview

This package turns held-out binary predictions (a ground-truth label and a
positive-class probability per observation) into threshold-sweep curves:

1) Sweep and tallies (``threshold_curves.curves.common``)
	- Why: every curve is a sequence of confusion tallies, one per threshold.
	- What you get: input validation, uniform or score-derived grids, the
	  per-threshold sweep table, and operating-point selection.

2) ROC curve (``threshold_curves.curves.roc``)
	- ``build_roc_curve`` re-sorts the sweep into a monotone staircase and
	  ``integrate_auc`` integrates it with the trapezoidal rule.

3) Precision-recall curve (``threshold_curves.curves.precision_recall``)
	- Same sweep, plotted as precision over recall, with PR AUC and AP.

4) Resampling folds (``threshold_curves.curves.resampling``)
	- Per-fold AUC where single-class folds degrade instead of failing.

5) CLI (``threshold_curves.threshold_sweep``)
	- Writes tables, step plots and notes under ``outputs/``.
"""
from .curves.common import (
    ConfusionTally,
    CurvePoint,
    PRCurvePoint,
    PredictionRecord,
    score_grid,
    sweep_table,
    uniform_grid,
)
from .curves.precision_recall import average_precision, build_pr_curve, integrate_pr_auc
from .curves.roc import build_roc_curve, integrate_auc, sort_curve
from .exceptions import InvalidInput
