"""Shared pytest fixtures for threshold_curves tests."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from threshold_curves.curves.common import PredictionRecord

# ============================================================================
# Record Fixtures
# ============================================================================


@pytest.fixture
def example_records() -> list:
    """Four-record example: two positives, two negatives, one inversion."""
    return [("pos", 0.9), ("pos", 0.4), ("neg", 0.6), ("neg", 0.1)]


@pytest.fixture
def separable_records() -> list:
    """Positives always outscore negatives."""
    return [
        PredictionRecord("pos", 0.8),
        PredictionRecord("pos", 0.9),
        PredictionRecord("neg", 0.1),
        PredictionRecord("neg", 0.2),
    ]


@pytest.fixture
def tied_records() -> list:
    """Random labels with scores rounded to one decimal, so many scores tie."""
    rng = np.random.default_rng(7)
    truth = rng.integers(0, 2, size=200)
    scores = np.clip(np.round(0.3 * truth + 0.7 * rng.random(200), 1), 0.0, 1.0)
    return [("yes" if t else "no", float(s)) for t, s in zip(truth, scores)]


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def fold_frame() -> pd.DataFrame:
    """Three folds; the third contains only negatives."""
    return pd.DataFrame(
        {
            "truth": ["pos", "pos", "neg", "neg", "pos", "pos", "neg", "neg", "neg", "neg"],
            "score": [0.9, 0.8, 0.1, 0.2, 0.9, 0.4, 0.6, 0.1, 0.3, 0.7],
            "fold": [1, 1, 1, 1, 2, 2, 2, 2, 3, 3],
        }
    )


@pytest.fixture
def predictions_csv(tmp_path: Path, fold_frame: pd.DataFrame) -> Path:
    """Predictions CSV with numeric 0/1 labels."""
    frame = fold_frame.assign(truth=(fold_frame["truth"] == "pos").astype(int))
    path = tmp_path / "predictions.csv"
    frame.to_csv(path, index=False)
    return path
