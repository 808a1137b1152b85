"""Tests for shared sweep utilities."""

import numpy as np
import pandas as pd
import pytest

from threshold_curves.curves.common import (
    ConfusionTally,
    PredictionRecord,
    confusion_from_threshold,
    records_from_frame,
    score_grid,
    select_operating_threshold,
    sweep_table,
    uniform_grid,
    validate_inputs,
)
from threshold_curves.exceptions import InvalidInput


class TestConfusionTally:
    """Tests for ConfusionTally rates."""

    def test_rates(self):
        tally = ConfusionTally(tp=3, fp=1, tn=4, fn=2)

        assert tally.total == 10
        assert tally.tpr == pytest.approx(0.6)
        assert tally.fpr == pytest.approx(0.2)
        assert tally.tnr == pytest.approx(0.8)
        assert tally.precision == pytest.approx(0.75)
        assert tally.accuracy == pytest.approx(0.7)

    def test_zero_denominators_are_zero(self):
        tally = ConfusionTally(tp=0, fp=0, tn=0, fn=0)

        assert (tally.tpr, tally.fpr, tally.precision, tally.accuracy) == (0.0, 0.0, 0.0, 0.0)

    def test_inclusive_boundary(self):
        tally = confusion_from_threshold(np.array([1, 0]), np.array([0.5, 0.5]), 0.5)

        assert tally == ConfusionTally(tp=1, fp=1, tn=0, fn=0)


class TestGrids:
    """Tests for threshold grid policies."""

    def test_uniform_grid(self):
        grid = uniform_grid(11)

        assert len(grid) == 11
        assert grid[0] == 0.0 and grid[-1] == 1.0

    def test_uniform_grid_rejects_single_point(self):
        with pytest.raises(InvalidInput):
            uniform_grid(1)

    def test_score_grid_adds_endpoints(self):
        assert score_grid([0.4, 0.2, 0.4]).tolist() == [0.0, 0.2, 0.4, 1.0]


class TestValidateInputs:
    """Tests for validate_inputs conversions."""

    def test_returns_binary_truth(self, example_records):
        y_true_bin, y_prob, grid = validate_inputs(example_records, "neg", [0.5])

        assert y_true_bin.tolist() == [0, 0, 1, 1]
        assert y_prob.tolist() == [0.9, 0.4, 0.6, 0.1]
        assert grid.tolist() == [0.5]

    def test_accepts_generators(self, example_records):
        y_true_bin, _, _ = validate_inputs((r for r in example_records), "pos", [0.5])

        assert y_true_bin.sum() == 2

    def test_non_numeric_score(self):
        with pytest.raises(InvalidInput):
            validate_inputs([("pos", "high"), ("neg", 0.1)], "pos", [0.5])


class TestSweepTable:
    """Tests for sweep_table."""

    def test_worked_example_rows(self, example_records):
        table = sweep_table(example_records, "pos", [0.0, 0.5, 1.0])

        assert table["threshold"].tolist() == [0.0, 0.5, 1.0]
        middle = table.iloc[1]
        assert (middle["TP"], middle["FP"], middle["TN"], middle["FN"]) == (1.0, 1.0, 1.0, 1.0)
        assert (table[["TP", "FP", "TN", "FN"]].sum(axis=1) == 4).all()

    def test_columns(self, example_records):
        table = sweep_table(example_records, "pos", [0.5])

        assert list(table.columns) == [
            "threshold", "TP", "FP", "TN", "FN", "TPR", "TNR", "FPR", "precision", "accuracy",
        ]


class TestSelectOperatingThreshold:
    """Tests for select_operating_threshold policies."""

    @pytest.fixture
    def sweep(self, example_records) -> pd.DataFrame:
        return sweep_table(example_records, "pos", [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_constrained_picks_largest_threshold(self, sweep):
        thr, meta = select_operating_threshold(sweep, target_recall=1.0)

        assert thr == 0.25
        assert meta["policy"] == "constrained"
        assert meta["recall"] == 1.0

    def test_falls_back_to_fbeta(self, sweep):
        thr, meta = select_operating_threshold(sweep, target_recall=1.0, max_fpr=0.0)

        assert thr == 0.25
        assert meta["policy"] == "fbeta"
        assert meta["fbeta"] == pytest.approx(10 / 11)

    def test_falls_back_to_lowest_threshold(self, example_records):
        sweep = sweep_table(example_records, "pos", [0.95, 1.0])
        thr, meta = select_operating_threshold(sweep, target_recall=0.5)

        assert thr == 0.95
        assert meta["policy"] == "min_threshold"

    def test_no_positives(self):
        records = [("neg", 0.2), ("neg", 0.7)]
        sweep = sweep_table(records, "pos", [0.0, 0.5], labels=["pos", "neg"])

        assert select_operating_threshold(sweep, target_recall=0.9) == (
            0.5,
            {"policy": "no_positives", "recall": 0.0, "precision": 0.0, "fpr": 0.0},
        )

    def test_empty_sweep(self, example_records):
        with pytest.raises(InvalidInput):
            select_operating_threshold(sweep_table(example_records, "pos", []), target_recall=0.5)


class TestRecordsFromFrame:
    """Tests for records_from_frame."""

    def test_builds_records(self):
        frame = pd.DataFrame({"y": ["a", "b"], "p": [0.3, 0.6]})

        assert records_from_frame(frame, "y", "p") == [
            PredictionRecord("a", 0.3),
            PredictionRecord("b", 0.6),
        ]

    def test_missing_columns(self):
        with pytest.raises(KeyError):
            records_from_frame(pd.DataFrame({"truth": ["a"]}))
