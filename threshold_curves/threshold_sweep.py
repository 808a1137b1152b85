"""CLI: threshold sweep, ROC/PR curves and AUC for a table of predictions.

Reads a CSV with one row per held-out observation (ground truth plus the
positive-class probability), sweeps a decision threshold, and writes tables,
figures and notes under ``--output-dir``.

Usage:
    python -m threshold_curves.threshold_sweep --predictions preds.csv --positive-class cancer
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .curves.common import (
    SweepConfig,
    records_from_frame,
    score_grid,
    select_operating_threshold,
    sweep_tallies,
    tallies_to_frame,
    uniform_grid,
    validate_inputs,
)
from .curves.plotting import plot_fold_aucs, plot_pr_curves, plot_roc_curves
from .curves.precision_recall import average_precision, integrate_pr_auc, pr_points
from .curves.resampling import evaluate_folds, summarize_folds
from .curves.roc import integrate_auc, roc_points
from .exceptions import InvalidInput

LOGGER = logging.getLogger(__name__)


def parse_args(args: Optional[Sequence[str]] = None) -> SweepConfig:
    parser = argparse.ArgumentParser(description="Threshold sweep with ROC/PR curves")
    parser.add_argument(
        "--predictions",
        type=Path,
        required=True,
        help="CSV with one row per observation (truth label and positive-class score).",
    )
    parser.add_argument(
        "--positive-class",
        type=str,
        required=True,
        help="Truth label treated as positive (labels are compared as strings).",
    )
    parser.add_argument(
        "--negative-class",
        type=str,
        default=None,
        help="Optional negative label; truth values must then be one of the two declared labels.",
    )
    parser.add_argument("--truth-column", type=str, default="truth")
    parser.add_argument("--score-column", type=str, default="score")
    parser.add_argument(
        "--fold-column",
        type=str,
        default=None,
        help="Optional resampling fold column; enables per-fold AUC.",
    )
    parser.add_argument(
        "--grid",
        type=str,
        default="uniform",
        choices=["uniform", "scores"],
        help="uniform: fixed evenly spaced grid; scores: unique observed scores.",
    )
    parser.add_argument("--grid-size", type=int, default=101)
    parser.add_argument(
        "--target-recall",
        type=float,
        default=None,
        help="Optional target recall for operating-point selection (0-1).",
    )
    parser.add_argument("--min-precision", type=float, default=None)
    parser.add_argument("--max-fpr", type=float, default=None)
    parser.add_argument("--f-beta", type=float, default=2.0)
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs"),
        help="Base directory for sweep artefacts.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    parsed = parser.parse_args(args=args)
    return SweepConfig(
        predictions_path=parsed.predictions,
        positive_class=parsed.positive_class,
        negative_class=parsed.negative_class,
        truth_column=parsed.truth_column,
        score_column=parsed.score_column,
        fold_column=parsed.fold_column,
        grid=parsed.grid,
        grid_size=parsed.grid_size,
        target_recall=parsed.target_recall,
        min_precision=parsed.min_precision,
        max_fpr=parsed.max_fpr,
        f_beta=parsed.f_beta,
        log_level=parsed.log_level,
        output_dir=parsed.output_dir,
        sweep_table_path=parsed.output_dir / "tables/threshold_sweep.csv",
        roc_table_path=parsed.output_dir / "tables/roc_curve.csv",
        pr_table_path=parsed.output_dir / "tables/pr_curve.csv",
        fold_table_path=parsed.output_dir / "tables/fold_auc.csv",
        roc_curve_path=parsed.output_dir / "figures/roc_curve.png",
        pr_curve_path=parsed.output_dir / "figures/pr_curve.png",
        fold_auc_path=parsed.output_dir / "figures/fold_auc.png",
        operating_point_path=parsed.output_dir / "notes/operating_point.json",
        notes_path=parsed.output_dir / "notes/threshold_sweep.md",
    )


def load_predictions(config: SweepConfig) -> pd.DataFrame:
    if not config.predictions_path.exists():
        raise FileNotFoundError(f"Predictions file not found: {config.predictions_path}")
    LOGGER.info("Loading predictions from %s", config.predictions_path)
    frame = pd.read_csv(config.predictions_path)
    if config.truth_column in frame.columns:
        missing = frame[config.truth_column].isna()
        if missing.any():
            LOGGER.warning("Dropping %d rows without a truth label", int(missing.sum()))
            frame = frame.loc[~missing].reset_index(drop=True)
        truth = frame[config.truth_column]
        # Integral float labels (1.0 or 0.0) compare as "1" and "0".
        if pd.api.types.is_float_dtype(truth) and (truth.dropna() % 1 == 0).all():
            truth = truth.astype("Int64")
        # CLI class names arrive as strings; compare labels on the same footing.
        frame[config.truth_column] = truth.astype(str)
    return frame


def write_markdown_report(
    summary: Dict[str, Any],
    table: pd.DataFrame,
    fold_table: Optional[pd.DataFrame],
    config: SweepConfig,
) -> None:
    lines: List[str] = ["# Threshold Sweep Notes", ""]

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- Predictions: `{config.predictions_path}` ({summary['n_records']} records)")
    lines.append(f"- Positive class: `{config.positive_class}` ({summary['n_positive']} positives)")
    lines.append(f"- Grid: {config.grid} ({summary['n_thresholds']} thresholds)")
    lines.append(f"- ROC AUC: {summary['roc_auc']:.4f}")
    lines.append(f"- PR AUC: {summary['pr_auc']:.4f} (AP={summary['average_precision']:.4f})")
    op = summary["operating_point"]
    if op.get("threshold") is not None:
        lines.append(
            f"- Operating point: threshold={op['threshold']:.3f} (policy={op['policy']}), "
            f"recall={op['recall']:.3f}, precision={op['precision']:.3f}, FPR={op['fpr']:.3f}"
        )
    else:
        lines.append("- Operating point: disabled (pass --target-recall to select one)")
    lines.append("")

    step = max(1, len(table) // 10)
    lines.append("## Sweep (sampled rows)")
    lines.append("")
    lines.append(table.iloc[::step].round(4).to_markdown(index=False))
    lines.append("")

    if fold_table is not None:
        lines.append("## Per-fold AUC")
        lines.append("")
        lines.append(fold_table.round(4).to_markdown(index=False))
        lines.append("")
        if summary["folds"]["n_degenerate"]:
            lines.append(
                f"- {summary['folds']['n_degenerate']} fold(s) contain a single class; "
                "their AUC is excluded from the summary."
            )
            lines.append("")

    lines.append("## Generated Artifacts")
    lines.append("")
    lines.extend(
        [
            f"- Sweep table: `{config.sweep_table_path}`",
            f"- ROC curve: `{config.roc_table_path}`, `{config.roc_curve_path}`",
            f"- PR curve: `{config.pr_table_path}`, `{config.pr_curve_path}`",
            f"- Operating point: `{config.operating_point_path}`",
        ]
    )
    if fold_table is not None:
        lines.append(f"- Fold AUC: `{config.fold_table_path}`, `{config.fold_auc_path}`")
    lines.append("")

    config.notes_path.parent.mkdir(parents=True, exist_ok=True)
    config.notes_path.write_text("\n".join(lines) + "\n")


def run_sweep(config: SweepConfig) -> Dict[str, Any]:
    """Sweep thresholds over the predictions and write artefacts.

    Returns a JSON-serialisable summary. Invalid predictions raise
    ``InvalidInput`` before anything is written.
    """
    frame = load_predictions(config)
    records = records_from_frame(frame, config.truth_column, config.score_column)
    labels = None if config.negative_class is None else [config.positive_class, config.negative_class]

    y_true_bin, y_prob, _ = validate_inputs(records, config.positive_class, [], labels)
    if config.grid == "scores":
        thresholds = score_grid(y_prob)
    else:
        thresholds = uniform_grid(config.grid_size)
    LOGGER.info(
        "Sweeping %d thresholds (%s grid) over %d records",
        len(thresholds),
        config.grid,
        len(records),
    )

    tallies = sweep_tallies(y_true_bin, y_prob, thresholds)
    table = tallies_to_frame(tallies)
    roc = roc_points(tallies)
    pr = pr_points(tallies)

    fold_table = None
    if config.fold_column is not None:
        fold_table = evaluate_folds(
            frame,
            config.positive_class,
            thresholds,
            truth_column=config.truth_column,
            score_column=config.score_column,
            fold_column=config.fold_column,
            negative_class=config.negative_class,
        )

    if config.target_recall is not None:
        thr, meta = select_operating_threshold(
            table,
            target_recall=float(config.target_recall),
            min_precision=config.min_precision,
            max_fpr=config.max_fpr,
            f_beta=config.f_beta,
        )
        operating_point: Dict[str, Any] = {"threshold": float(thr), **meta}
    else:
        operating_point = {"threshold": None, "policy": "disabled"}

    summary: Dict[str, Any] = {
        "n_records": int(len(records)),
        "n_positive": int(y_true_bin.sum()),
        "n_thresholds": int(len(thresholds)),
        "roc_auc": integrate_auc(roc),
        "pr_auc": integrate_pr_auc(pr),
        "average_precision": average_precision(pr),
        "operating_point": operating_point,
    }
    if fold_table is not None:
        summary["folds"] = summarize_folds(fold_table)

    config.sweep_table_path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(config.sweep_table_path, index=False)
    pd.DataFrame(roc).to_csv(config.roc_table_path, index=False)
    pd.DataFrame(pr).to_csv(config.pr_table_path, index=False)
    plot_roc_curves({config.positive_class: roc}, config.roc_curve_path)
    plot_pr_curves({config.positive_class: pr}, config.pr_curve_path)
    if fold_table is not None:
        fold_table.to_csv(config.fold_table_path, index=False)
        plot_fold_aucs(fold_table, config.fold_auc_path)

    config.operating_point_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config.operating_point_path, "w", encoding="utf-8") as fp:
        json.dump(operating_point, fp, indent=2)

    write_markdown_report(summary, table, fold_table, config)
    LOGGER.info("ROC AUC %.4f | PR AUC %.4f", summary["roc_auc"], summary["pr_auc"])
    return summary


def main(args: Optional[Sequence[str]] = None) -> None:
    config = parse_args(args)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format="[%(asctime)s] %(levelname)s:%(name)s:%(message)s",
    )
    try:
        summary = run_sweep(config)
    except InvalidInput as exc:
        raise SystemExit(f"Invalid predictions: {exc}") from exc
    print(json.dumps(summary))


if __name__ == "__main__":  # pragma: no cover
    main()
