"""Step plots of swept curves, written straight to disk."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .common import CurvePoint, PRCurvePoint
from .precision_recall import average_precision, sort_pr_curve
from .roc import integrate_auc, sort_curve


def plot_roc_curves(curves: Dict[str, Sequence[CurvePoint]], output_path: Path) -> None:
    plt.figure(figsize=(6, 6))
    for label, curve in curves.items():
        ordered = sort_curve(curve)
        fpr = [p.fpr for p in ordered]
        tpr = [p.tpr for p in ordered]
        plt.step(fpr, tpr, where="post", label=f"{label} (AUC={integrate_auc(ordered):.3f})")

    plt.plot([0, 1], [0, 1], "k--", label="Chance")
    plt.xlabel("False Positive Rate")
    plt.ylabel("True Positive Rate")
    plt.title("ROC Curves")
    plt.legend(loc="lower right")
    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=200)
    plt.close()


def plot_pr_curves(curves: Dict[str, Sequence[PRCurvePoint]], output_path: Path) -> None:
    plt.figure(figsize=(6, 6))
    for label, curve in curves.items():
        ordered = sort_pr_curve(curve)
        recall = [p.recall for p in ordered]
        precision = [p.precision for p in ordered]
        plt.step(recall, precision, where="post", label=f"{label} (AP={average_precision(ordered):.3f})")
    plt.xlabel("Recall")
    plt.ylabel("Precision")
    plt.title("Precision-Recall Curves")
    plt.legend(loc="lower left")
    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=200)
    plt.close()


def plot_fold_aucs(fold_table: pd.DataFrame, output_path: Path) -> None:
    labels = [str(fold) for fold in fold_table["fold"]]
    x = np.arange(len(labels))
    colors = ["#9e9e9e" if degenerate else "#00796b" for degenerate in fold_table["degenerate"]]

    plt.figure(figsize=(max(6, len(labels) * 0.8), 4))
    plt.bar(x, fold_table["auc"], color=colors)
    plt.axhline(0.5, color="k", linestyle="--", linewidth=1, label="Chance")
    plt.xticks(x, labels, rotation=15)
    plt.xlabel("Fold")
    plt.ylabel("AUC")
    plt.title("ROC AUC per Fold (grey = single class)")
    plt.ylim(0, 1.05)
    plt.legend()
    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=200)
    plt.close()
