from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import List, Sequence

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from benchsweep.experiments.aggregate import SummaryRow  # noqa: E402


def plot_summary(summary: Sequence[SummaryRow], save_path: str | Path) -> Path:
    """Grouped bar chart: one group per dataset, one bar per classifier.

    Bars show mean percent correct with the standard deviation as error bar;
    datasets with a numeric class fall back to RMSE on the same axis.
    """
    save_path = Path(save_path)
    datasets: List[str] = list(OrderedDict.fromkeys(s.dataset for s in summary))
    classifiers: List[str] = list(OrderedDict.fromkeys(s.classifier for s in summary))
    by_key = {(s.dataset, s.classifier): s for s in summary}
    uses_accuracy = any(s.mean_percent_correct is not None for s in summary)

    fig, ax = plt.subplots(
        figsize=(max(6.0, 1.5 * len(datasets) * max(1, len(classifiers)) / 2), 4.5),
        constrained_layout=True,
    )
    width = 0.8 / max(1, len(classifiers))
    cmap = plt.get_cmap("tab10")
    for ci, clf in enumerate(classifiers):
        xs, heights, errs = [], [], []
        for di, ds in enumerate(datasets):
            s = by_key.get((ds, clf))
            if s is None:
                continue
            mean = s.mean_percent_correct if uses_accuracy else s.mean_rmse
            std = s.std_percent_correct if uses_accuracy else s.std_rmse
            if mean is None:
                continue
            xs.append(di + (ci - (len(classifiers) - 1) / 2) * width)
            heights.append(mean)
            errs.append(std or 0.0)
        ax.bar(xs, heights, width=width, yerr=errs, capsize=3, label=clf, color=cmap(ci % 10))
    ax.set_xticks(range(len(datasets)))
    ax.set_xticklabels(datasets, rotation=20, ha="right")
    ax.set_ylabel("Percent correct" if uses_accuracy else "RMSE")
    ax.set_title("Experiment summary", fontweight="bold")
    ax.grid(True, alpha=0.25, axis="y", linestyle="--", linewidth=0.7)
    if classifiers:
        ax.legend(fontsize=8)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path
