from __future__ import annotations

import csv
import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

logger = logging.getLogger("benchsweep.aggregate")

SUMMARY_COLUMNS = [
    "dataset",
    "classifier",
    "runs",
    "mean_percent_correct",
    "std_percent_correct",
    "mean_rmse",
    "std_rmse",
]


@dataclass(frozen=True)
class SummaryRow:
    dataset: str
    classifier: str
    runs: int
    mean_percent_correct: float | None
    std_percent_correct: float | None
    mean_rmse: float | None
    std_rmse: float | None


def _number(value: str | None) -> float | None:
    if value in (None, "", "?"):
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _mean_std(values: Sequence[float]) -> Tuple[float | None, float | None]:
    if not values:
        return None, None
    mean = sum(values) / len(values)
    if len(values) < 2:
        return mean, 0.0
    var = sum((v - mean) ** 2 for v in values) / (len(values) - 1)
    return mean, math.sqrt(var)


def load_result_rows(results_csv: Path) -> List[Dict[str, str]]:
    with open(results_csv, "r", newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def summarize_results(results_csv: str | Path) -> List[SummaryRow]:
    """Group result rows by (dataset, classifier) and average their metrics.

    Groups keep the order in which they first appear in the results file.
    """
    rows = load_result_rows(Path(results_csv))
    accuracy: Dict[Tuple[str, str], List[float]] = defaultdict(list)
    rmse: Dict[Tuple[str, str], List[float]] = defaultdict(list)
    runs: Dict[Tuple[str, str], int] = {}
    for r in rows:
        key = (r.get("dataset") or "", r.get("classifier") or "")
        runs[key] = runs.get(key, 0) + 1
        pc = _number(r.get("percent_correct"))
        if pc is not None:
            accuracy[key].append(pc)
        err = _number(r.get("root_mean_squared_error"))
        if err is not None:
            rmse[key].append(err)
    summary: List[SummaryRow] = []
    for key, count in runs.items():
        acc_mean, acc_std = _mean_std(accuracy[key])
        rmse_mean, rmse_std = _mean_std(rmse[key])
        summary.append(SummaryRow(key[0], key[1], count, acc_mean, acc_std, rmse_mean, rmse_std))
    return summary


def write_summary_csv(results_csv: str | Path, out_path: str | Path) -> Path:
    summary = summarize_results(results_csv)
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(SUMMARY_COLUMNS)
        for s in summary:
            writer.writerow(
                [
                    s.dataset,
                    s.classifier,
                    s.runs,
                    "" if s.mean_percent_correct is None else f"{s.mean_percent_correct:.4f}",
                    "" if s.std_percent_correct is None else f"{s.std_percent_correct:.4f}",
                    "" if s.mean_rmse is None else f"{s.mean_rmse:.6f}",
                    "" if s.std_rmse is None else f"{s.std_rmse:.6f}",
                ]
            )
    if not summary:
        logger.warning("No result rows found in %s", results_csv)
    logger.info("Summary written: %s", out_path)
    return out_path
