import json
import os
from dataclasses import dataclass
from typing import Dict, List, NamedTuple

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from sklearn.metrics import roc_auc_score, roc_curve

from .utils.logger import get_logger


class EvaluationPoint(NamedTuple):
    threshold: float
    tpr: float
    fpr: float


@dataclass(frozen=True)
class RocResult:
    """ROC curve ordered by descending threshold, plus its AUC."""
    name: str
    points: List[EvaluationPoint]
    auc: float

    @property
    def fpr(self) -> np.ndarray:
        return np.array([p.fpr for p in self.points])

    @property
    def tpr(self) -> np.ndarray:
        return np.array([p.tpr for p in self.points])


class Evaluator:
    """Evaluate binary classifier probabilities on the held-out subset via ROC/AUC."""

    def __init__(self, metrics_path: str, figures_dir: str = "artifacts", verbose: bool = True):
        self.metrics_path = metrics_path
        self.figures_dir = figures_dir
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)

    def evaluate(self, name: str, y_true: np.ndarray, y_proba: np.ndarray) -> RocResult:
        y_true = np.asarray(y_true).astype(int)
        y_proba = np.asarray(y_proba).astype(float)

        fpr, tpr, thresholds = roc_curve(y_true, y_proba, drop_intermediate=False)
        points = [
            EvaluationPoint(float(t), float(tp), float(fp))
            for t, tp, fp in zip(thresholds, tpr, fpr)
        ]
        auc = float(roc_auc_score(y_true, y_proba))

        if self.verbose:
            self.logger.info(f"{name} ROC-AUC: {auc:.4f} ({len(points)} thresholds)")
        return RocResult(name=name, points=points, auc=auc)

    def save(self, results: List[RocResult]) -> Dict[str, float]:
        """Write AUC per model as JSON and return the same mapping."""
        metrics = {f"{r.name}_ROC_AUC": r.auc for r in results}

        os.makedirs(os.path.dirname(self.metrics_path) or ".", exist_ok=True)
        with open(self.metrics_path, "w") as f:
            json.dump(metrics, f, indent=4)

        if self.verbose:
            self.logger.info(f"Saved metrics: {self.metrics_path}")
        return metrics

    def plot_roc(self, results: List[RocResult], filename: str = "roc_curves.png") -> str:
        """Plot all ROC curves on one figure and save to figures_dir. Returns saved path."""
        plt.figure(figsize=(6, 5))
        for r in results:
            # ROC steps repeat fpr values; plot raw points instead of aggregating
            sns.lineplot(
                x=r.fpr, y=r.tpr, label=f"{r.name} (AUC={r.auc:.3f})", estimator=None, sort=False
            )
        plt.plot([0, 1], [0, 1], linestyle="--", color="grey")
        plt.xlabel("False positive rate")
        plt.ylabel("True positive rate")
        plt.title("ROC Curves (evaluation subset)")
        plt.legend()

        os.makedirs(self.figures_dir, exist_ok=True)
        path = os.path.join(self.figures_dir, filename)

        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()

        if self.verbose:
            self.logger.info(f"Saved ROC curves: {path}")

        return path
