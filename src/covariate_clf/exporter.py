import os

import numpy as np
import pandas as pd

from .model_trainer import FittedModel
from .utils.logger import get_logger


class PredictionExporter:
    """Scores the encoded validation table and writes one probability column per model."""

    def __init__(self, column: str = "prediction"):
        self.column = column
        self.logger = get_logger(self.__class__.__name__)

    def predict(self, model: FittedModel, X: pd.DataFrame) -> np.ndarray:
        proba = np.asarray(model.predict_proba(X), dtype=float)
        if len(proba) != len(X):
            raise RuntimeError(f"{model.name}: got {len(proba)} predictions for {len(X)} rows")
        if not np.all(np.isfinite(proba)) or proba.min() < 0.0 or proba.max() > 1.0:
            raise RuntimeError(f"{model.name}: predictions outside [0, 1]")
        return proba

    def export(self, model: FittedModel, X: pd.DataFrame, path: str) -> np.ndarray:
        proba = self.predict(model, X)

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        pd.DataFrame({self.column: proba}).to_csv(path, index=False)

        self.logger.info(f"Predictions saved: {path} ({len(proba):,} rows)")
        self.logger.info(
            f"{model.name} prediction stats (mean={proba.mean():.4f}, "
            f"min={proba.min():.4f}, max={proba.max():.4f})"
        )
        return proba
