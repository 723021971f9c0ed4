from typing import NamedTuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split


class SplitResult(NamedTuple):
    X_fit: pd.DataFrame
    X_eval: pd.DataFrame
    y_fit: np.ndarray
    y_eval: np.ndarray


class Splitter:
    """Seeded fit / evaluation partition of the encoded training table."""

    def __init__(self, test_size: float = 0.2, random_state: int = 42, stratify: bool = False):
        self.test_size = test_size
        self.random_state = random_state
        self.stratify = stratify

    def split(self, X: pd.DataFrame, y: np.ndarray) -> SplitResult:
        y = np.asarray(y).astype(int)
        X_fit, X_eval, y_fit, y_eval = train_test_split(
            X,
            y,
            test_size=self.test_size,
            random_state=self.random_state,
            stratify=y if self.stratify else None,
        )
        return SplitResult(X_fit, X_eval, y_fit, y_eval)
