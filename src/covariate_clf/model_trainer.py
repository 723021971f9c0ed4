import warnings
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.linear_model import LogisticRegression

from .utils.logger import get_logger


def design_matrix(X: pd.DataFrame) -> pd.DataFrame:
    """Expand factor columns into treatment dummies (first level is the baseline)."""
    factor_cols = [c for c in X.columns if isinstance(X[c].dtype, pd.CategoricalDtype)]
    if not factor_cols:
        return X.astype(float)
    return pd.get_dummies(X, columns=factor_cols, drop_first=True, dtype=float)


@dataclass(frozen=True)
class FittedModel:
    """A trained classifier plus what is needed to score new encoded tables."""
    name: str
    estimator: Any
    feature_columns: list[str]
    one_hot: bool = False

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        if self.one_hot:
            X = design_matrix(X).reindex(columns=self.feature_columns, fill_value=0.0)
        else:
            X = X[self.feature_columns]
        return self.estimator.predict_proba(X)[:, 1]


class LinearTrainer:
    """
    Unregularized logistic regression on every retained feature.

    Factors enter through treatment dummies, numerics and binaries enter
    linearly. No interaction terms.
    """

    name = "logistic"

    def __init__(self, max_iter: int = 1000):
        self.max_iter = max_iter
        self.logger = get_logger(self.__class__.__name__)

    def fit(self, X: pd.DataFrame, y: np.ndarray) -> FittedModel:
        design = design_matrix(X)
        # C=inf disables the penalty: a plain maximum-likelihood fit
        model = LogisticRegression(C=np.inf, solver="lbfgs", max_iter=self.max_iter)
        model.fit(design, np.asarray(y).astype(int))

        self.logger.info(
            f"Fitted logistic regression on {design.shape[0]:,} rows x {design.shape[1]} terms"
        )
        return FittedModel(self.name, model, design.columns.tolist(), one_hot=True)


class EnsembleTrainer:
    """
    Gradient boosted trees with a Bernoulli (log-loss) objective, via LightGBM.

    ``interaction_depth`` is the number of splits per tree, so each tree
    gets ``interaction_depth + 1`` leaves. Factor columns are handled as
    native LightGBM categoricals.
    """

    name = "boosting"

    DEFAULT_PARAMS: dict[str, Any] = {
        "learning_rate": 0.035,
        "interaction_depth": 2,
        "n_estimators": 1250,
        "subsample": 0.5,
        "min_child_samples": 10,
        "random_state": 42,
    }

    def __init__(self, params: dict[str, Any] | None = None):
        self.params = {**self.DEFAULT_PARAMS, **(params or {})}
        self.logger = get_logger(self.__class__.__name__)
        warnings.filterwarnings("ignore", category=UserWarning, module="lightgbm")

    @staticmethod
    def to_lgbm_params(params: dict[str, Any]) -> dict[str, Any]:
        lgbm = dict(params)
        depth = int(lgbm.pop("interaction_depth"))
        lgbm["num_leaves"] = depth + 1
        lgbm["max_depth"] = -1
        lgbm["objective"] = "binary"
        if lgbm.get("subsample", 1.0) < 1.0:
            lgbm.setdefault("subsample_freq", 1)
        lgbm.setdefault("verbosity", -1)
        return lgbm

    def fit(self, X: pd.DataFrame, y: np.ndarray, **overrides: Any) -> FittedModel:
        params = {**self.params, **overrides}
        model = LGBMClassifier(**self.to_lgbm_params(params))
        model.fit(X, np.asarray(y).astype(int))

        self.logger.debug(
            f"Fitted boosting: shrinkage={params['learning_rate']}, "
            f"depth={params['interaction_depth']}, trees={params['n_estimators']}"
        )
        return FittedModel(self.name, model, X.columns.tolist())
