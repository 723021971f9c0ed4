from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pandas as pd
from sklearn.experimental import enable_iterative_imputer  # noqa: F401
from sklearn.impute import IterativeImputer
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from .errors import UnimputableColumnError
from .utils.logger import get_logger


@dataclass(frozen=True)
class ImputerState:
    """Everything needed to re-apply a fitted imputation to another table."""
    columns: tuple[str, ...]
    categorical_cols: tuple[str, ...]
    levels: dict[str, list[Any]]
    sentinels: dict[str, str]
    iterative: IterativeImputer
    classifiers: dict[str, DecisionTreeClassifier] = field(default_factory=dict)


class Imputer:
    """
    Conditional tree-based imputation of numeric and categorical columns.

    All columns are imputed jointly by chained equations: categoricals are
    ordinal-coded, and sklearn's IterativeImputer regresses every column on
    the current values of the others using a decision tree. Categorical
    gaps are then settled by a decision tree classifier fitted on the rows
    where the column is observed. Estimators exist for every column, so a
    table with gaps where the fitted one had none is still imputed
    conditionally.

    Columns listed in ``sentinel_columns`` are never predicted; their
    gaps get the configured sentinel level instead.
    """

    def __init__(
        self,
        sentinel_columns: Optional[dict[str, str]] = None,
        max_iter: int = 5,
        tree_max_depth: Optional[int] = 10,
        random_state: int = 42,
        verbose: bool = True,
    ):
        self.sentinel_columns = dict(sentinel_columns or {})
        self.max_iter = max_iter
        self.tree_max_depth = tree_max_depth
        self.random_state = random_state
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)

    def fit(self, df: pd.DataFrame) -> ImputerState:
        empty = [c for c in df.columns if df[c].isna().all()]
        if empty:
            raise UnimputableColumnError(empty[0])

        sentinels = {c: v for c, v in self.sentinel_columns.items() if c in df.columns}
        filled = df.fillna(sentinels) if sentinels else df

        categorical_cols = [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
        levels = {c: sorted(filled[c].dropna().unique().tolist(), key=str) for c in categorical_cols}

        coded = self._encode(filled, categorical_cols, levels)
        iterative = IterativeImputer(
            estimator=DecisionTreeRegressor(
                max_depth=self.tree_max_depth, random_state=self.random_state
            ),
            max_iter=self.max_iter,
            random_state=self.random_state,
            # every column gets a fitted estimator so gaps that only appear at
            # transform time are still predicted from the other columns
            skip_complete=False,
        )
        imputed = pd.DataFrame(
            iterative.fit_transform(coded), columns=coded.columns, index=coded.index
        )

        classifiers: dict[str, DecisionTreeClassifier] = {}
        for col in categorical_cols:
            if col in sentinels:
                continue
            observed = coded[col].notna()
            clf = DecisionTreeClassifier(
                max_depth=self.tree_max_depth, random_state=self.random_state
            )
            clf.fit(imputed.drop(columns=[col])[observed], coded.loc[observed, col].astype(int))
            classifiers[col] = clf

        if self.verbose:
            n_missing = int(df.isna().sum().sum())
            self.logger.info(
                f"Fitted imputer on {df.shape[0]:,} rows: {n_missing:,} missing cells, "
                f"{len(categorical_cols)} categorical, {len(sentinels)} sentinel columns"
            )

        return ImputerState(
            columns=tuple(df.columns),
            categorical_cols=tuple(categorical_cols),
            levels=levels,
            sentinels=sentinels,
            iterative=iterative,
            classifiers=classifiers,
        )

    def transform(self, df: pd.DataFrame, state: ImputerState) -> pd.DataFrame:
        """Fill missing cells only; observed cells are returned unchanged."""
        out = df[list(state.columns)].copy()
        if state.sentinels:
            out = out.fillna(state.sentinels)

        missing = out.isna()
        if not missing.any().any():
            return out

        coded = self._encode(out, state.categorical_cols, state.levels)
        imputed = pd.DataFrame(
            state.iterative.transform(coded), columns=coded.columns, index=coded.index
        )

        for col in state.columns:
            mask = missing[col]
            if not mask.any():
                continue

            if col not in state.categorical_cols:
                out.loc[mask, col] = imputed.loc[mask, col]
                continue

            codes = self._predict_codes(col, imputed, mask, state)
            out.loc[mask, col] = [state.levels[col][c] for c in codes]

        return out

    def fit_transform(self, df: pd.DataFrame) -> tuple[pd.DataFrame, ImputerState]:
        state = self.fit(df)
        return self.transform(df, state), state

    @staticmethod
    def _encode(
        df: pd.DataFrame,
        categorical_cols: tuple[str, ...] | list[str],
        levels: dict[str, list[Any]],
    ) -> pd.DataFrame:
        """Ordinal-code categoricals; unknown levels become NaN so they get imputed as predictors."""
        coded = df.copy()
        for col in categorical_cols:
            lookup = {level: i for i, level in enumerate(levels[col])}
            coded[col] = df[col].map(lookup).astype(float)
        return coded.astype(float)

    @staticmethod
    def _predict_codes(
        col: str,
        imputed: pd.DataFrame,
        mask: pd.Series,
        state: ImputerState,
    ) -> np.ndarray:
        clf = state.classifiers[col]
        return clf.predict(imputed.drop(columns=[col])[mask]).astype(int)
