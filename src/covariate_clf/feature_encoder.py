from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from .errors import DegenerateColumnError, UnseenCategoryError
from .utils.logger import get_logger

UNSEEN_LEVEL = "__unseen__"

Role = Literal["numeric", "binary", "categorical"]


@dataclass(frozen=True)
class ColumnSchema:
    """Fitted metadata for one retained column."""
    name: str
    role: Role
    mean: Optional[float] = None
    std: Optional[float] = None
    levels: Optional[tuple[Any, ...]] = None
    positive: Optional[str] = None


@dataclass(frozen=True)
class EncoderState:
    columns: dict[str, ColumnSchema]

    def names(self, role: Role) -> list[str]:
        return [name for name, col in self.columns.items() if col.role == role]


class FeatureEncoder:
    """Binary mapping, factor levels and standardization fitted on the training table."""

    def __init__(
        self,
        binary_columns: Optional[dict[str, str]] = None,
        unseen_policy: Literal["sentinel", "strict"] = "sentinel",
    ):
        self.binary_columns = dict(binary_columns or {})
        self.unseen_policy = unseen_policy
        self.logger = get_logger(self.__class__.__name__)

    def fit(self, train: pd.DataFrame) -> EncoderState:
        columns: dict[str, ColumnSchema] = {}
        numeric_cols: list[str] = []

        for col in train.columns:
            if col in self.binary_columns:
                columns[col] = ColumnSchema(
                    col, "binary", positive=str(self.binary_columns[col]).lower()
                )
            elif pd.api.types.is_numeric_dtype(train[col]):
                numeric_cols.append(col)
                columns[col] = ColumnSchema(col, "numeric")
            else:
                levels = sorted(train[col].dropna().unique().tolist(), key=str)
                columns[col] = ColumnSchema(col, "categorical", levels=tuple(levels))

        if numeric_cols:
            scaler = StandardScaler().fit(train[numeric_cols].astype(float))
            for col, mean, var in zip(numeric_cols, scaler.mean_, scaler.var_):
                if not var > 0:
                    raise DegenerateColumnError(col)
                columns[col] = ColumnSchema(col, "numeric", mean=float(mean), std=float(np.sqrt(var)))

        state = EncoderState(columns=columns)
        self.logger.info(
            f"Encoder fitted: numeric={len(state.names('numeric'))}, "
            f"binary={len(state.names('binary'))}, categorical={len(state.names('categorical'))}"
        )
        return state

    def transform(self, df: pd.DataFrame, state: EncoderState) -> pd.DataFrame:
        encoded: dict[str, Any] = {}

        for name, col in state.columns.items():
            values = df[name]
            if col.role == "numeric":
                encoded[name] = (values.astype(float) - col.mean) / col.std
            elif col.role == "binary":
                encoded[name] = (values.astype(str).str.lower() == col.positive).astype(int)
            else:
                encoded[name] = self._to_factor(values, col)

        return pd.DataFrame(encoded, index=df.index)

    def _to_factor(self, values: pd.Series, col: ColumnSchema) -> pd.Categorical:
        levels = list(col.levels) + [UNSEEN_LEVEL]
        unseen = ~values.isin(col.levels)
        if unseen.any():
            if self.unseen_policy == "strict":
                raise UnseenCategoryError(col.name, values[unseen].unique().tolist())
            self.logger.warning(
                f"Column '{col.name}': {int(unseen.sum())} value(s) mapped to '{UNSEEN_LEVEL}'"
            )
            values = values.astype(object).where(~unseen, UNSEEN_LEVEL)
        return pd.Categorical(values, categories=levels)
