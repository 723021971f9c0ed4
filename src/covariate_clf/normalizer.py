import math
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np
import pandas as pd

from .errors import MalformedValueError
from .utils.logger import get_logger


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA:
        return True
    return isinstance(value, float) and math.isnan(value)


def parse_percentage(value: Any) -> float:
    """'%12.5' / '12.5%' -> 0.125. Plain numbers are read as percent too."""
    if _is_missing(value):
        return np.nan
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return float(value) / 100.0
    text = str(value).replace("%", "").strip()
    try:
        return float(text) / 100.0
    except ValueError:
        raise MalformedValueError(value) from None


def parse_currency(value: Any) -> float:
    """'$1,313.96' -> 1313.96, '$-908.65' / '-$908.65' -> -908.65."""
    if _is_missing(value):
        return np.nan
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip()
    sign = ""
    if text[:1] in "+-" and text[1:2] == "$":
        sign, text = text[0], text[1:]
    text = text.removeprefix("$").replace(",", "").strip()
    try:
        return float(sign + text)
    except ValueError:
        raise MalformedValueError(value) from None


@dataclass(frozen=True)
class NormalizerState:
    """Columns excluded on the training table; applied unchanged everywhere."""
    excluded: tuple[str, ...]


class SchemaNormalizer:
    """Drops unreliable columns and cleans inconsistent text encodings."""

    DAY_NAMES = {
        "Mon": "Monday",
        "Tue": "Tuesday",
        "Tues": "Tuesday",
        "Wed": "Wednesday",
        "Thu": "Thursday",
        "Thur": "Thursday",
        "Fri": "Friday",
        "Sat": "Saturday",
        "Sun": "Sunday",
    }

    def __init__(
        self,
        max_missing_frac: float = 0.9,
        day_column: Optional[str] = None,
        percent_column: Optional[str] = None,
        currency_column: Optional[str] = None,
    ):
        self.max_missing_frac = max_missing_frac
        self.day_column = day_column
        self.percent_column = percent_column
        self.currency_column = currency_column
        self.logger = get_logger(self.__class__.__name__)

    def fit(self, train: pd.DataFrame) -> NormalizerState:
        """Flag near-empty and constant columns of the cleaned training features.

        Malformed decorated cells already count as missing here.
        """
        cleaned = self._clean(train)
        missing_frac = cleaned.isna().mean()
        n_distinct = cleaned.nunique(dropna=True)

        sparse = missing_frac[missing_frac > self.max_missing_frac].index.tolist()
        constant = n_distinct[n_distinct <= 1].index.tolist()
        excluded = [c for c in train.columns if c in set(sparse) | set(constant)]

        self.logger.info(
            f"Excluding {len(excluded)} columns "
            f"(sparse={sorted(sparse)}, constant={sorted(constant)})"
        )
        return NormalizerState(excluded=tuple(excluded))

    def transform(self, df: pd.DataFrame, state: NormalizerState) -> pd.DataFrame:
        out = df.drop(columns=[c for c in state.excluded if c in df.columns])
        return self._clean(out)

    def _clean(self, df: pd.DataFrame) -> pd.DataFrame:
        out = df.copy()

        if self.day_column in out.columns:
            out[self.day_column] = out[self.day_column].replace(self.DAY_NAMES)

        if self.percent_column in out.columns:
            out[self.percent_column] = self._convert(out[self.percent_column], parse_percentage)

        if self.currency_column in out.columns:
            out[self.currency_column] = self._convert(out[self.currency_column], parse_currency)

        return out

    def _convert(self, series: pd.Series, parse: Callable[[Any], float]) -> pd.Series:
        """Parse every cell; malformed cells become missing and are imputed later."""
        values = []
        malformed = 0
        for value in series:
            try:
                values.append(parse(value))
            except MalformedValueError:
                malformed += 1
                values.append(np.nan)

        if malformed:
            self.logger.warning(
                f"Column '{series.name}': {malformed} malformed value(s) treated as missing"
            )
        return pd.Series(values, index=series.index, name=series.name, dtype=float)
