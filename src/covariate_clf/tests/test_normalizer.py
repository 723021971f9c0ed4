import numpy as np
import pandas as pd
import pytest

from covariate_clf.errors import MalformedValueError
from covariate_clf.normalizer import SchemaNormalizer, parse_currency, parse_percentage


def _make_raw(n: int = 40) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "x0": np.arange(n, dtype=float),
            # 95% missing
            "x1": [1.0, 2.0] + [np.nan] * (n - 2),
            # constant
            "x2": ["same"] * n,
            "x3": ["Mon", "Thur", "Friday", "Sun"] * (n // 4),
            "x7": ["%12.5", "0.01%", None, "50%"] * (n // 4),
            "x19": ["$1,313.96", "$-908.65", "$1,?", None] * (n // 4),
        }
    )


def _normalizer() -> SchemaNormalizer:
    return SchemaNormalizer(
        max_missing_frac=0.9, day_column="x3", percent_column="x7", currency_column="x19"
    )


def test_fit_excludes_sparse_and_constant_columns():
    state = _normalizer().fit(_make_raw())
    assert set(state.excluded) == {"x1", "x2"}


def test_excluded_columns_absent_from_train_and_validation():
    raw = _make_raw()
    norm = _normalizer()
    state = norm.fit(raw)

    validation = raw.copy()
    # validation statistics do not matter for the exclusion list
    validation["x1"] = 5.0

    for table in (norm.transform(raw, state), norm.transform(validation, state)):
        assert "x1" not in table.columns
        assert "x2" not in table.columns
        assert "x0" in table.columns


def test_day_abbreviations_are_canonicalized():
    raw = _make_raw()
    norm = _normalizer()
    out = norm.transform(raw, norm.fit(raw))
    assert out["x3"].iloc[:4].tolist() == ["Monday", "Thursday", "Friday", "Sunday"]


def test_percentage_and_currency_are_parsed_and_malformed_cells_become_missing():
    raw = _make_raw()
    norm = _normalizer()
    out = norm.transform(raw, norm.fit(raw))

    assert out["x7"].iloc[0] == pytest.approx(0.125)
    assert out["x7"].iloc[1] == pytest.approx(0.0001)
    assert np.isnan(out["x7"].iloc[2])

    assert out["x19"].iloc[0] == pytest.approx(1313.96)
    assert out["x19"].iloc[1] == pytest.approx(-908.65)
    assert np.isnan(out["x19"].iloc[2])
    assert out["x19"].dtype == float


def test_transform_does_not_mutate_input():
    raw = _make_raw()
    before = raw.copy(deep=True)
    norm = _normalizer()
    _ = norm.transform(raw, norm.fit(raw))
    pd.testing.assert_frame_equal(raw, before)


def test_parsers_raise_malformed_value_error():
    with pytest.raises(MalformedValueError):
        parse_currency("$1,?")
    with pytest.raises(MalformedValueError):
        parse_percentage("abc%")
    assert parse_currency("-$5") == -5.0
    assert np.isnan(parse_percentage(None))


def test_mostly_malformed_currency_column_is_excluded_as_sparse():
    raw = pd.DataFrame(
        {
            "x0": np.arange(20, dtype=float),
            "x19": ["$1.00", "$2.00"] + ["$?"] * 18,
        }
    )
    norm = SchemaNormalizer(max_missing_frac=0.9, currency_column="x19")
    state = norm.fit(raw)

    assert state.excluded == ("x19",)
    assert "x19" not in norm.transform(raw, state).columns
