import numpy as np
import pandas as pd
import pytest

from covariate_clf.errors import DegenerateColumnError, UnseenCategoryError
from covariate_clf.feature_encoder import UNSEEN_LEVEL, FeatureEncoder


def _make_train() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "x0": [1.0, 2.0, 3.0, 4.0, 10.0],
            "x5": [100, 200, 300, 200, 100],
            "x24": ["male", "female", "Male", "female", "other"],
            "x31": ["yes", "no", "no", "yes", "yes"],
            "x3": ["Monday", "Tuesday", "Monday", "Friday", "Friday"],
        }
    )


def _encoder(**kwargs) -> FeatureEncoder:
    return FeatureEncoder(binary_columns={"x24": "male", "x31": "yes"}, **kwargs)


def test_numeric_columns_are_standardized_on_fitted_table():
    train = _make_train()
    enc = _encoder()
    out = enc.transform(train, enc.fit(train))

    for col in ("x0", "x5"):
        assert out[col].mean() == pytest.approx(0.0, abs=1e-12)
        assert np.std(out[col].to_numpy()) == pytest.approx(1.0)


def test_binary_columns_map_positive_value_to_one():
    train = _make_train()
    enc = _encoder()
    out = enc.transform(train, enc.fit(train))

    assert out["x24"].tolist() == [1, 0, 1, 0, 0]
    assert out["x31"].tolist() == [1, 0, 0, 1, 1]


def test_categorical_columns_become_factors_with_training_levels():
    train = _make_train()
    enc = _encoder()
    state = enc.fit(train)
    out = enc.transform(train, state)

    assert isinstance(out["x3"].dtype, pd.CategoricalDtype)
    assert list(out["x3"].cat.categories) == ["Friday", "Monday", "Tuesday", UNSEEN_LEVEL]
    assert state.columns["x3"].role == "categorical"


def test_validation_uses_training_statistics():
    train = _make_train()
    enc = _encoder()
    state = enc.fit(train)
    mean, std = state.columns["x0"].mean, state.columns["x0"].std

    validation = train.copy()
    validation["x0"] = validation["x0"] * 100
    out = enc.transform(validation, state)

    assert state.columns["x0"].mean == mean
    assert state.columns["x0"].std == std
    np.testing.assert_allclose(out["x0"], (validation["x0"] - mean) / std)


def test_unseen_level_maps_to_sentinel_by_default():
    train = _make_train()
    enc = _encoder()
    state = enc.fit(train)

    validation = train.copy()
    validation.loc[0, "x3"] = "Sunday"
    out = enc.transform(validation, state)
    assert out.loc[0, "x3"] == UNSEEN_LEVEL
    assert out.loc[1, "x3"] == "Tuesday"


def test_unseen_level_raises_in_strict_mode():
    train = _make_train()
    enc = _encoder(unseen_policy="strict")
    state = enc.fit(train)

    validation = train.copy()
    validation.loc[0, "x3"] = "Sunday"
    with pytest.raises(UnseenCategoryError) as exc:
        enc.transform(validation, state)
    assert exc.value.column == "x3"


def test_zero_variance_numeric_column_is_degenerate():
    train = _make_train()
    train["x9"] = 7.0
    with pytest.raises(DegenerateColumnError) as exc:
        _encoder().fit(train)
    assert exc.value.column == "x9"


def test_transform_does_not_mutate_input():
    train = _make_train()
    before = train.copy(deep=True)
    enc = _encoder()
    _ = enc.transform(train, enc.fit(train))
    pd.testing.assert_frame_equal(train, before)
