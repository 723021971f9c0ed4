import pandas as pd
import pytest

from covariate_clf.data_loader import DataLoader
from covariate_clf.errors import SchemaMismatchError


def test_data_loader_sampling_is_deterministic(tmp_path):
    # Create a small CSV on the fly
    df = pd.DataFrame(
        {
            "x0": list(range(100)),
            "x1": [f"v{i % 3}" for i in range(100)],
            "y": [i % 2 for i in range(100)],
        }
    )
    csv_path = tmp_path / "toy.csv"
    df.to_csv(csv_path, index=False)

    s1 = DataLoader(path=str(csv_path), sample_size=10).load()
    s2 = DataLoader(path=str(csv_path), sample_size=10).load()

    pd.testing.assert_frame_equal(s1, s2)
    assert len(s1) == 10
    # sampled rows keep their original relative order
    assert s1["x0"].is_monotonic_increasing


def test_data_loader_reads_full_table_without_sampling(tmp_path):
    df = pd.DataFrame({"x0": [1.5, None, 3.0], "y": [0, 1, 0]})
    csv_path = tmp_path / "train.csv"
    df.to_csv(csv_path, index=False)

    out = DataLoader(path=str(csv_path)).load()
    assert out.shape == (3, 2)
    assert out["x0"].isna().sum() == 1


def test_check_schema_aligns_validation_columns_and_drops_label():
    train = pd.DataFrame({"x0": [1], "x1": ["a"], "y": [1]})
    validation = pd.DataFrame({"x1": ["b"], "x0": [2], "y": [0]})

    out = DataLoader.check_schema(train, validation, "y")
    assert list(out.columns) == ["x0", "x1"]


def test_check_schema_rejects_mismatched_features():
    train = pd.DataFrame({"x0": [1], "x1": ["a"], "y": [1]})
    validation = pd.DataFrame({"x0": [2], "x2": ["b"]})

    with pytest.raises(SchemaMismatchError) as exc:
        DataLoader.check_schema(train, validation, "y")
    assert exc.value.column == "x1"


def test_check_schema_requires_label_in_train():
    train = pd.DataFrame({"x0": [1]})
    with pytest.raises(SchemaMismatchError):
        DataLoader.check_schema(train, pd.DataFrame({"x0": [2]}), "y")
