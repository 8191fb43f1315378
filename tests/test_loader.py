import pandas as pd
import pytest
import requests

from wle.dataset_preparation import loader
from wle.dataset_preparation.loader import load_pml_data, read_pml_csv, validate_schema
from wle.errors import DataUnavailable, SchemaMismatch

from conftest import make_sensor_table, make_eval_table


class FakeResponse:
    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


def _to_pml_csv(df):
    out = df.copy()
    out["kurtosis_roll_belt"] = out["kurtosis_roll_belt"].astype(object)
    out.loc[out["kurtosis_roll_belt"].isna(), "kurtosis_roll_belt"] = "#DIV/0!"
    # the source CSVs carry an unnamed leading row-number column
    return out.to_csv(index=True).encode("utf-8")


@pytest.fixture
def pml_bytes():
    train = make_sensor_table(n_rows=120)
    return {
        "train": _to_pml_csv(train),
        "eval": _to_pml_csv(make_eval_table(train)),
        "n_columns": train.shape[1],
    }


@pytest.fixture
def fake_download(monkeypatch, pml_bytes):
    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        key = "train" if "training" in url else "eval"
        return FakeResponse(pml_bytes[key])

    monkeypatch.setattr(loader.requests, "get", fake_get)
    return calls


def test_read_pml_csv_parses_markers(tmp_path, pml_bytes):
    path = tmp_path / "pml-training.csv"
    path.write_bytes(pml_bytes["train"])

    df = read_pml_csv(path)

    assert not any(str(c).startswith("Unnamed") for c in df.columns)
    assert df.shape[1] == pml_bytes["n_columns"]
    assert pd.api.types.is_float_dtype(df["kurtosis_roll_belt"])
    assert df["kurtosis_roll_belt"].isna().mean() > 0.9
    assert isinstance(df["classe"].dtype, pd.CategoricalDtype)
    assert list(df["classe"].cat.categories) == ["A", "B", "C", "D", "E"]
    assert not pd.api.types.is_numeric_dtype(df["user_name"])


def test_load_downloads_once_then_uses_cache(tmp_path, fake_download, pml_bytes, monkeypatch):
    train, evaluation = load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"])

    assert len(fake_download) == 2
    assert (tmp_path / "pml-training.parquet").exists()
    assert (tmp_path / "pml-testing.parquet").exists()
    assert len(train) == 120
    assert len(evaluation) == 20
    assert "problem_id" in evaluation.columns

    def no_network(*args, **kwargs):
        raise AssertionError("network used despite cache")

    monkeypatch.setattr(loader.requests, "get", no_network)
    train2, _ = load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"])
    assert list(train2.columns) == list(train.columns)
    assert train2["classe"].astype(str).tolist() == train["classe"].astype(str).tolist()
    assert train2["roll_belt"].tolist() == train["roll_belt"].tolist()


def test_refresh_downloads_again(tmp_path, fake_download, pml_bytes):
    load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"])
    load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"], refresh=True)
    assert len(fake_download) == 4


def test_download_failure_is_data_unavailable(tmp_path, monkeypatch):
    def broken_get(url, timeout=None):
        raise requests.exceptions.ConnectionError("host unreachable")

    monkeypatch.setattr(loader.requests, "get", broken_get)
    with pytest.raises(DataUnavailable):
        load_pml_data(data_dir=tmp_path)


def test_http_error_is_data_unavailable(tmp_path, monkeypatch):
    monkeypatch.setattr(loader.requests, "get", lambda url, timeout=None: FakeResponse(b"", 404))
    with pytest.raises(DataUnavailable):
        load_pml_data(data_dir=tmp_path)


def test_wrong_width_is_schema_mismatch(tmp_path, fake_download, pml_bytes):
    with pytest.raises(SchemaMismatch):
        load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"] + 1)


def test_validate_schema_rejects_missing_label_values():
    train = make_sensor_table(n_rows=50)
    evaluation = make_eval_table(train, n_rows=5)
    train.loc[3, "classe"] = None

    with pytest.raises(SchemaMismatch):
        validate_schema(train, evaluation, n_columns=train.shape[1])


def test_validate_schema_rejects_mismatched_columns():
    train = make_sensor_table(n_rows=50)
    evaluation = make_eval_table(train, n_rows=5).rename(columns={"roll_belt": "roll_arm"})

    with pytest.raises(SchemaMismatch):
        validate_schema(train, evaluation, n_columns=train.shape[1])


def test_corrupt_cache_is_data_unavailable(tmp_path):
    (tmp_path / "pml-training.parquet").write_bytes(b"not parquet")

    with pytest.raises(DataUnavailable):
        load_pml_data(data_dir=tmp_path)


def test_corrupt_cache_is_replaced_on_refresh(tmp_path, fake_download, pml_bytes):
    (tmp_path / "pml-training.parquet").write_bytes(b"not parquet")

    train, _ = load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"], refresh=True)

    assert len(train) == 120
    assert len(fake_download) == 2


def test_cache_write_failure_is_data_unavailable(tmp_path, fake_download, pml_bytes, monkeypatch):
    def broken_to_parquet(self, *args, **kwargs):
        raise ValueError("unsupported column type")

    monkeypatch.setattr(pd.DataFrame, "to_parquet", broken_to_parquet)
    with pytest.raises(DataUnavailable):
        load_pml_data(data_dir=tmp_path, n_columns=pml_bytes["n_columns"])
