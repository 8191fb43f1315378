"""
loader.py — Fetches and parses the Weight Lifting Exercise (PML) tables.

This module handles:
- downloading pml-training.csv / pml-testing.csv on first use
- parsing them with the dataset's missing-value markers (NA, "", #DIV/0!)
- coercing sensor columns to numeric and `classe` to a categorical
- caching the parsed tables as parquet so later runs skip the download
- validating that both tables share the expected schema

Any failure to obtain the data raises DataUnavailable; any schema problem
raises SchemaMismatch. Both abort the run.
"""

from pathlib import Path

import pandas as pd
import requests

from wle.errors import DataUnavailable, SchemaMismatch
from .config import (
    DATA_DIR,
    TRAIN_URL,
    EVAL_URL,
    TRAIN_FILE,
    EVAL_FILE,
    TRAIN_CACHE,
    EVAL_CACHE,
    DOWNLOAD_TIMEOUT,
    NA_VALUES,
    LABEL_COLUMN,
    ID_COLUMN,
    EXPECTED_N_COLUMNS,
    BOOKKEEPING_COLUMNS,
    CLASSE_LEVELS,
)


def download_file(url, path, timeout=DOWNLOAD_TIMEOUT):
    """Downloads `url` into `path`. Raises DataUnavailable on any HTTP/IO error."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise DataUnavailable(f"Could not download {url}: {e}") from e

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(resp.content)
    except OSError as e:
        raise DataUnavailable(f"Could not write {path}: {e}") from e

    print(f"[download_file] {url} -> {path} ({len(resp.content) / 1024**2:.2f} MB)")
    return path


def read_pml_csv(path):
    """
    Parses one PML CSV into a DataFrame.

    The unnamed leading column (row number) is dropped, every non-bookkeeping
    column except `classe` is coerced to numeric, and `classe` becomes a
    categorical with levels A–E.
    """
    try:
        df = pd.read_csv(path, na_values=NA_VALUES, keep_default_na=True, low_memory=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataUnavailable(f"Could not read {path}: {e}") from e

    unnamed = [c for c in df.columns if str(c).startswith("Unnamed:") or c == ""]
    df = df.drop(columns=unnamed)

    for col in df.columns:
        if col in BOOKKEEPING_COLUMNS or col == LABEL_COLUMN:
            continue
        df[col] = pd.to_numeric(df[col], errors="coerce")

    if LABEL_COLUMN in df.columns:
        df[LABEL_COLUMN] = pd.Categorical(df[LABEL_COLUMN], categories=CLASSE_LEVELS)

    return df


def validate_schema(train_df, eval_df, n_columns=EXPECTED_N_COLUMNS):
    """
    Checks the invariants shared by the training and evaluation tables.

    Parameters
    ----------
    train_df : pandas.DataFrame
        Labeled table; its last column must be `classe`.

    eval_df : pandas.DataFrame
        Unlabeled table; its last column must be `problem_id`.

    n_columns : int
        Expected width of both tables.
    """
    for name, df in [("training", train_df), ("evaluation", eval_df)]:
        if df.shape[1] != n_columns:
            raise SchemaMismatch(
                f"{name} table has {df.shape[1]} columns, expected {n_columns}"
            )

    if LABEL_COLUMN not in train_df.columns:
        raise SchemaMismatch(f"training table lacks the label column '{LABEL_COLUMN}'")
    if ID_COLUMN not in eval_df.columns:
        raise SchemaMismatch(f"evaluation table lacks the id column '{ID_COLUMN}'")

    shared_train = [c for c in train_df.columns if c != LABEL_COLUMN]
    shared_eval = [c for c in eval_df.columns if c != ID_COLUMN]
    if shared_train != shared_eval:
        diff = sorted(set(shared_train).symmetric_difference(shared_eval))
        raise SchemaMismatch(
            f"training and evaluation columns differ (order or names): {diff[:10]}"
        )

    n_missing = int(train_df[LABEL_COLUMN].isna().sum())
    if n_missing:
        raise SchemaMismatch(
            f"{n_missing} training rows have a missing or unknown '{LABEL_COLUMN}'"
        )


def _load_table(url, csv_path, cache_path, refresh):
    if cache_path.exists() and not refresh:
        print(f"[load_pml_data] Using cached {cache_path}")
        try:
            return pd.read_parquet(cache_path)
        except (OSError, ValueError) as e:
            # pyarrow reports a corrupt file as ArrowInvalid, a ValueError
            raise DataUnavailable(
                f"Could not read cache {cache_path} (retry with refresh=True): {e}"
            ) from e

    if refresh or not csv_path.exists():
        download_file(url, csv_path)

    df = read_pml_csv(csv_path)
    try:
        df.to_parquet(cache_path, index=False)
    except (OSError, ValueError) as e:
        raise DataUnavailable(f"Could not write cache {cache_path}: {e}") from e
    return df


def load_pml_data(
    data_dir=DATA_DIR,
    refresh=False,
    n_columns=EXPECTED_N_COLUMNS,
    train_url=TRAIN_URL,
    eval_url=EVAL_URL,
):
    """
    Returns the labeled training table and the unlabeled evaluation table.

    Parameters
    ----------
    data_dir : str or pathlib.Path
        Directory holding the downloaded CSVs and their parquet caches.

    refresh : bool
        Re-download both CSVs even if they are already present.

    n_columns : int
        Expected width of both tables after loading.

    Returns
    -------
    (pandas.DataFrame, pandas.DataFrame)
        training table (with `classe`), evaluation table (with `problem_id`).
    """
    data_dir = Path(data_dir)
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DataUnavailable(f"Could not create {data_dir}: {e}") from e

    train_df = _load_table(train_url, data_dir / TRAIN_FILE, data_dir / TRAIN_CACHE, refresh)
    eval_df = _load_table(eval_url, data_dir / EVAL_FILE, data_dir / EVAL_CACHE, refresh)

    validate_schema(train_df, eval_df, n_columns=n_columns)

    print(f"[load_pml_data] training: {train_df.shape}, evaluation: {eval_df.shape}")
    print("[load_pml_data] Done.\n")
    return train_df, eval_df
