import os

import pandas as pd
import psutil
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.preprocessing import OrdinalEncoder

from wle.errors import SchemaMismatch
from .config import TARGET_COLUMN, MAX_WORKERS, GB_PER_WORKER


def split_X_y(df, label_col=TARGET_COLUMN):
    """Separates features and label. The label must have survived filtering."""
    if label_col not in df.columns:
        raise SchemaMismatch(f"label column '{label_col}' is missing from the training data")
    X = df.drop(columns=[label_col])
    y = df[label_col]
    return X, y


def categorical_columns(X):
    return [
        col for col in X.columns
        if pd.api.types.is_bool_dtype(X[col]) or not pd.api.types.is_numeric_dtype(X[col])
    ]


def build_preprocessor(X):
    """
    Builds an (unfitted) ColumnTransformer for the tree models.

    - Numeric features: median imputation (empty columns kept)
    - Categorical features: ordinal codes, unknown -> -1, missing -> -2

    The output width always equals the input width, so `max_features`
    values stay valid across resamples.
    """
    categorical_features = categorical_columns(X)
    numeric_features = [col for col in X.columns if col not in categorical_features]

    transformers = [
        ("num", SimpleImputer(strategy="median", keep_empty_features=True), numeric_features),
    ]
    if categorical_features:
        categorical_transformer = OrdinalEncoder(
            handle_unknown="use_encoded_value",
            unknown_value=-1,
            encoded_missing_value=-2,
        )
        transformers.append(("cat", categorical_transformer, categorical_features))

    return ColumnTransformer(transformers=transformers, remainder="drop")


def choose_n_jobs(max_workers=MAX_WORKERS, gb_per_worker=GB_PER_WORKER):
    """Automatically bounds the worker count by CPUs and available memory."""
    free_gb = psutil.virtual_memory().available / 1e9
    n_cpu = psutil.cpu_count(logical=True) or os.cpu_count() or 1

    by_memory = int(free_gb // gb_per_worker) if gb_per_worker > 0 else max_workers
    return max(1, min(max_workers, n_cpu, by_memory))
