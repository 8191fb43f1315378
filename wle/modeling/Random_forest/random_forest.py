import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV
from sklearn.pipeline import Pipeline

from wle.modeling.preprocessing import build_preprocessor
from wle.modeling.resampling import make_splits
from wle.modeling.evaluation import accuracy_table
from . import config


def mtry_grid(n_features, length=config.MTRY_LENGTH):
    """
    Candidate numbers of features tried per split: `length` values evenly
    spaced from 2 to `n_features` (floored, de-duplicated).
    """
    if n_features < 2:
        return [max(n_features, 1)]
    values = np.floor(np.linspace(2, n_features, num=length)).astype(int)
    return sorted(set(values.tolist()))


def build_forest_pipeline(X, random_state):
    rf = RandomForestClassifier(
        n_estimators=config.RF_N_ESTIMATORS,
        class_weight=config.RF_CLASS_WEIGHT,
        n_jobs=config.RF_JOBS,
        random_state=random_state,
    )
    return Pipeline([("prep", build_preprocessor(X)), ("model", rf)])


def fit_forest(X, y, k, mtry_values, method, validation_fraction, random_state):
    """
    Fits one sweep configuration: mtry tuned over the k-split resampler.
    Runs inside a worker; returns (k, best pipeline, accuracy table).
    """
    splits = make_splits(
        X, y, k,
        method=method,
        validation_fraction=validation_fraction,
        random_state=random_state,
    )
    search = GridSearchCV(
        build_forest_pipeline(X, random_state),
        param_grid={"model__max_features": list(mtry_values)},
        scoring="accuracy",
        cv=splits,
        refit=True,
        n_jobs=1,
        error_score="raise",
    )
    search.fit(X, y)
    return k, search.best_estimator_, accuracy_table(search, "model__max_features", "mtry")


def sweep_summary(results):
    """One row per fold count: best mtry and its resampled accuracy."""
    rows = []
    for k, (_, table) in sorted(results.items()):
        best = table.loc[table["rank"] == 1].iloc[0]
        rows.append({
            "k": k,
            "mtry": int(best["mtry"]),
            "accuracy": float(best["accuracy"]),
            "accuracy_sd": float(best["accuracy_sd"]),
        })
    return pd.DataFrame(rows, columns=["k", "mtry", "accuracy", "accuracy_sd"])
