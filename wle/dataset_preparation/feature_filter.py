"""
feature_filter.py — Removes mostly-missing and highly-correlated columns.

Both stages are estimated on the training partition only:

1. Missingness: every column (bookkeeping columns included, the label
   excluded) with a missing fraction >= MISSING_THRESHOLD.
2. Correlation: categorical columns are encoded as integer codes, the
   Pearson correlation matrix is computed over the remaining columns and
   columns are removed greedily until every pairwise |r| < CORRELATION_THRESHOLD.
   At each step the most correlated pair is resolved by removing the column
   with the higher mean |r| to the columns still in play; ties remove the
   column that appears later in the table.

The resulting ColumnFilter is then applied verbatim to train and test so
both keep the same schema.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from wle.errors import DegenerateFilter
from .config import LABEL_COLUMN, MISSING_THRESHOLD, CORRELATION_THRESHOLD


@dataclass(frozen=True)
class ColumnFilter:
    """Columns removed by the two filter stages, fitted on the train partition."""

    mostly_missing: Tuple[str, ...]
    highly_correlated: Tuple[str, ...]

    @property
    def dropped(self):
        return self.mostly_missing + tuple(
            c for c in self.highly_correlated if c not in self.mostly_missing
        )

    def apply(self, df):
        """Returns a copy of `df` without the dropped columns (absent ones are ignored)."""
        return df.drop(columns=[c for c in self.dropped if c in df.columns])


def find_mostly_missing(df, threshold=MISSING_THRESHOLD, exclude=(LABEL_COLUMN,)):
    """Columns whose fraction of missing values is at or above `threshold`."""
    missing = df.drop(columns=[c for c in exclude if c in df.columns]).isna().mean()
    return [col for col, frac in missing.items() if frac >= threshold]


def encode_categoricals(df):
    """
    Returns a float copy of `df` where non-numeric columns are replaced by
    integer codes of their sorted distinct values. Missing values stay NaN.
    """
    encoded = {}
    for col in df.columns:
        s = df[col]
        if pd.api.types.is_bool_dtype(s) or not pd.api.types.is_numeric_dtype(s):
            codes, _ = pd.factorize(s.astype(object), sort=True)
            encoded[col] = np.where(codes < 0, np.nan, codes).astype(float)
        else:
            encoded[col] = s.astype(float).to_numpy()
    return pd.DataFrame(encoded, index=df.index, columns=df.columns)


def find_highly_correlated(df, threshold=CORRELATION_THRESHOLD, exclude=(LABEL_COLUMN,)):
    """
    Greedy removal of correlated columns.

    Returns
    -------
    list of str
        Removed columns, in removal order. After removing them, every pair
        of remaining columns has |r| < threshold.
    """
    X = encode_categoricals(df.drop(columns=[c for c in exclude if c in df.columns]))
    if X.shape[1] < 2:
        return []

    corr = X.corr(method="pearson").abs().to_numpy()
    # constant / empty columns correlate with nothing
    corr = np.nan_to_num(corr, nan=0.0)
    np.fill_diagonal(corr, 0.0)

    columns = list(X.columns)
    alive = np.ones(len(columns), dtype=bool)
    removed = []

    while alive.sum() > 1:
        sub = np.where(alive[:, None] & alive[None, :], corr, 0.0)
        i, j = np.unravel_index(np.argmax(sub), sub.shape)
        if sub[i, j] < threshold:
            break

        i, j = min(i, j), max(i, j)
        n_other = alive.sum() - 1
        mean_i = sub[i].sum() / n_other
        mean_j = sub[j].sum() / n_other
        drop = i if mean_i > mean_j else j

        alive[drop] = False
        removed.append(columns[drop])

    return removed


def fit_column_filter(train_df, label_col=LABEL_COLUMN,
                      missing_threshold=MISSING_THRESHOLD,
                      correlation_threshold=CORRELATION_THRESHOLD):
    """Fits both filter stages on `train_df` and guards against degenerate results."""
    exclude = (label_col,)

    mostly_missing = find_mostly_missing(train_df, missing_threshold, exclude=exclude)
    print(f"[fit_column_filter] {len(mostly_missing)} columns with >= "
          f"{missing_threshold:.0%} missing values")

    remaining = train_df.drop(columns=mostly_missing)
    highly_correlated = find_highly_correlated(remaining, correlation_threshold, exclude=exclude)
    print(f"[fit_column_filter] {len(highly_correlated)} columns with |r| >= "
          f"{correlation_threshold}")

    column_filter = ColumnFilter(tuple(mostly_missing), tuple(highly_correlated))

    if label_col in column_filter.dropped or label_col not in train_df.columns:
        raise DegenerateFilter(f"label column '{label_col}' would not survive filtering")

    kept = [c for c in train_df.columns if c not in column_filter.dropped and c != label_col]
    if not kept:
        raise DegenerateFilter("feature filter removed every feature column")

    return column_filter


def filter_features(train_df, test_df, label_col=LABEL_COLUMN,
                    missing_threshold=MISSING_THRESHOLD,
                    correlation_threshold=CORRELATION_THRESHOLD):
    """
    Fits the column filter on `train_df` and applies it to both partitions.

    Returns
    -------
    (pandas.DataFrame, pandas.DataFrame, ColumnFilter)
        filtered train, filtered test and the fitted filter. The inputs are
        left untouched.
    """
    column_filter = fit_column_filter(
        train_df,
        label_col=label_col,
        missing_threshold=missing_threshold,
        correlation_threshold=correlation_threshold,
    )

    train_f = column_filter.apply(train_df)
    test_f = column_filter.apply(test_df)

    print(f"[filter_features] {train_df.shape[1]} -> {train_f.shape[1]} columns")
    return train_f, test_f, column_filter
