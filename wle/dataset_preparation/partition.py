"""
partition.py — Stratified train/test split of the labeled table.

The split is deterministic for a given input, fraction and random_state,
and keeps the class proportions of `classe` in both subsets.
"""

from sklearn.model_selection import train_test_split

from wle.errors import SchemaMismatch, InsufficientData
from .config import TRAIN_FRACTION, LABEL_COLUMN, RANDOM_STATE


def split_data(df, train_fraction=TRAIN_FRACTION, label_col=LABEL_COLUMN,
               random_state=RANDOM_STATE):
    """
    Splits `df` into disjoint (train, test) subsets stratified on `label_col`.

    Parameters
    ----------
    df : pandas.DataFrame
        Labeled observation table. Not modified.

    train_fraction : float
        Share of rows kept for training, strictly between 0 and 1.

    label_col : str
        Column used for stratification.

    random_state : int or numpy.random.RandomState
        Seed (or seeded generator) driving the shuffle.

    Returns
    -------
    (pandas.DataFrame, pandas.DataFrame)
        train and test subsets, each keeping the original index.
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    if label_col not in df.columns:
        raise SchemaMismatch(f"label column '{label_col}' not found")

    y = df[label_col]
    if y.nunique(dropna=True) < 2:
        raise InsufficientData(f"'{label_col}' has fewer than two observed classes")

    try:
        train_df, test_df = train_test_split(
            df,
            train_size=train_fraction,
            random_state=random_state,
            stratify=y,
        )
    except ValueError as e:
        # too few rows per class for the requested fraction
        raise InsufficientData(f"Cannot stratify {len(df)} rows: {e}") from e

    for name, part in [("train", train_df), ("test", test_df)]:
        if part[label_col].nunique(dropna=True) < 2:
            raise InsufficientData(
                f"{name} subset observes fewer than two classes of '{label_col}'"
            )

    train_df = train_df.copy()
    test_df = test_df.copy()

    print(f"[split_data] train: {len(train_df)} rows, test: {len(test_df)} rows "
          f"(train_fraction={train_fraction})")
    return train_df, test_df
