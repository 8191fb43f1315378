"""
resampling.py — Resampling schemes used to tune the tree models.

- bootstrap_splits: n_repeats bootstrap samples, validated out-of-bag
- make_splits: resampler for one fold count k
    * k == 1 -> a single bootstrap iteration
    * k >= 2 and method "cv" -> stratified k-fold
    * k >= 2 and method "lgocv" -> k stratified shuffle splits, each holding
      out `validation_fraction` of the rows

Every scheme returns a list of (train_idx, validation_idx) positional
index arrays, which GridSearchCV accepts directly as `cv`.
"""

import numpy as np
from sklearn.model_selection import StratifiedKFold, StratifiedShuffleSplit
from sklearn.utils import check_random_state

from wle.errors import InsufficientData
from .config import RESAMPLING_METHOD, VALIDATION_FRACTION, SEED


def bootstrap_splits(n_samples, n_repeats, random_state=SEED):
    if n_samples < 2:
        raise InsufficientData(f"bootstrap needs at least 2 rows, got {n_samples}")

    rng = check_random_state(random_state)
    all_idx = np.arange(n_samples)
    splits = []

    while len(splits) < n_repeats:
        train_idx = rng.randint(0, n_samples, size=n_samples)
        oob_idx = np.setdiff1d(all_idx, train_idx)
        if oob_idx.size == 0:
            continue
        splits.append((train_idx, oob_idx))

    return splits


def make_splits(X, y, k, method=RESAMPLING_METHOD,
                validation_fraction=VALIDATION_FRACTION, random_state=SEED):
    """Builds the resampling splits for fold count `k` (see module docstring)."""
    n_samples = len(X)
    if k < 1:
        raise ValueError(f"fold count must be >= 1, got {k}")
    if n_samples < k:
        raise InsufficientData(f"{n_samples} rows cannot be split into {k} folds")

    if k == 1:
        return bootstrap_splits(n_samples, 1, random_state=random_state)

    if method == "cv":
        splitter = StratifiedKFold(n_splits=k, shuffle=True, random_state=random_state)
    elif method == "lgocv":
        splitter = StratifiedShuffleSplit(
            n_splits=k, test_size=validation_fraction, random_state=random_state
        )
    else:
        raise ValueError(f"unknown resampling method '{method}'")

    try:
        return list(splitter.split(X, y))
    except ValueError as e:
        # every class smaller than k, or a class too small to stratify
        raise InsufficientData(f"cannot build {k} stratified splits: {e}") from e
