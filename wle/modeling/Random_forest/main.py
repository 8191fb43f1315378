from pathlib import Path

import joblib
from joblib import Parallel, delayed
from tqdm import tqdm

from wle.errors import InsufficientData
from wle.modeling import config as modeling_config
from wle.modeling.preprocessing import split_X_y, build_preprocessor, choose_n_jobs

from . import config
from . import random_forest as RF


def train_random_forest(
    train_df,
    label_col=modeling_config.TARGET_COLUMN,
    fold_counts=config.FOLD_COUNTS,
    method=modeling_config.RESAMPLING_METHOD,
    validation_fraction=modeling_config.VALIDATION_FRACTION,
    random_state=modeling_config.SEED,
    n_jobs=config.SWEEP_WORKERS,
):
    """
    Trains one Random Forest per fold count k in `fold_counts`.

    Each configuration tunes mtry with its own resampler and is fitted in
    a separate worker; nothing is shared between workers besides the
    read-only training data.

    Returns
    -------
    dict
        { k -> (fitted pipeline, accuracy table) }
    """
    X, y = split_X_y(train_df, label_col)

    fold_counts = sorted(set(fold_counts))
    too_many = [k for k in fold_counts if k > len(X)]
    if too_many:
        raise InsufficientData(f"{len(X)} rows cannot be split into {too_many} folds")

    n_features = build_preprocessor(X).fit(X).transform(X.head(1)).shape[1]
    mtry_values = RF.mtry_grid(n_features)
    n_workers = choose_n_jobs(n_jobs)
    print(f"[train_random_forest] k={fold_counts}, mtry={mtry_values}, workers={n_workers}")

    fitted = Parallel(n_jobs=n_workers)(
        delayed(RF.fit_forest)(X, y, k, mtry_values, method, validation_fraction, random_state)
        for k in tqdm(fold_counts, desc="fold counts")
    )

    results = {k: (model, table) for k, model, table in fitted}
    print(f"[OK] {len(results)} Random Forest configurations trained")
    return results


def save_model(model, path=config.MODEL_OUTPUT_PATH):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, path)
    print(f"\n[OK] Random Forest model saved at {path}")
    return path
