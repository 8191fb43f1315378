from wle.errors import InsufficientData
from wle.modeling import config as modeling_config
from wle.modeling.preprocessing import split_X_y
from wle.modeling.resampling import bootstrap_splits

from . import config
from . import decision_tree as DT


def train_decision_tree(
    train_df,
    label_col=modeling_config.TARGET_COLUMN,
    cp_grid=config.TREE_CP_GRID,
    n_repeats=config.TREE_BOOTSTRAP_REPS,
    random_state=modeling_config.SEED,
    n_jobs=config.TREE_JOBS,
):
    """
    Trains a single decision tree on the filtered train subset.

    The pruning parameter is chosen by accuracy over `n_repeats` bootstrap
    resamples. Returns (fitted pipeline, accuracy table, resampling splits).
    """
    X, y = split_X_y(train_df, label_col)
    if len(X) < n_repeats:
        raise InsufficientData(
            f"{len(X)} rows are fewer than the {n_repeats} bootstrap repetitions"
        )

    splits = bootstrap_splits(len(X), n_repeats, random_state=random_state)
    model, table = DT.tune_tree(
        X, y, splits, cp_grid=cp_grid, random_state=random_state, n_jobs=n_jobs
    )

    best = table.loc[table["rank"] == 1].iloc[0]
    print(f"[train_decision_tree] best cp={best['cp']} "
          f"accuracy={best['accuracy']:.4f} ({n_repeats} bootstrap resamples)")
    return model, table, splits
