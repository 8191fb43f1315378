"""
run_all.py — Executes the full WLE analysis, including:

1. Load the PML training and evaluation tables
2. Stratified 70/30 partition of the training table
3. Remove mostly-missing and highly-correlated columns
4. Train the decision tree
5. Train the Random Forest fold-count sweep
6. Evaluate the chosen forest in-sample and out-of-sample
7. Render the HTML report
"""

import time

from wle.dataset_preparation import config as data_config
from wle.dataset_preparation.loader import load_pml_data
from wle.dataset_preparation.partition import split_data
from wle.dataset_preparation.feature_filter import filter_features

from wle.modeling import config as modeling_config
from wle.modeling.resampling import make_splits
from wle.modeling.preprocessing import split_X_y
from wle.modeling.evaluation import (
    evaluate_in_sample,
    evaluate_out_of_sample,
    select_fold_count,
    predict_evaluation_set,
)
from wle.modeling.Decision_tree.main import train_decision_tree
from wle.modeling.Random_forest import config as rf_config
from wle.modeling.Random_forest.main import train_random_forest, save_model as save_forest
from wle.modeling.Random_forest.random_forest import sweep_summary

from wle.report import config as report_config
from wle.report.report import render_report, write_report


def _banner(title):
    print("\n===========================================")
    print(f" {title} ")
    print("===========================================\n")


def partition_step(
    train_raw,
    train_fraction=data_config.TRAIN_FRACTION,
    random_state=data_config.RANDOM_STATE,
):
    """Step 2: stratified partition plus the class shares of the full table."""
    label_col = modeling_config.TARGET_COLUMN

    _banner("STEP 2 — Partitioning the training table")
    train_df, test_df = split_data(
        train_raw, train_fraction=train_fraction, label_col=label_col,
        random_state=random_state,
    )
    class_distribution = (
        train_raw[label_col].value_counts(normalize=True).sort_index().rename("share").to_frame()
    )
    return train_df, test_df, class_distribution


def model_step(
    train_df,
    test_df,
    class_distribution,
    eval_raw,
    fold_counts=rf_config.FOLD_COUNTS,
    final_fold_count=rf_config.FINAL_FOLD_COUNT,
    random_state=data_config.RANDOM_STATE,
    n_jobs=rf_config.SWEEP_WORKERS,
    save_model=False,
):
    """
    Runs steps 3–6 on the two partitions and returns everything the
    report needs.
    """
    label_col = modeling_config.TARGET_COLUMN
    labels = modeling_config.LABELS

    _banner("STEP 3 — Filtering features")
    train_f, test_f, column_filter = filter_features(train_df, test_df, label_col=label_col)
    del train_df, test_df

    _banner("STEP 4 — Training the decision tree")
    start = time.time()
    tree_model, tree_table, tree_splits = train_decision_tree(
        train_f, label_col=label_col, random_state=random_state
    )
    tree_in_sample = evaluate_in_sample(tree_model, train_f, tree_splits, labels, label_col)
    print(f"\n[OK] Decision tree trained in {(time.time() - start)/60:.2f} minutes.\n")

    _banner("STEP 5 — Training the Random Forest sweep")
    start = time.time()
    forests = train_random_forest(
        train_f, label_col=label_col, fold_counts=fold_counts,
        random_state=random_state, n_jobs=n_jobs,
    )
    summary = sweep_summary(forests)
    print(summary.to_string(index=False))
    print(f"\n[OK] Random Forest sweep trained in {(time.time() - start)/60:.2f} minutes.\n")

    _banner("STEP 6 — Evaluating the chosen Random Forest")
    k_star = select_fold_count(summary, final=final_fold_count)
    forest, _ = forests[k_star]
    print(f"[model_step] chosen fold count k={k_star}")

    X_train, y_train = split_X_y(train_f, label_col)
    forest_splits = make_splits(X_train, y_train, k_star, random_state=random_state)
    in_sample = evaluate_in_sample(forest, train_f, forest_splits, labels, label_col)
    out_of_sample = evaluate_out_of_sample(forest, test_f, labels, label_col)
    eval_predictions = predict_evaluation_set(forest, eval_raw, column_filter)

    if save_model:
        save_forest(forest)

    return {
        "n_train": len(train_f),
        "n_test": len(test_f),
        "class_distribution": class_distribution,
        "column_filter": column_filter,
        "n_features": train_f.shape[1] - 1,
        "tree_table": tree_table,
        "tree_in_sample": tree_in_sample,
        "sweep_summary": summary,
        "forest_tables": {k: table for k, (_, table) in forests.items()},
        "k_star": k_star,
        "in_sample": in_sample,
        "out_of_sample": out_of_sample,
        "eval_predictions": eval_predictions,
    }


def run_pipeline(
    train_raw,
    eval_raw,
    train_fraction=data_config.TRAIN_FRACTION,
    fold_counts=rf_config.FOLD_COUNTS,
    final_fold_count=rf_config.FINAL_FOLD_COUNT,
    random_state=data_config.RANDOM_STATE,
    n_jobs=rf_config.SWEEP_WORKERS,
    save_model=False,
):
    """Runs steps 2–6 on already loaded tables (see model_step)."""
    partitions = partition_step(train_raw, train_fraction, random_state)
    del train_raw
    return model_step(
        *partitions, eval_raw,
        fold_counts=fold_counts, final_fold_count=final_fold_count,
        random_state=random_state, n_jobs=n_jobs, save_model=save_model,
    )


def main():

    total = time.time()

    _banner("STEP 1 — Loading the PML tables")
    start = time.time()
    train_raw, eval_raw = load_pml_data()
    print(f"\n[OK] Step 1 done in {(time.time() - start)/60:.2f} minutes.\n")

    train_df, test_df, class_distribution = partition_step(train_raw)
    del train_raw

    results = model_step(train_df, test_df, class_distribution, eval_raw)

    _banner("STEP 7 — Rendering the report")
    output = write_report(render_report(results), output_dir=report_config.OUTPUT_DIR)
    print(f"\n[OK] Report: {output}")

    _banner(f"PIPELINE FINISHED SUCCESSFULLY in {(time.time() - total)/60:.2f} minutes")


if __name__ == "__main__":
    main()
