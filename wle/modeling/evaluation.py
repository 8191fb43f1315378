"""
evaluation.py — Accuracy tables, confusion reports and fold-count selection.

Confusion matrices follow one convention everywhere in this package:
rows are the PREDICTED class, columns the ACTUAL (reference) class, both
indexed by the label levels A–E.

Functions:
- accuracy_table: resampled accuracy per hyperparameter value of a GridSearchCV
- confusion_report: 5x5 counts, accuracy and per-class precision/recall
- resampled_predictions: held-out predictions of a tuned pipeline over resamples
- evaluate_in_sample: confusion report aggregated over the resamples
- evaluate_out_of_sample: confusion report on the held-out test subset
- select_fold_count: the fold count k* used for the final model
- predict_evaluation_set: predictions for the unlabeled evaluation table
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.metrics import accuracy_score, confusion_matrix, precision_recall_fscore_support

from wle.dataset_preparation.config import ID_COLUMN
from .config import TARGET_COLUMN, LABELS
from .preprocessing import split_X_y
from .Random_forest.config import FINAL_FOLD_COUNT, FOLD_TOLERANCE


@dataclass(frozen=True)
class ConfusionReport:
    matrix: pd.DataFrame      # rows = predicted, columns = actual
    accuracy: float
    per_class: pd.DataFrame   # precision, recall, f1, support per level
    n: int


def accuracy_table(search, param, name):
    """
    Summarizes `search.cv_results_` for a single tuned parameter.

    Returns
    -------
    pandas.DataFrame
        columns: `name`, accuracy, accuracy_sd, rank (1 = selected)
    """
    res = search.cv_results_
    table = pd.DataFrame({
        name: [p[param] for p in res["params"]],
        "accuracy": res["mean_test_score"],
        "accuracy_sd": res["std_test_score"],
        "rank": res["rank_test_score"],
    })
    return table.sort_values(name).reset_index(drop=True)


def confusion_report(y_true, y_pred, labels=LABELS):
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)

    # sklearn puts the true class on the rows; transpose to rows = predicted
    counts = confusion_matrix(y_true, y_pred, labels=labels).T
    matrix = pd.DataFrame(
        counts,
        index=pd.Index(labels, name="predicted"),
        columns=pd.Index(labels, name="actual"),
    )

    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, zero_division=0
    )
    per_class = pd.DataFrame(
        {"precision": precision, "recall": recall, "f1": f1, "support": support},
        index=pd.Index(labels, name="classe"),
    )

    return ConfusionReport(
        matrix=matrix,
        accuracy=float(accuracy_score(y_true, y_pred)),
        per_class=per_class,
        n=len(y_true),
    )


def resampled_predictions(estimator, X, y, splits):
    """
    Refits a clone of `estimator` on every resample and predicts its
    held-out rows. Returns (y_true, y_pred) concatenated over resamples.
    """
    y_true, y_pred = [], []
    for train_idx, val_idx in splits:
        model = clone(estimator)
        model.fit(X.iloc[train_idx], y.iloc[train_idx])
        y_pred.append(model.predict(X.iloc[val_idx]))
        y_true.append(y.iloc[val_idx].to_numpy())
    return np.concatenate(y_true), np.concatenate(y_pred)


def evaluate_in_sample(pipeline, train_df, splits, labels=LABELS, label_col=TARGET_COLUMN):
    """Confusion report of the resample held-out predictions on the train subset."""
    X, y = split_X_y(train_df, label_col)
    y_true, y_pred = resampled_predictions(pipeline, X, y, splits)
    report = confusion_report(y_true, y_pred, labels)
    print(f"[evaluate_in_sample] resampled accuracy: {report.accuracy:.4f} "
          f"({len(splits)} resamples, {report.n} predictions)")
    return report


def evaluate_out_of_sample(pipeline, test_df, labels=LABELS, label_col=TARGET_COLUMN):
    """Confusion report on the held-out test subset, which took no part in training."""
    X_test, y_test = split_X_y(test_df, label_col)
    y_pred = pipeline.predict(X_test)
    report = confusion_report(y_test, y_pred, labels)
    print(f"[evaluate_out_of_sample] accuracy: {report.accuracy:.4f} ({report.n} rows)")
    return report


def select_fold_count(summary, final=FINAL_FOLD_COUNT, tolerance=FOLD_TOLERANCE):
    """
    Picks the fold count k* for the final model.

    When `final` is set it wins (it must be one of the swept k values).
    Otherwise the smallest k whose accuracy is within `tolerance` of the
    best accuracy of the sweep is returned.
    """
    if final is not None:
        if final not in set(summary["k"]):
            raise ValueError(f"fold count {final} was not part of the sweep")
        return int(final)

    best = summary["accuracy"].max()
    good = summary.loc[summary["accuracy"] >= best - tolerance, "k"]
    return int(good.min())


def predict_evaluation_set(pipeline, eval_df, column_filter, id_col=ID_COLUMN):
    """Applies the fitted column filter and predicts `classe` for each evaluation row."""
    X_eval = column_filter.apply(eval_df).drop(columns=[id_col], errors="ignore")
    preds = pipeline.predict(X_eval)

    ids = eval_df[id_col].to_numpy() if id_col in eval_df.columns else np.arange(1, len(eval_df) + 1)
    return pd.DataFrame({id_col: ids, TARGET_COLUMN: preds})
