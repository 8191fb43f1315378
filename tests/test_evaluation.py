import numpy as np
import pandas as pd
import pytest
from sklearn.dummy import DummyClassifier

from wle.dataset_preparation.feature_filter import ColumnFilter
from wle.modeling.evaluation import (
    ConfusionReport,
    confusion_report,
    evaluate_out_of_sample,
    predict_evaluation_set,
    resampled_predictions,
    select_fold_count,
)
from wle.modeling.preprocessing import split_X_y
from wle.modeling.resampling import make_splits


class RecordingClassifier(DummyClassifier):
    """Remembers every frame it was asked to predict."""

    seen = []

    def predict(self, X):
        RecordingClassifier.seen.append(X.index.copy())
        return super().predict(X)


def test_rows_are_predicted_columns_are_actual():
    report = confusion_report(["A", "A", "B"], ["A", "B", "B"], labels=["A", "B"])

    assert report.matrix.index.name == "predicted"
    assert report.matrix.columns.name == "actual"
    # one actual A predicted as B
    assert report.matrix.loc["B", "A"] == 1
    assert report.matrix.loc["A", "B"] == 0
    assert report.accuracy == pytest.approx(2 / 3)
    assert report.per_class.loc["A", "recall"] == pytest.approx(0.5)
    assert report.per_class.loc["B", "precision"] == pytest.approx(0.5)
    assert report.n == 3


def test_report_is_five_by_five_even_with_absent_classes():
    report = confusion_report(["A", "C"], ["A", "C"])

    assert report.matrix.shape == (5, 5)
    assert int(report.matrix.to_numpy().sum()) == 2
    assert report.accuracy == 1.0


def test_report_is_frozen():
    report = confusion_report(["A"], ["A"])
    with pytest.raises(AttributeError):
        report.accuracy = 0.0
    assert isinstance(report, ConfusionReport)


def test_resampled_predictions_cover_each_row_for_kfold(sensor_df):
    X, y = split_X_y(sensor_df.drop(columns=["kurtosis_roll_belt"]))
    splits = make_splits(X, y, 4)

    y_true, y_pred = resampled_predictions(DummyClassifier(strategy="most_frequent"), X, y, splits)

    assert len(y_true) == len(X)
    assert sorted(y_true) == sorted(y.astype(str))
    assert len(y_pred) == len(X)


def test_out_of_sample_uses_only_test_rows(sensor_df):
    train, test = sensor_df.iloc[:400], sensor_df.iloc[400:]
    X_train, y_train = split_X_y(train)
    model = RecordingClassifier(strategy="most_frequent").fit(X_train, y_train)
    RecordingClassifier.seen.clear()

    report = evaluate_out_of_sample(model, test)

    assert report.n == len(test)
    assert len(RecordingClassifier.seen) == 1
    assert RecordingClassifier.seen[0].equals(test.index)


def test_select_fold_count_prefers_configured_value():
    summary = pd.DataFrame({"k": [1, 2, 3, 7], "accuracy": [0.9, 0.95, 0.99, 0.98]})

    assert select_fold_count(summary, final=7) == 7
    with pytest.raises(ValueError):
        select_fold_count(summary, final=10)


def test_select_fold_count_smallest_within_tolerance():
    summary = pd.DataFrame({"k": [1, 2, 3, 4, 5], "accuracy": [0.90, 0.97, 0.9895, 0.99, 0.9899]})

    assert select_fold_count(summary, final=None, tolerance=0.001) == 3
    assert select_fold_count(summary, final=None, tolerance=0.0) == 4


def test_predict_evaluation_set(sensor_df, eval_df):
    column_filter = ColumnFilter(("kurtosis_roll_belt",), ("total_accel_belt",))
    X_train, y_train = split_X_y(column_filter.apply(sensor_df))
    model = DummyClassifier(strategy="most_frequent").fit(X_train, y_train)

    preds = predict_evaluation_set(model, eval_df, column_filter)

    assert list(preds.columns) == ["problem_id", "classe"]
    assert preds["problem_id"].tolist() == list(range(1, 21))
    assert set(preds["classe"]) <= set("ABCDE")
    assert not np.any(pd.isna(preds["classe"]))
