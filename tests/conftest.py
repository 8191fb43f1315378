import numpy as np
import pandas as pd
import pytest

from wle.dataset_preparation.config import CLASSE_LEVELS

USERS = ["adelmo", "carlitos", "charles", "eurico", "jeremy", "pedro"]


def make_sensor_table(n_rows=600, seed=0):
    """
    Small labeled table shaped like the PML training data: bookkeeping
    columns, informative sensor columns, one mostly-missing column, one
    column nearly collinear with another, and `classe` (A–E).
    """
    rng = np.random.RandomState(seed)

    classe = rng.choice(CLASSE_LEVELS, size=n_rows)
    code = pd.Series(classe).map({c: i for i, c in enumerate(CLASSE_LEVELS)}).to_numpy()

    roll_belt = code * 3.0 + rng.normal(0, 0.5, n_rows)
    pitch_belt = (code % 2) * 4.0 + rng.normal(0, 0.5, n_rows)

    kurtosis = np.full(n_rows, np.nan)
    kurtosis[: n_rows // 50] = rng.normal(0, 1, n_rows // 50)

    df = pd.DataFrame({
        "user_name": rng.choice(USERS, size=n_rows),
        "raw_timestamp_part_1": 1322489000 + rng.randint(0, 1000, n_rows),
        "raw_timestamp_part_2": rng.randint(0, 1_000_000, n_rows),
        "cvtd_timestamp": rng.choice(["05/12/2011 11:23", "05/12/2011 11:24", "28/11/2011 14:13"], size=n_rows),
        "new_window": rng.choice(["no", "yes"], size=n_rows, p=[0.98, 0.02]),
        "num_window": rng.randint(1, 800, n_rows),
        "roll_belt": roll_belt,
        "pitch_belt": pitch_belt,
        "total_accel_belt": roll_belt * 0.5 + rng.normal(0, 0.05, n_rows),
        "kurtosis_roll_belt": kurtosis,
        "gyros_arm_x": rng.normal(0, 1, n_rows),
        "accel_arm_x": rng.normal(0, 1, n_rows),
        "magnet_dumbbell_y": rng.normal(0, 1, n_rows),
    })
    df["classe"] = pd.Categorical(classe, categories=CLASSE_LEVELS)
    return df


def make_eval_table(train_df, n_rows=20, seed=1):
    """Unlabeled table with the training schema and `problem_id` instead of `classe`."""
    sample = train_df.sample(n=n_rows, random_state=seed).drop(columns=["classe"])
    sample = sample.reset_index(drop=True)
    sample["problem_id"] = np.arange(1, n_rows + 1)
    return sample


def make_filter_scenario(seed=0):
    """
    1000 rows, 20 numeric columns f0..f19 and a 3-level label:
    f0 and f1 are >= 95% missing, (f2, f3) and (f4, f5) correlate above 0.9.
    """
    rng = np.random.RandomState(seed)
    n = 1000
    data = {f"f{i}": rng.normal(0, 1, n) for i in range(20)}

    for col in ["f0", "f1"]:
        data[col][: int(n * 0.96)] = np.nan

    data["f3"] = 2 * data["f2"] + rng.normal(0, 0.1, n)
    data["f5"] = -data["f4"] + rng.normal(0, 0.1, n)

    df = pd.DataFrame(data)
    df["label"] = rng.choice(["x", "y", "z"], size=n)
    return df


@pytest.fixture
def sensor_df():
    return make_sensor_table()


@pytest.fixture
def eval_df(sensor_df):
    return make_eval_table(sensor_df)


@pytest.fixture
def filter_scenario():
    return make_filter_scenario()
