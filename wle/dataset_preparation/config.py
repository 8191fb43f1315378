"""
Configuration file for dataset preparation.

Centralizes the data source (URLs, cache directory), the expected schema
of the Weight Lifting Exercise tables and the thresholds used by the
partitioner and the feature filter.
"""

# -------------------------
# DATA SOURCE
# -------------------------

DATA_DIR = "data"

TRAIN_URL = "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-training.csv"
EVAL_URL = "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-testing.csv"

TRAIN_FILE = "pml-training.csv"
EVAL_FILE = "pml-testing.csv"
TRAIN_CACHE = "pml-training.parquet"
EVAL_CACHE = "pml-testing.parquet"

DOWNLOAD_TIMEOUT = 60  # seconds

NA_VALUES = ["NA", "", "#DIV/0!"]

# -------------------------
# SCHEMA
# -------------------------

LABEL_COLUMN = "classe"
ID_COLUMN = "problem_id"

# width after dropping the unnamed row-number column of the CSVs
EXPECTED_N_COLUMNS = 159

BOOKKEEPING_COLUMNS = [
    "user_name",
    "raw_timestamp_part_1",
    "raw_timestamp_part_2",
    "cvtd_timestamp",
    "new_window",
    "num_window",
]

CLASSE_LEVELS = ["A", "B", "C", "D", "E"]

CLASSE_LABELS = {
    "A": "exactly according to the specification",
    "B": "throwing the elbows to the front",
    "C": "lifting the dumbbell only halfway",
    "D": "lowering the dumbbell only halfway",
    "E": "throwing the hips to the front",
}

# -------------------------
# PARTITION
# -------------------------

TRAIN_FRACTION = 0.70
RANDOM_STATE = 42

# -------------------------
# FEATURE FILTER
# -------------------------

MISSING_THRESHOLD = 0.95      # drop columns with >= 95% missing values
CORRELATION_THRESHOLD = 0.75  # drop until every pairwise |r| < 0.75
