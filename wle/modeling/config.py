"""
Configuration shared by the tree and random-forest trainers.
"""

from wle.dataset_preparation.config import LABEL_COLUMN, CLASSE_LEVELS, RANDOM_STATE

# -------------------------
# DATA & LABELS
# -------------------------

TARGET_COLUMN = LABEL_COLUMN
LABELS = CLASSE_LEVELS

# -------------------------
# RESAMPLING
# -------------------------

RESAMPLING_METHOD = "cv"       # "cv" (k-fold) or "lgocv" (k shuffle splits)
VALIDATION_FRACTION = 0.30     # held out per split when RESAMPLING_METHOD == "lgocv"

SEED = RANDOM_STATE

# -------------------------
# WORKERS
# -------------------------

MAX_WORKERS = 8
GB_PER_WORKER = 1.0   # memory budgeted for each parallel fit
