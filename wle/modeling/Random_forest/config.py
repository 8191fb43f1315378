"""
Configuration file for the Random Forest sweep.

The sweep fits one forest per resampling fold count; k = 1 stands for a
single bootstrap iteration instead of cross-validation.
"""

# -------------------------
# Sweep Settings
# -------------------------

FOLD_COUNTS = list(range(1, 11))
FINAL_FOLD_COUNT = 7          # diminishing returns beyond k = 4
FOLD_TOLERANCE = 0.001        # used when FINAL_FOLD_COUNT is None

SWEEP_WORKERS = 8

# -------------------------
# Model Settings
# -------------------------

MTRY_LENGTH = 3

RF_N_ESTIMATORS = 150
RF_CLASS_WEIGHT = None
RF_JOBS = 1   # one core per sweep worker

MODEL_OUTPUT_PATH = "output/models/random_forest.joblib"
