"""
Configuration file for the decision tree.
"""

# -------------------------
# Model Settings
# -------------------------

TREE_BOOTSTRAP_REPS = 25

# candidate ccp_alpha values (cost-complexity pruning)
TREE_CP_GRID = [0.0, 0.0005, 0.001, 0.005, 0.01, 0.05]

TREE_CRITERION = "gini"
TREE_JOBS = -1
