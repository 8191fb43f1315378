from sklearn.model_selection import GridSearchCV
from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeClassifier

from wle.modeling.preprocessing import build_preprocessor
from wle.modeling.evaluation import accuracy_table
from . import config


def build_tree_pipeline(X, random_state):
    tree = DecisionTreeClassifier(
        criterion=config.TREE_CRITERION,
        random_state=random_state,
    )
    return Pipeline([("prep", build_preprocessor(X)), ("model", tree)])


def tune_tree(X, y, splits, cp_grid=config.TREE_CP_GRID, random_state=None, n_jobs=config.TREE_JOBS):
    """
    Grid search over `ccp_alpha` scored by resampled accuracy.
    Returns the refitted best pipeline and its accuracy table.
    """
    search = GridSearchCV(
        build_tree_pipeline(X, random_state),
        param_grid={"model__ccp_alpha": list(cp_grid)},
        scoring="accuracy",
        cv=splits,
        refit=True,
        n_jobs=n_jobs,
        error_score="raise",
    )
    search.fit(X, y)
    return search.best_estimator_, accuracy_table(search, "model__ccp_alpha", "cp")
