"""
Classification session: logistic regression, ROC/AUC, classification trees
with cost-complexity pruning, and random forests with out-of-bag estimates.

Logistic regression is a statsmodels binomial GLM; trees and forests are
scikit-learn estimators fitted through `FormulaModel`.
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.metrics import roc_auc_score, roc_curve
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.tree import DecisionTreeClassifier

from airbnb_course.config import RANDOM_SEED
from airbnb_course.models.formula import FormulaModel, response_name

PRED_LABELS = ["pred = 0", "pred = 1"]

# rpart's minsplit / minbucket defaults
MIN_SAMPLES_SPLIT = 20
MIN_SAMPLES_LEAF = 7


def _binary_response(formula: str, data: pd.DataFrame) -> pd.DataFrame:
    """Cast a boolean response to 0/1 so the binomial GLM sees a single column."""
    target = response_name(formula)
    if target in data.columns and pd.api.types.is_bool_dtype(data[target]):
        data = data.copy()
        data[target] = data[target].astype(int)
    return data


# --- Logistic regression ---

def fit_logistic(formula: str, data: pd.DataFrame):
    return smf.glm(formula, data=_binary_response(formula, data), family=sm.families.Binomial()).fit()


def predict_proba(model, data: pd.DataFrame) -> pd.Series:
    """P(response = 1) for every row of `data` the model can score."""
    if isinstance(model, FormulaModel):
        return model.predict_proba(data)
    pred = model.predict(data)
    return pd.Series(np.asarray(pred), index=getattr(pred, "index", data.index), name="prob")


def roc_table(y_true, scores) -> pd.DataFrame:
    fpr, tpr, thresholds = roc_curve(np.asarray(y_true).astype(int), np.asarray(scores, dtype=float))
    return pd.DataFrame({"fpr": fpr, "tpr": tpr, "threshold": thresholds})


def auc(y_true, scores) -> float:
    return float(roc_auc_score(np.asarray(y_true).astype(int), np.asarray(scores, dtype=float)))


# --- Confusion matrices ---

def classify(scores, threshold: float = 0.5) -> pd.Series:
    """1 where the score exceeds `threshold`; missing scores stay missing."""
    scores = pd.Series(scores, dtype=float)
    return (scores > threshold).astype(float).where(scores.notna())


def confusion_matrix(y_true, y_pred) -> pd.DataFrame:
    """
    Actual 0/1 rows against "pred = 0" / "pred = 1" columns.

    Two Series are matched on their index, so predictions for the rows a
    formula kept line up with the right truths; anything else is matched by
    position. Rows with a missing prediction are left out.
    """
    if isinstance(y_true, pd.Series) and isinstance(y_pred, pd.Series):
        actual = y_true.loc[y_pred.index].astype(int).reset_index(drop=True)
        pred = y_pred.astype(float).reset_index(drop=True)
    else:
        actual = pd.Series(np.asarray(y_true)).astype(int)
        pred = pd.Series(np.asarray(y_pred, dtype=float))
    keep = pred.notna()
    labels = pred[keep].astype(int).map({0: PRED_LABELS[0], 1: PRED_LABELS[1]})
    table = pd.crosstab(actual[keep].rename("actual"), labels.rename("predicted"))
    return table.reindex(index=[0, 1], columns=PRED_LABELS, fill_value=0)


def accuracy(table: pd.DataFrame) -> float:
    total = table.values.sum()
    if total == 0:
        return float("nan")
    return float(np.trace(table.values) / total)


def baseline_accuracy(y) -> float:
    """Accuracy of always predicting the most common class."""
    return float(pd.Series(y).value_counts(normalize=True).max())


# --- Trees ---

def fit_tree(formula: str, data: pd.DataFrame, ccp_alpha: float = 0.0, seed: int = RANDOM_SEED) -> FormulaModel:
    tree = DecisionTreeClassifier(
        ccp_alpha=ccp_alpha,
        min_samples_split=MIN_SAMPLES_SPLIT,
        min_samples_leaf=MIN_SAMPLES_LEAF,
        random_state=seed,
    )
    return FormulaModel(formula, tree).fit(data)


def cp_table(model: FormulaModel, n_folds: int = 10, max_rows: int = 30, seed: int = RANDOM_SEED) -> pd.DataFrame:
    """
    Pruning table for a fitted tree: for each candidate `ccp_alpha`, the
    number of leaves, the training error, the cross-validated error and its
    standard error, all relative to the error of the root node.
    """
    X, y = model.X_.values, model.y_.values
    path = model.estimator.cost_complexity_pruning_path(X, y)
    alphas = np.unique(path.ccp_alphas)
    if len(alphas) > max_rows:
        alphas = alphas[np.linspace(0, len(alphas) - 1, max_rows).astype(int)]

    root_error = 1.0 - baseline_accuracy(y)
    root_error = root_error if root_error > 0 else 1.0
    cv = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=seed)

    rows = []
    for alpha in alphas:
        pruned = model.refit(ccp_alpha=float(alpha))
        train_error = 1.0 - float(np.mean(pruned.estimator.predict(X) == y))
        cv_acc = cross_val_score(pruned.estimator, X, y, cv=cv, scoring="accuracy")
        rows.append({
            "ccp_alpha": float(alpha),
            "n_leaves": int(pruned.estimator.get_n_leaves()),
            "rel_error": train_error / root_error,
            "xerror": (1.0 - cv_acc.mean()) / root_error,
            "xstd": cv_acc.std(ddof=1) / np.sqrt(n_folds) / root_error,
        })
    return pd.DataFrame(rows)


def best_ccp_alpha(table: pd.DataFrame) -> float:
    """Largest alpha whose CV error is within one standard error of the best."""
    best = table.loc[table["xerror"].idxmin()]
    ok = table[table["xerror"] <= best["xerror"] + best["xstd"]]
    return float(ok["ccp_alpha"].max())


def prune_tree(model: FormulaModel, ccp_alpha: float) -> FormulaModel:
    return model.refit(ccp_alpha=ccp_alpha)


# --- Random forests ---

def fit_forest(
    formula: str,
    data: pd.DataFrame,
    n_trees: int = 100,
    seed: int = RANDOM_SEED,
    task: str = "classification",
) -> FormulaModel:
    """Random forest with out-of-bag scoring enabled."""
    if task == "classification":
        est = RandomForestClassifier(n_estimators=n_trees, oob_score=True, random_state=seed, n_jobs=-1)
    elif task == "regression":
        est = RandomForestRegressor(n_estimators=n_trees, oob_score=True, random_state=seed, n_jobs=-1)
    else:
        raise ValueError(f"task must be 'classification' or 'regression', got {task!r}")
    return FormulaModel(formula, est).fit(data)


def oob_predictions(model: FormulaModel) -> pd.Series:
    """
    Out-of-bag predictions for the training rows: class labels for
    classifiers, values for regressors. Rows that were in every bootstrap
    sample have no out-of-bag prediction and are NaN.
    """
    est = model.estimator
    if hasattr(est, "oob_decision_function_"):
        proba = est.oob_decision_function_
        labels = est.classes_[np.argmax(np.nan_to_num(proba, nan=-1.0), axis=1)].astype(float)
        labels[np.isnan(proba).any(axis=1)] = np.nan
        return pd.Series(labels, index=model.X_.index, name="pred")
    return pd.Series(est.oob_prediction_, index=model.X_.index, name="pred")
