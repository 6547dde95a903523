"""
Model comparison and evaluation helpers.

Usage
-----
    from airbnb_course.models.evaluate import regressor_rmse, classifier_auc
    regressor_rmse("price ~ accommodates", fit_ols, part)["rmse"]
    regressor_rmse("price ~ accommodates", RandomForestRegressor, part, n_estimators=50)

`model_class` is either a fitting function with the signature
`f(formula, data, **kwargs)` (e.g. `fit_ols`, `fit_logistic`) or a
scikit-learn estimator class, which is instantiated with `**kwargs` and
fitted through a formula.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score
from sklearn.model_selection import KFold

from airbnb_course.config import RANDOM_SEED
from airbnb_course.models.classification import auc, predict_proba
from airbnb_course.models.formula import FormulaModel, response_name
from airbnb_course.models.regression import add_predictions

Partition = Dict[str, pd.DataFrame]


def regression_metrics(y_true, y_pred) -> Dict[str, float]:
    mse = mean_squared_error(y_true, y_pred)
    return {
        "mse": float(mse),
        "rmse": float(np.sqrt(mse)),
        "mae": float(mean_absolute_error(y_true, y_pred)),
        "r2": float(r2_score(y_true, y_pred)),
    }


def _fit(formula: str, model_class, train: pd.DataFrame, **kwargs):
    if isinstance(model_class, type) and hasattr(model_class, "fit"):
        return FormulaModel(formula, model_class(**kwargs)).fit(train)
    return model_class(formula, train, **kwargs)


def _subset(part: Partition, evaluate_on: Union[str, pd.DataFrame]) -> pd.DataFrame:
    if isinstance(evaluate_on, pd.DataFrame):
        return evaluate_on
    if evaluate_on not in part:
        raise ValueError(f"Unknown partition {evaluate_on!r}; have {list(part)}")
    return part[evaluate_on]


def regressor_rmse(
    formula: str,
    model_class: Callable,
    part: Partition,
    evaluate_on: Union[str, pd.DataFrame] = "val",
    **kwargs,
) -> dict:
    """Fit on `part["train"]`, return the model and its RMSE on `evaluate_on`."""
    model = _fit(formula, model_class, part["train"], **kwargs)
    data = _subset(part, evaluate_on)
    target = response_name(formula)
    scored = add_predictions(data, model).dropna(subset=["pred", target])
    resid = scored[target].astype(float) - scored["pred"]
    return {"model": model, "rmse": float(np.sqrt(np.mean(resid ** 2)))}


def classifier_auc(
    formula: str,
    model_class: Callable,
    part: Partition,
    evaluate_on: Union[str, pd.DataFrame] = "val",
    **kwargs,
) -> dict:
    """Fit on `part["train"]`, return the model and its ROC AUC on `evaluate_on`."""
    model = _fit(formula, model_class, part["train"], **kwargs)
    data = _subset(part, evaluate_on)
    target = response_name(formula)
    probs = predict_proba(model, data)
    truth = data.loc[probs.index, target].astype(int)
    return {"model": model, "auc": auc(truth, probs)}


def gather_predictions(df: pd.DataFrame, models: Dict[str, object]) -> pd.DataFrame:
    """Stack `df` once per model with that model's predictions in `pred`."""
    frames = []
    for name, model in models.items():
        scored = add_predictions(df, model)
        scored.insert(0, "model", name)
        frames.append(scored)
    return pd.concat(frames, ignore_index=True)


def cross_validate_model(
    make_model: Callable[[], object],
    X: pd.DataFrame,
    y: pd.Series,
    n_splits: int = 5,
    random_state: int = RANDOM_SEED,
    log_target: bool = False,
) -> Dict[str, Tuple[float, float]]:
    """
    K-fold cross-validation of a fresh model per fold.

    Parameters
    ----------
    make_model : callable
        Returns an unfitted estimator (or pipeline).
    X, y : training data
    n_splits : int
    random_state : int
    log_target : bool
        Fit on log1p(y) and back-transform predictions before scoring.

    Returns
    -------
    results : dict
        'MAE' and 'RMSE' as (mean, std) across folds.
    """
    kf = KFold(n_splits=n_splits, shuffle=True, random_state=random_state)
    maes = []
    rmses = []

    for fold_idx, (train_idx, val_idx) in enumerate(kf.split(X), start=1):
        X_train, X_val = X.iloc[train_idx], X.iloc[val_idx]
        y_train, y_val = y.iloc[train_idx], y.iloc[val_idx]

        model = make_model()
        model.fit(X_train, np.log1p(y_train) if log_target else y_train)
        y_pred = model.predict(X_val)
        if log_target:
            y_pred = np.expm1(y_pred)

        mae = mean_absolute_error(y_val, y_pred)
        rmse = np.sqrt(mean_squared_error(y_val, y_pred))
        maes.append(mae)
        rmses.append(rmse)

        print(f"Fold {fold_idx}/{n_splits}: MAE={mae:.2f}, RMSE={rmse:.2f}")

    maes = np.array(maes)
    rmses = np.array(rmses)
    print("\nCross-validation summary:")
    print(f"MAE  mean={maes.mean():.2f}, std={maes.std():.2f}")
    print(f"RMSE mean={rmses.mean():.2f}, std={rmses.std():.2f}")

    return {
        "MAE": (float(maes.mean()), float(maes.std())),
        "RMSE": (float(rmses.mean()), float(rmses.std())),
    }
