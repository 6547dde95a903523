"""
Regression session: ordinary least squares with formulas, the formula
comparison harness, and LASSO paths / cross-validated LASSO.

OLS is fitted by statsmodels, LASSO by scikit-learn. Predictors for the
LASSO are standardized before fitting (as glmnet does by default) and the
coefficients are reported back on the original scale.
"""

from typing import Dict, List, NamedTuple

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from patsy import build_design_matrices, dmatrices
from sklearn.linear_model import Lasso, LassoCV, lasso_path
from sklearn.model_selection import KFold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from airbnb_course.config import RANDOM_SEED


class LassoPath(NamedTuple):
    lambdas: np.ndarray
    coefficients: pd.DataFrame  # features x lambdas, original scale
    n_nonzero: np.ndarray


class LassoCVResult(NamedTuple):
    model_min: Pipeline
    model_1se: Pipeline
    lambda_min: float
    lambda_1se: float
    cv_table: pd.DataFrame
    n_nonzero_min: int
    n_nonzero_1se: int


# --- OLS ---

def fit_ols(formula: str, data: pd.DataFrame):
    """statsmodels OLS results for `formula`."""
    return smf.ols(formula, data=data).fit()


def _response(model) -> str:
    if hasattr(model, "response"):
        return model.response
    return model.model.endog_names


def add_predictions(df: pd.DataFrame, model, var: str = "pred") -> pd.DataFrame:
    """Copy of `df` with the model's predictions in column `var`."""
    pred = model.predict(df)
    out = df.copy()
    out[var] = pd.Series(np.asarray(pred), index=getattr(pred, "index", df.index))
    return out


def add_residuals(df: pd.DataFrame, model, var: str = "resid") -> pd.DataFrame:
    """Copy of `df` with observed minus predicted response in column `var`."""
    out = add_predictions(df, model, var="_pred")
    out[var] = out[_response(model)].astype(float) - out["_pred"]
    return out.drop(columns="_pred")


def mse(model, data: pd.DataFrame = None) -> float:
    """Mean squared residual, in-sample unless `data` is given."""
    if data is None:
        return float(np.mean(np.asarray(model.resid) ** 2))
    resid = add_residuals(data, model)["resid"].dropna()
    return float(np.mean(resid ** 2))


def rmse(model, data: pd.DataFrame) -> float:
    return float(np.sqrt(mse(model, data)))


def rsquare(model, data: pd.DataFrame) -> float:
    """1 - var(residuals) / var(response), evaluated on `data`."""
    scored = add_residuals(data, model).dropna(subset=["resid"])
    y = scored[_response(model)].astype(float)
    return float(1.0 - scored["resid"].var() / y.var())


def eval_ols(formula: str, part: Dict[str, pd.DataFrame]) -> dict:
    """
    Fit OLS on `part["train"]` and score R^2 on every partition.

    Returns a dict with `model`, `formula` and one `<name>_rsq` per partition.
    """
    model = fit_ols(formula, part["train"])
    row = {"model": model, "formula": formula}
    for name, subset in part.items():
        row[f"{name}_rsq"] = rsquare(model, subset)
    return row


def compare_formulas(formulas: List[str], part: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """One `eval_ols` row per formula."""
    return pd.DataFrame([eval_ols(f, part) for f in formulas])


# --- Model matrices ---

def make_matrices(part: Dict[str, pd.DataFrame], formula: str) -> Dict[str, tuple]:
    """
    (X, y) per partition for `formula`, without the intercept column.

    The encoding is fixed on the union of all partitions so every X has the
    same columns.
    """
    full = pd.concat(list(part.values()))
    y_full, X_full = dmatrices(formula, full, return_type="dataframe")
    infos = [y_full.design_info, X_full.design_info]

    out = {}
    for name, subset in part.items():
        y, X = build_design_matrices(infos, subset, return_type="dataframe")
        out[name] = (X.drop(columns="Intercept", errors="ignore"), y.iloc[:, -1])
    return out


# --- LASSO ---

def _standardize(X):
    X = np.asarray(X, dtype=float)
    mu = X.mean(axis=0)
    sd = X.std(axis=0)
    sd[sd == 0] = 1.0
    return (X - mu) / sd, sd


def lasso_path_summary(X: pd.DataFrame, y) -> LassoPath:
    """
    Coefficient path over a decreasing grid of penalties.

    The first lambda is the smallest penalty at which every coefficient is
    zero; the path relaxes from there.
    """
    y = np.asarray(y, dtype=float)
    Xs, sd = _standardize(X)
    lambdas, coefs, _ = lasso_path(Xs, y - y.mean())
    coefs = coefs / sd[:, None]
    names = list(X.columns) if hasattr(X, "columns") else [f"x{i}" for i in range(coefs.shape[0])]
    table = pd.DataFrame(coefs, index=names)
    return LassoPath(lambdas=lambdas, coefficients=table, n_nonzero=(coefs != 0).sum(axis=0))


def nonzero_coefficients(path: LassoPath, step: int) -> pd.Series:
    """Non-zero coefficients at position `step` of the path (0-based)."""
    col = path.coefficients.iloc[:, step]
    return col[col != 0]


def fit_lasso_cv(X: pd.DataFrame, y, n_folds: int = 10, seed: int = RANDOM_SEED) -> LassoCVResult:
    """
    Choose the LASSO penalty by K-fold cross-validation.

    `lambda_min` minimises the mean CV error; `lambda_1se` is the largest
    penalty whose mean error is within one standard error of that minimum.
    """
    y = np.asarray(y, dtype=float)
    cv = KFold(n_splits=n_folds, shuffle=True, random_state=seed)
    model_min = Pipeline([("scale", StandardScaler()), ("lasso", LassoCV(cv=cv, random_state=seed))])
    model_min.fit(X, y)

    lasso = model_min.named_steps["lasso"]
    scaler = model_min.named_steps["scale"]
    cvm = lasso.mse_path_.mean(axis=1)
    cvsd = lasso.mse_path_.std(axis=1, ddof=1) / np.sqrt(lasso.mse_path_.shape[1])
    i_min = int(np.argmin(cvm))
    lambda_min = float(lasso.alphas_[i_min])
    lambda_1se = float(lasso.alphas_[cvm <= cvm[i_min] + cvsd[i_min]].max())

    lasso_1se = Lasso(alpha=lambda_1se).fit(scaler.transform(X), y)
    model_1se = Pipeline([("scale", scaler), ("lasso", lasso_1se)])

    cv_table = pd.DataFrame({"lambda": lasso.alphas_, "cvm": cvm, "cvsd": cvsd})
    return LassoCVResult(
        model_min=model_min,
        model_1se=model_1se,
        lambda_min=lambda_min,
        lambda_1se=lambda_1se,
        cv_table=cv_table,
        n_nonzero_min=int(np.count_nonzero(lasso.coef_)),
        n_nonzero_1se=int(np.count_nonzero(lasso_1se.coef_)),
    )


def r_squared(y_true, y_pred) -> float:
    """1 - SSE / SST."""
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    return float(1 - np.sum((y_pred - y_true) ** 2) / np.sum((y_true.mean() - y_true) ** 2))


def lasso_test_r2(result: LassoCVResult, X_test, y_test, s: str = "lambda_min") -> float:
    """Out-of-sample R^2 at `lambda_min` or `lambda_1se`."""
    if s not in ("lambda_min", "lambda_1se"):
        raise ValueError(f"s must be 'lambda_min' or 'lambda_1se', got {s!r}")
    model = result.model_min if s == "lambda_min" else result.model_1se
    return r_squared(y_test, model.predict(X_test))

