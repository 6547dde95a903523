"""
Train the nightly price model: gradient-boosted trees on the cleaned
feature table, log-price target, randomized hyper-parameter search.

Usage (from project root)
-------------------------
python -m airbnb_course.models.train
"""

import json
import os
import platform
import time

import joblib
import numpy as np
import pandas as pd
import sklearn
import xgboost as xgb
from sklearn.compose import ColumnTransformer, TransformedTargetRegressor
from sklearn.impute import SimpleImputer
from sklearn.metrics import mean_absolute_error
from sklearn.model_selection import KFold, RandomizedSearchCV, train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from airbnb_course.config import METADATA_FILE, MODEL_FILE, RANDOM_SEED

CATEGORICAL = ["neighbourhood_cleansed", "property_type_slim", "room_type"]
# identifiers, dates, the raw type and anything derived from the target
EXCLUDE = ["price", "id", "first_review", "last_review", "property_type", "price_per_person"]

PARAM_DIST = {
    "regressor__model__max_depth": [4, 6, 8, 10],
    "regressor__model__min_child_weight": [1, 3, 5, 7],
    "regressor__model__subsample": [0.6, 0.8, 1.0],
    "regressor__model__colsample_bytree": [0.6, 0.8, 1.0],
    "regressor__model__gamma": [0, 0.5, 1.0],
    "regressor__model__reg_alpha": [0, 0.001, 0.01, 0.1],
    "regressor__model__reg_lambda": [0.1, 1.0, 5.0, 10.0],
    "regressor__model__learning_rate": [0.03, 0.05, 0.08],
    "regressor__model__n_estimators": [400, 800, 1200],
    "regressor__model__objective": ["reg:squarederror", "reg:absoluteerror"],
}


def split_features(df: pd.DataFrame):
    """Categorical and numeric feature columns present in `df`."""
    cat = [c for c in CATEGORICAL if c in df.columns]
    num = [
        c for c in df.columns
        if c not in cat + EXCLUDE
        and (pd.api.types.is_numeric_dtype(df[c]) or pd.api.types.is_bool_dtype(df[c]))
    ]
    return cat, num


def build_preproc(cat, num):
    return ColumnTransformer([
        ("cat", OneHotEncoder(handle_unknown="infrequent_if_exist", min_frequency=0.01), cat),
        ("num", SimpleImputer(strategy="median"), num),
    ])


def build_model(cat, num, seed: int = RANDOM_SEED, n_jobs: int = -1):
    xgb_reg = xgb.XGBRegressor(
        tree_method="hist",
        n_estimators=1000,
        learning_rate=0.05,
        random_state=seed,
        n_jobs=n_jobs,
    )
    pipe = Pipeline([("pre", build_preproc(cat, num)), ("model", xgb_reg)])
    return TransformedTargetRegressor(regressor=pipe, func=np.log, inverse_func=np.exp)


def train_price_model(
    df: pd.DataFrame,
    seed: int = RANDOM_SEED,
    n_iter: int = 30,
    n_splits: int = 5,
    test_size: float = 0.2,
    param_dist: dict = None,
    n_jobs: int = -1,
    model_file: str = MODEL_FILE,
    metadata_file: str = METADATA_FILE,
):
    """
    Fit, evaluate and persist the price model.

    The held-out split is stratified on deciles of log-price so the expensive
    tail is represented. Returns the fitted estimator and its metadata.
    """
    df = df[pd.to_numeric(df["price"], errors="coerce") > 0].copy()
    cat, num = split_features(df)
    for col in num:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)

    y = df["price"].astype(float)
    X = df[cat + num]

    strat = pd.qcut(np.log(y), q=10, labels=False, duplicates="drop")
    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=test_size, random_state=seed, stratify=strat
    )

    search = RandomizedSearchCV(
        estimator=build_model(cat, num, seed=seed, n_jobs=n_jobs),
        param_distributions=param_dist or PARAM_DIST,
        n_iter=n_iter,
        scoring="neg_mean_absolute_error",
        cv=KFold(n_splits=n_splits, shuffle=True, random_state=seed),
        n_jobs=n_jobs,
        random_state=seed,
        verbose=1,
    )
    search.fit(X_train, y_train)
    best = search.best_estimator_

    y_pred = best.predict(X_test)  # back on price scale thanks to TTR
    p90 = y_test.quantile(0.90)
    hi = (y_test >= p90).to_numpy()
    baseline_pred = np.full(len(y_test), float(y_train.median()))

    metadata = {
        "saved_at": time.strftime("%Y-%m-%d %H:%M:%S"),
        "python": platform.python_version(),
        "numpy": np.__version__,
        "pandas": pd.__version__,
        "sklearn": sklearn.__version__,
        "xgboost": xgb.__version__,
        "target": "price (log-trained via TTR, predictions on price scale)",
        "train_rows": int(len(X_train)),
        "test_rows": int(len(X_test)),
        "features": list(X.columns),
        "categorical": cat,
        "cv_mae_mean": float(-search.best_score_),
        "mae_overall": float(mean_absolute_error(y_test, y_pred)),
        "mae_p90plus": float(mean_absolute_error(y_test[hi], y_pred[hi])) if hi.any() else None,
        "mae_le_p90": float(mean_absolute_error(y_test[~hi], y_pred[~hi])) if (~hi).any() else None,
        "baseline_mae": float(mean_absolute_error(y_test, baseline_pred)),
        "best_params": {k: (v.item() if hasattr(v, "item") else v) for k, v in search.best_params_.items()},
    }

    for path in (model_file, metadata_file):
        os.makedirs(os.path.dirname(path), exist_ok=True)
    joblib.dump(best, model_file)
    with open(metadata_file, "w") as fh:
        json.dump(metadata, fh, indent=2)

    print(f"\nSaved → {model_file}")
    print(f"Saved → {metadata_file}")
    return best, metadata


def main():
    from airbnb_course.data.load_data import load_data

    _, metadata = train_price_model(load_data(use_cache=True))
    print(json.dumps(metadata, indent=2))


if __name__ == "__main__":
    main()
