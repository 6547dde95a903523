"""
Formula-driven design matrices and a wrapper that lets any scikit-learn
estimator be fitted with an R-style formula ("price ~ accommodates + room_type").

Categorical predictors should be pandas categoricals (see
`process_listings`) so every partition of the data is encoded with the same
levels.
"""

import pandas as pd
from patsy import build_design_matrices, dmatrices
from sklearn.base import clone


def response_name(formula: str) -> str:
    if "~" not in formula:
        raise ValueError(f"Formula needs a response: {formula!r}")
    return formula.split("~", 1)[0].strip()


def _as_vector(y: pd.DataFrame) -> pd.Series:
    # a bool/categorical response expands to one column per level; keep the last level
    col = y.iloc[:, -1]
    return col.rename(y.columns[-1])


def design_matrices(formula: str, data: pd.DataFrame, intercept: bool = True):
    """
    Response vector and model matrix for `formula`, rows with missing values
    dropped consistently.

    Returns
    -------
    y : pd.Series
    X : pd.DataFrame
    design_info : patsy.DesignInfo
        Pass to `transform()` to encode further data the same way.
    """
    y, X = dmatrices(formula, data, return_type="dataframe")
    design_info = X.design_info
    if not intercept and "Intercept" in X.columns:
        X = X.drop(columns="Intercept")
    return _as_vector(y), X, design_info


def transform(design_info, data: pd.DataFrame, intercept: bool = True) -> pd.DataFrame:
    """Encode `data` with an existing design."""
    X = build_design_matrices([design_info], data, return_type="dataframe")[0]
    if not intercept and "Intercept" in X.columns:
        X = X.drop(columns="Intercept")
    return X


class FormulaModel:
    """
    Fit a scikit-learn style estimator from a formula and a DataFrame.

    Parameters
    ----------
    formula : str
        e.g. "amenity_Elevator_in_Building ~ price + neighbourhood_cleansed".
    estimator : object
        Unfitted estimator with fit/predict (and predict_proba for classifiers).
    """

    def __init__(self, formula: str, estimator):
        self.formula = formula
        self.estimator = estimator
        self.response = response_name(formula)

    def fit(self, data: pd.DataFrame) -> "FormulaModel":
        y, X, self.design_info_ = design_matrices(self.formula, data, intercept=False)
        self.feature_names_ = list(X.columns)
        self.X_, self.y_ = X, y
        self.estimator.fit(X.values, y.values)
        return self

    def design(self, data: pd.DataFrame) -> pd.DataFrame:
        return transform(self.design_info_, data, intercept=False)

    def predict(self, data: pd.DataFrame) -> pd.Series:
        X = self.design(data)
        return pd.Series(self.estimator.predict(X.values), index=X.index, name="pred")

    def predict_proba(self, data: pd.DataFrame) -> pd.Series:
        """Probability of the positive (last) class."""
        X = self.design(data)
        proba = self.estimator.predict_proba(X.values)
        return pd.Series(proba[:, -1], index=X.index, name="prob")

    def refit(self, **params) -> "FormulaModel":
        """Same formula and training rows, estimator re-fitted with `params` changed."""
        est = clone(self.estimator).set_params(**params)
        model = FormulaModel(self.formula, est)
        model.design_info_ = self.design_info_
        model.feature_names_ = self.feature_names_
        model.X_, model.y_ = self.X_, self.y_
        est.fit(self.X_.values, self.y_.values)
        return model

    def fitted_values(self) -> pd.Series:
        return pd.Series(self.estimator.predict(self.X_.values), index=self.X_.index, name="pred")

    def __repr__(self):
        return f"FormulaModel({self.formula!r}, {self.estimator!r})"
