"""
tests/test_evaluate.py — Model comparison harness and fold-by-fold CV.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import LinearRegression

from airbnb_course.models.classification import fit_logistic
from airbnb_course.models.evaluate import (
    classifier_auc,
    cross_validate_model,
    gather_predictions,
    regression_metrics,
    regressor_rmse,
)
from airbnb_course.models.partition import resample_partition
from airbnb_course.models.regression import fit_ols


@pytest.fixture
def part() -> dict:
    rng = np.random.default_rng(5)
    n = 300
    accommodates = rng.integers(1, 9, n)
    price = 30 + 35 * accommodates + rng.normal(0, 10, n)
    elevator = (price + rng.normal(0, 60, n) > np.median(price)).astype(int)
    df = pd.DataFrame({"price": price, "accommodates": accommodates, "elevator": elevator})
    return resample_partition(df, seed=0)


class TestHarness:
    def test_regressor_rmse_with_fitting_function(self, part):
        out = regressor_rmse("price ~ accommodates", fit_ols, part)
        assert out["rmse"] == pytest.approx(10, abs=3)
        assert hasattr(out["model"], "params")

    def test_regressor_rmse_with_estimator_class(self, part):
        out = regressor_rmse("price ~ accommodates", RandomForestRegressor, part,
                             evaluate_on="test", n_estimators=20, random_state=0)
        assert out["rmse"] < 20
        assert out["model"].estimator.n_estimators == 20

    def test_evaluate_on_a_frame(self, part):
        out = regressor_rmse("price ~ accommodates", fit_ols, part, evaluate_on=part["train"])
        assert out["rmse"] > 0

    def test_classifier_auc(self, part):
        logit = classifier_auc("elevator ~ price", fit_logistic, part)
        forest = classifier_auc("elevator ~ price", RandomForestClassifier, part,
                                n_estimators=50, random_state=0)
        assert 0.6 < logit["auc"] <= 1.0
        assert 0.5 < forest["auc"] <= 1.0

    def test_unknown_partition(self, part):
        with pytest.raises(ValueError, match="validation"):
            regressor_rmse("price ~ accommodates", fit_ols, part, evaluate_on="validation")

    def test_gather_predictions(self, part):
        train = part["train"]
        models = {
            "lm": fit_ols("price ~ accommodates", train),
            "quad": fit_ols("price ~ accommodates + I(accommodates ** 2)", train),
        }
        gathered = gather_predictions(train, models)
        assert len(gathered) == 2 * len(train)
        assert gathered["model"].value_counts().to_dict() == {"lm": len(train), "quad": len(train)}
        assert gathered["pred"].notna().all()


class TestMetrics:
    def test_regression_metrics(self):
        out = regression_metrics([1.0, 2.0, 3.0], [1.0, 2.0, 5.0])
        assert out["mae"] == pytest.approx(2 / 3)
        assert out["mse"] == pytest.approx(4 / 3)
        assert out["rmse"] == pytest.approx(np.sqrt(4 / 3))

    def test_cross_validate_model(self, part, capsys):
        df = part["train"]
        result = cross_validate_model(LinearRegression, df[["accommodates"]], df["price"], n_splits=3)
        assert set(result) == {"MAE", "RMSE"}
        mae_mean, mae_std = result["MAE"]
        assert mae_mean == pytest.approx(8, abs=3)
        assert mae_std >= 0
        out = capsys.readouterr().out
        assert "Fold 1/3" in out
        assert "Cross-validation summary" in out

    def test_cross_validate_log_target(self, part, capsys):
        df = part["train"]
        result = cross_validate_model(LinearRegression, df[["accommodates"]], df["price"],
                                      n_splits=3, log_target=True)
        assert result["RMSE"][0] > 0
