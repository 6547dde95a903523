"""
tests/test_price_model.py — Training, persisting and serving the price model.

Uses a tiny search (two candidates, two folds, twenty trees) so the suite
stays fast.
"""

from __future__ import annotations

import json

import numpy as np
import pandas as pd
import pytest

from airbnb_course.models.predict import _align_and_clean, load_model, predict_price
from airbnb_course.models.train import CATEGORICAL, split_features, train_price_model

SMALL_SEARCH = {
    "regressor__model__n_estimators": [20],
    "regressor__model__max_depth": [2, 3],
    "regressor__model__learning_rate": [0.3],
}


@pytest.fixture
def features() -> pd.DataFrame:
    rng = np.random.default_rng(2)
    n = 200
    accommodates = rng.integers(1, 9, n)
    property_type = rng.choice(["Apartment", "House", "Condominium"], n)
    return pd.DataFrame({
        "id": np.arange(n) + 1,
        "neighbourhood_cleansed": rng.choice(["Back Bay", "Fenway", "South End", "Allston"], n),
        "property_type": property_type,
        "property_type_slim": property_type,
        "room_type": rng.choice(["Entire home/apt", "Private room"], n),
        "accommodates": accommodates,
        "bedrooms": np.maximum(1, accommodates // 2).astype(float),
        "bathrooms": rng.choice([1.0, 1.5, 2.0], n),
        "amenities_count": rng.integers(2, 30, n),
        "host_is_superhost": rng.integers(0, 2, n),
        "first_review": "2019-01-01",
        "price": 40 + 30 * accommodates * np.exp(rng.normal(0, 0.1, n)),
        "price_per_person": 0.0,
    })


@pytest.fixture
def trained(features, tmp_path):
    model_file = str(tmp_path / "models" / "price.joblib")
    metadata_file = str(tmp_path / "models" / "price.metadata.json")
    model, metadata = train_price_model(
        features, seed=0, n_iter=2, n_splits=2, param_dist=SMALL_SEARCH, n_jobs=1,
        model_file=model_file, metadata_file=metadata_file,
    )
    return model, metadata, model_file, metadata_file


class TestSplitFeatures:
    def test_excludes_target_and_identifiers(self, features):
        cat, num = split_features(features)
        assert cat == CATEGORICAL
        for col in ["price", "id", "property_type", "price_per_person", "first_review"]:
            assert col not in cat + num
        assert {"accommodates", "bedrooms", "amenities_count"} <= set(num)


class TestTrain:
    def test_artifacts_and_metadata(self, trained):
        _, metadata, model_file, metadata_file = trained
        with open(metadata_file) as fh:
            on_disk = json.load(fh)
        assert on_disk == metadata
        assert metadata["train_rows"] == 160
        assert metadata["test_rows"] == 40
        assert metadata["categorical"] == CATEGORICAL
        assert "price" not in metadata["features"]
        assert set(metadata["best_params"]) == set(SMALL_SEARCH)
        for key in ["cv_mae_mean", "mae_overall", "mae_p90plus", "mae_le_p90", "baseline_mae"]:
            assert metadata[key] >= 0

    def test_beats_the_median_baseline(self, trained):
        _, metadata, _, _ = trained
        assert metadata["mae_overall"] < metadata["baseline_mae"]

    def test_predictions_on_price_scale(self, trained, features):
        model, metadata, _, _ = trained
        pred = model.predict(features[metadata["features"]])
        assert (pred > 0).all()
        assert np.median(pred) == pytest.approx(features["price"].median(), rel=0.3)


class TestPredict:
    def test_predict_price(self, trained):
        _, _, model_file, metadata_file = trained
        price = predict_price(
            {
                "neighbourhood_cleansed": "Back Bay",
                "property_type": "Apartment",
                "room_type": "Entire home/apt",
                "accommodates": "4",
                "bedrooms": 2,
            },
            model_file=model_file,
            metadata_file=metadata_file,
        )
        assert isinstance(price, float)
        assert price > 0

    def test_unknown_categories_are_tolerated(self, trained):
        _, _, model_file, metadata_file = trained
        price = predict_price(
            {"neighbourhood_cleansed": "Nowhere", "property_type": "Castle", "accommodates": 2},
            model_file=model_file,
            metadata_file=metadata_file,
        )
        assert np.isfinite(price)

    def test_load_model_is_cached(self, trained):
        _, _, model_file, metadata_file = trained
        first = load_model(model_file, metadata_file)
        assert load_model(model_file, metadata_file) is first

    def test_missing_model(self, tmp_path):
        with pytest.raises(RuntimeError, match="not found"):
            predict_price({"accommodates": 2}, model_file=str(tmp_path / "none.joblib"),
                          metadata_file=str(tmp_path / "none.json"))

    def test_align_and_clean(self):
        metadata = {"features": ["accommodates", "bathrooms", "property_type_slim"],
                    "categorical": ["property_type_slim"]}
        out = _align_and_clean(pd.DataFrame([{"accommodates": "3", "property_type": "Loft"}]), metadata)
        assert list(out.columns) == metadata["features"]
        assert out.loc[0, "accommodates"] == 3.0
        assert np.isnan(out.loc[0, "bathrooms"])
        assert out.loc[0, "property_type_slim"] == "Loft"
