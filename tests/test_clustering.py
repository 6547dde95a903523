"""
tests/test_clustering.py — k-means and spectral clustering of listings.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from airbnb_course.models.clustering import (
    GEO_FEATURES,
    NUMERIC_FEATURES,
    cluster_neighbourhood_counts,
    compare_clusterings,
    kmeans_clusters,
    numeric_listings,
    spectral_clusters,
)

CENTERS = np.array([[0.0, 0.0], [10.0, 10.0], [0.0, 20.0]])


@pytest.fixture
def blobs() -> pd.DataFrame:
    rng = np.random.default_rng(3)
    points = np.vstack([c + rng.normal(scale=0.5, size=(40, 2)) for c in CENTERS])
    return pd.DataFrame(points, columns=["a", "b"])


class TestKMeans:
    def test_recovers_blobs(self, blobs):
        result = kmeans_clusters(blobs, ["a", "b"], k=3, n_init=10, seed=0)
        assert set(result.labels) == {1, 2, 3}
        assert result.labels.name == "cluster"
        assert result.sizes.tolist() == [40, 40, 40]
        assert result.centers.index.name == "cluster"
        found = np.sort(result.centers.round().to_numpy(), axis=0)
        assert np.allclose(found, np.sort(CENTERS, axis=0))
        assert result.inertia > 0

    def test_scaled_centers_in_original_units(self, blobs):
        result = kmeans_clusters(blobs, ["a", "b"], k=3, n_init=10, seed=0, scale=True)
        assert result.centers["b"].max() == pytest.approx(20, abs=1)

    def test_each_blob_is_one_cluster(self, blobs):
        labels = kmeans_clusters(blobs, ["a", "b"], k=3, n_init=10, seed=0).labels
        for start in (0, 40, 80):
            assert labels.iloc[start:start + 40].nunique() == 1


class TestSpectral:
    def test_labels_start_at_one(self, blobs):
        labels = spectral_clusters(blobs, ["a", "b"], k=3, seed=0)
        assert set(labels) == {1, 2, 3}
        assert len(labels) == len(blobs)


class TestListings:
    def test_numeric_listings(self, raw_listings):
        raw = raw_listings.copy()
        raw["price"] = raw["price"].str.replace(r"[$,]", "", regex=True)
        df = numeric_listings(raw)
        assert list(df.columns) == ["id"] + GEO_FEATURES + NUMERIC_FEATURES
        assert df.notna().all().all()
        assert df["price"].dtype == float

    def test_numeric_listings_missing_columns(self, raw_listings):
        with pytest.raises(ValueError, match="bathrooms"):
            numeric_listings(raw_listings.drop(columns="bathrooms"))

    def test_compare_clusterings(self, raw_listings):
        long = compare_clusterings(raw_listings, k=3, n_rows=60, seed=0)
        assert len(long) == 120
        assert set(long["method"]) == {"kmeans", "spectral"}
        assert long["cluster"].between(1, 3).all()

        counts = cluster_neighbourhood_counts(long)
        assert counts.groupby("method")["n"].sum().tolist() == [60, 60]
