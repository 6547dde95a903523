"""
Unsupervised session: k-means and spectral clustering of listings.
"""

from typing import List, NamedTuple

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans, SpectralClustering
from sklearn.preprocessing import StandardScaler

from airbnb_course.config import RANDOM_SEED

NUMERIC_FEATURES = [
    "accommodates", "bathrooms", "bedrooms", "review_scores_rating", "price",
]
GEO_FEATURES = ["longitude", "latitude"]


class KMeansResult(NamedTuple):
    labels: pd.Series
    centers: pd.DataFrame
    sizes: pd.Series
    inertia: float


def numeric_listings(listings: pd.DataFrame, columns: List[str] = None) -> pd.DataFrame:
    """id, coordinates and the clustering features, complete rows only."""
    columns = columns or NUMERIC_FEATURES
    keep = ["id"] + GEO_FEATURES + [c for c in columns if c not in GEO_FEATURES]
    missing = [c for c in keep if c not in listings.columns]
    if missing:
        raise ValueError(f"Listings are missing columns: {missing}")
    df = listings[keep].copy()
    for col in keep[1:]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df.dropna().reset_index(drop=True)


def kmeans_clusters(
    df: pd.DataFrame,
    columns: List[str],
    k: int = 5,
    n_init: int = 100,
    max_iter: int = 1000,
    seed: int = RANDOM_SEED,
    scale: bool = False,
) -> KMeansResult:
    """
    k-means on `columns` of `df`. Cluster labels start at 1; centers are
    reported in the original units even when `scale` is on.
    """
    X = df[columns].to_numpy(dtype=float)
    scaler = StandardScaler().fit(X) if scale else None
    km = KMeans(n_clusters=k, n_init=n_init, max_iter=max_iter, random_state=seed)
    labels = km.fit_predict(scaler.transform(X) if scaler else X) + 1

    centers = km.cluster_centers_
    if scaler is not None:
        centers = scaler.inverse_transform(centers)
    centers = pd.DataFrame(centers, columns=columns, index=pd.RangeIndex(1, k + 1, name="cluster"))
    labels = pd.Series(labels, index=df.index, name="cluster")
    sizes = labels.value_counts().reindex(centers.index, fill_value=0).rename("n")
    return KMeansResult(labels=labels, centers=centers, sizes=sizes, inertia=float(km.inertia_))


def spectral_clusters(
    df: pd.DataFrame,
    columns: List[str],
    k: int = 10,
    seed: int = RANDOM_SEED,
) -> pd.Series:
    """Spectral clustering with an RBF affinity on standardized `columns`; labels start at 1."""
    X = StandardScaler().fit_transform(df[columns].to_numpy(dtype=float))
    sc = SpectralClustering(n_clusters=k, affinity="rbf", assign_labels="kmeans", random_state=seed)
    return pd.Series(sc.fit_predict(X) + 1, index=df.index, name="cluster")


def compare_clusterings(
    listings: pd.DataFrame,
    k: int = 10,
    n_rows: int = 1000,
    seed: int = RANDOM_SEED,
) -> pd.DataFrame:
    """
    Cluster the first `n_rows` listings on their coordinates with both
    methods. Long format: one row per listing and method.
    """
    extra = ["neighbourhood_cleansed"] if "neighbourhood_cleansed" in listings.columns else []
    sub = listings[GEO_FEATURES + extra].dropna(subset=GEO_FEATURES).head(n_rows).copy()
    sub["kmeans"] = kmeans_clusters(sub, GEO_FEATURES, k=k, n_init=10, seed=seed).labels
    sub["spectral"] = spectral_clusters(sub, GEO_FEATURES, k=k, seed=seed)
    long = sub.melt(id_vars=GEO_FEATURES + extra, value_vars=["kmeans", "spectral"],
                    var_name="method", value_name="cluster")
    long["cluster"] = long["cluster"].astype(np.int64)
    return long


def cluster_neighbourhood_counts(long: pd.DataFrame) -> pd.DataFrame:
    """Listings per (method, cluster, neighbourhood)."""
    return (
        long.groupby(["method", "cluster", "neighbourhood_cleansed"])
            .size()
            .rename("n")
            .reset_index()
    )
