"""
Read the raw Airbnb exports and load the cleaned, feature-built dataset.

The raw readers (`read_listings`, `read_calendar`, `read_reviews`) are thin
wrappers around `pd.read_csv` that take care of the price strings and
`t`/`f` flags found in the Inside Airbnb exports.

`load_data()` reads the joined cleaned tables `listings_features` and
`reviews_summary` from the SQL store and caches the result as a parquet file
on disk for faster subsequent access. Numeric columns are coerced to floats
to prevent NAType errors downstream.
"""

import os

import numpy as np
import pandas as pd

from airbnb_course.config import (
    CALENDAR_FILE,
    LISTINGS_FILE,
    PROCESSED_DATA_DIR,
    REVIEWS_FILE,
)
from airbnb_course.data.store import read_joined_listings
from airbnb_course.features.build_features import build_features

CACHE_FILE = os.path.join(PROCESSED_DATA_DIR, "airbnb_clean.parquet")

_TRUE_VALUES = {"t", "true", "1", "yes", "y"}


def parse_number(series: pd.Series) -> pd.Series:
    """
    Extract the first number from each value, dropping currency symbols and
    thousands separators ("$1,250.00" -> 1250.0). Unparseable values are NaN.
    """
    if pd.api.types.is_numeric_dtype(series):
        return series.astype(float)
    text = series.astype("string").str.replace(",", "", regex=False)
    extracted = text.str.extract(r"(-?\d+(?:\.\d+)?)", expand=False)
    return pd.to_numeric(extracted, errors="coerce").astype(float)


def parse_flag(series: pd.Series) -> pd.Series:
    """Map t/f style flags to booleans; anything unrecognised is False."""
    if pd.api.types.is_bool_dtype(series):
        return series
    return series.astype(str).str.strip().str.lower().isin(_TRUE_VALUES)


def clean_prices(df: pd.DataFrame) -> pd.DataFrame:
    """Parse every column whose name contains 'price'."""
    df = df.copy()
    for col in [c for c in df.columns if "price" in c]:
        df[col] = parse_number(df[col])
    return df


def _require(path: str) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Expected data file at {path}. Download the Inside Airbnb export "
            "into data/raw/ or set AIRBNB_DATA_DIR."
        )
    return path


def read_listings(path: str = LISTINGS_FILE, parse_prices: bool = True) -> pd.DataFrame:
    df = pd.read_csv(_require(path), low_memory=False)
    return clean_prices(df) if parse_prices else df


def read_calendar(path: str = CALENDAR_FILE) -> pd.DataFrame:
    """
    Read the calendar export: one row per listing and night.

    `date` becomes a datetime, `available` a bool and all price columns floats.
    Exports without `adjusted_price` get a copy of `price`.
    """
    df = pd.read_csv(_require(path), low_memory=False)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["available"] = parse_flag(df["available"])
    df = clean_prices(df)
    if "adjusted_price" not in df.columns and "price" in df.columns:
        df["adjusted_price"] = df["price"]
    return df


def read_reviews(path: str = REVIEWS_FILE) -> pd.DataFrame:
    df = pd.read_csv(_require(path), low_memory=False)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


def load_data(use_cache: bool = True, engine_url: str = None, cache_file: str = CACHE_FILE) -> pd.DataFrame:
    """
    Load the cleaned listings joined with their review summary, from the SQL
    store or the cached parquet. Applies feature engineering and ensures
    numeric columns and missing values are safe for ML pipelines.

    Parameters
    ----------
    use_cache : bool
        If True and the parquet cache exists, load from cache.
    engine_url : str or None
        SQLAlchemy URL of the store; defaults to config.ENGINE_URL.
    cache_file : str
        Parquet cache location.

    Returns
    -------
    pd.DataFrame
        Cleaned dataset with consistent numeric types and missing values.
    """
    if use_cache and os.path.exists(cache_file):
        df = pd.read_parquet(cache_file)
    else:
        df = read_joined_listings(engine_url)
        df = build_features(df)

        os.makedirs(os.path.dirname(cache_file), exist_ok=True)
        df.to_parquet(cache_file, index=False)

    for col in df.columns:
        if pd.api.types.is_numeric_dtype(df[col]) and not pd.api.types.is_bool_dtype(df[col]):
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)

    return df.replace({pd.NA: np.nan})
