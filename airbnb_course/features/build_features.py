"""
Feature engineering for the cleaned listings table.
"""
from typing import Tuple

import numpy as np
import pandas as pd

from airbnb_course.config import CITY_CENTER

EARTH_RADIUS_KM = 6371.0

REVIEW_COLUMNS = [
    'review_scores_rating', 'review_scores_accuracy', 'review_scores_cleanliness',
    'review_scores_checkin', 'review_scores_communication', 'review_scores_location',
    'review_scores_value', 'reviews_per_month', 'n_reviews', 'avg_comment_length',
    'days_since_last_review',
]

_TRUTHY = ['t', 'true', 'yes', 'y', '1']


def haversine_km(lon1, lat1, lon2, lat2):
    """Great-circle distance in km; accepts scalars or arrays."""
    lon1, lat1, lon2, lat2 = map(np.radians, [lon1, lat1, lon2, lat2])
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = np.sin(dlat / 2.0) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2.0) ** 2
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(a))


def add_geofeatures(df: pd.DataFrame, center: Tuple[float, float] = CITY_CENTER) -> pd.DataFrame:
    """
    Add distance to the city centre (dist_to_center_km).
    """
    df = df.copy()
    if 'latitude' in df.columns and 'longitude' in df.columns:
        lat = pd.to_numeric(df['latitude'], errors='coerce')
        lon = pd.to_numeric(df['longitude'], errors='coerce')
        df['dist_to_center_km'] = haversine_km(lon, lat, center[1], center[0])
    else:
        df['dist_to_center_km'] = np.nan
    return df


def add_amenity_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Turn amenity flags into 0/1 and fill amenities_count from them when missing.
    """
    df = df.copy()
    amen_cols = [c for c in df.columns if c.startswith('amenity_')]
    for c in amen_cols:
        df[c] = df[c].astype(str).str.strip().str.lower().isin(_TRUTHY).astype(int)
    if 'amenities_count' in df.columns:
        df['amenities_count'] = pd.to_numeric(df['amenities_count'], errors='coerce').fillna(df[amen_cols].sum(axis=1))
    else:
        df['amenities_count'] = df[amen_cols].sum(axis=1) if amen_cols else 0
    return df


def add_review_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce review fields to numbers. Listings without reviews get the median
    rating, zero activity and the largest observed recency.
    """
    df = df.copy()
    for c in REVIEW_COLUMNS:
        if c in df.columns:
            df[c] = pd.to_numeric(df[c], errors='coerce')
    if 'review_scores_rating' in df.columns:
        df['review_scores_rating'] = df['review_scores_rating'].fillna(df['review_scores_rating'].median())
    for c in ['reviews_per_month', 'n_reviews', 'avg_comment_length']:
        if c in df.columns:
            df[c] = df[c].fillna(0)
    if 'days_since_last_review' in df.columns:
        df['days_since_last_review'] = df['days_since_last_review'].fillna(df['days_since_last_review'].max())
    return df


def build_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Apply all feature transforms and return the augmented DataFrame.
    """
    df = add_amenity_features(df)
    df = add_review_features(df)
    df = add_geofeatures(df)
    if 'price' in df.columns and 'accommodates' in df.columns:
        df['price_per_person'] = df['price'] / df['accommodates'].replace({0: 1})
    if 'host_is_superhost' in df.columns:
        df['host_is_superhost'] = df['host_is_superhost'].astype(str).str.strip().str.lower().isin(_TRUTHY).astype(int)
    return df
