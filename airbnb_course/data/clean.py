"""
Cleaning steps for the listings and reviews exports.

Two flavours live here:

- `process_listings()` is the small, opinionated preparation used in the
  modeling session (six columns, a handful of property types, median
  imputation, categorical factors).
- `clean_listings()` / `clean_reviews()` are the fuller pipelines that feed
  the SQL feature store used by the price model.
"""

import ast
import re
from collections import Counter

import numpy as np
import pandas as pd

from airbnb_course import config
from airbnb_course.data.load_data import parse_flag, parse_number

MODELING_COLUMNS = [
    "price", "accommodates", "review_scores_rating",
    "property_type", "neighbourhood_cleansed", "room_type",
]

LISTING_COLUMNS = [
    "id", "neighbourhood_cleansed", "latitude", "longitude",
    "property_type", "room_type", "accommodates", "bedrooms",
    "beds", "bathrooms", "amenities", "price", "minimum_nights",
    "maximum_nights", "host_is_superhost", "review_scores_rating",
    "review_scores_accuracy", "review_scores_cleanliness",
    "review_scores_checkin", "review_scores_communication",
    "review_scores_location", "review_scores_value", "reviews_per_month",
]

NUMERIC_COLUMNS = [
    "latitude", "longitude", "accommodates", "bedrooms", "beds", "bathrooms",
    "minimum_nights", "maximum_nights",
    "review_scores_rating", "review_scores_accuracy", "review_scores_cleanliness",
    "review_scores_checkin", "review_scores_communication", "review_scores_location",
    "review_scores_value", "reviews_per_month",
]

REVIEW_COLUMNS = ["listing_id", "id", "date", "reviewer_id", "reviewer_name", "comments"]


# --- Modeling-session preparation ---

def process_listings(source) -> pd.DataFrame:
    """
    Prepare listings for the modeling session.

    Parameters
    ----------
    source : str or pd.DataFrame
        Path to listings.csv or an already-loaded raw listings frame.

    Returns
    -------
    pd.DataFrame
        Columns `MODELING_COLUMNS`; strings converted to categoricals and
        missing numerics imputed with column medians.
    """
    raw = pd.read_csv(source, low_memory=False) if isinstance(source, str) else source.copy()
    missing = [c for c in MODELING_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"Listings are missing required columns: {missing}")

    df = raw.copy()
    df["price"] = parse_number(df["price"])
    df["accommodates"] = pd.to_numeric(df["accommodates"], errors="coerce")

    # outliers
    df = df[(df["accommodates"] <= config.MAX_ACCOMMODATES) & (df["price"] <= config.MAX_PRICE)]
    df = df[
        df["property_type"].isin(config.KEEP_PROPERTY_TYPES)
        & ~df["neighbourhood_cleansed"].isin(config.DROP_NEIGHBOURHOODS)
    ]

    df = df[MODELING_COLUMNS].copy()
    for col in ["price", "accommodates", "review_scores_rating"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
        df[col] = df[col].fillna(df[col].median())

    for col in ["property_type", "neighbourhood_cleansed", "room_type"]:
        df[col] = df[col].astype(str).astype("category")

    return df.reset_index(drop=True)


# --- Amenities ---

def parse_amenities(value) -> list:
    """
    Split an amenities field into a list of names.

    Handles both the brace format of older exports (`{TV,"Air conditioning"}`)
    and the JSON-list format of newer ones (`["TV", "Air conditioning"]`).
    """
    if not isinstance(value, str) or not value.strip():
        return []
    value = value.strip()
    if value.startswith("["):
        try:
            items = ast.literal_eval(value)
        except (ValueError, SyntaxError):
            items = []
    else:
        items = [a or b for a, b in re.findall(r'"([^"]*)"|([^,{}]+)', value)]
    names = [str(i).strip() for i in items]
    return [n for n in names if n and not n.startswith("translation missing")]


def amenity_column(name: str) -> str:
    """'Elevator in Building' -> 'amenity_Elevator_in_Building'."""
    return "amenity_" + re.sub(r"\W+", "_", name).strip("_")


def expand_amenities(df: pd.DataFrame, top_n: int = None, column: str = "amenities") -> pd.DataFrame:
    """
    Add one boolean `amenity_<Name>` column per amenity.

    With `top_n`, only the most common amenities get a column.
    """
    lists = df[column].apply(parse_amenities)
    counts = Counter(am for sub in lists for am in set(sub))
    names = [a for a, _ in counts.most_common(top_n)] if top_n else sorted(counts)

    flags = {}
    for name in names:
        col = amenity_column(name)
        if col in flags:
            # names that only differ in punctuation share a column
            flags[col] = flags[col] | lists.apply(lambda sub, n=name: n in sub)
        else:
            flags[col] = lists.apply(lambda sub, n=name: n in sub)
    out = pd.concat([df, pd.DataFrame(flags, index=df.index, dtype=bool)], axis=1)
    return out


# --- Feature-store pipeline for listings ---

def select_columns(df: pd.DataFrame) -> pd.DataFrame:
    keep = [c for c in LISTING_COLUMNS if c in df.columns]
    return df[keep].copy()


def convert_numeric(df: pd.DataFrame) -> pd.DataFrame:
    df["id"] = pd.to_numeric(df["id"], errors="coerce")

    assert df["id"].notna().all(), "Found non-numeric id after coercion"
    df["id"] = df["id"].astype("int64")

    for col in [c for c in NUMERIC_COLUMNS if c in df.columns]:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df["price"] = parse_number(df["price"])
    return df


def handle_missing(df: pd.DataFrame) -> pd.DataFrame:
    df = df.dropna(subset=["price"]).copy()
    for col in ["beds", "bathrooms", "bedrooms"]:
        if col in df.columns:
            df[col] = df[col].fillna(df[col].median())
    if "host_is_superhost" in df.columns:
        df["host_is_superhost"] = parse_flag(df["host_is_superhost"].fillna("f"))
    return df


def engineer_features(df: pd.DataFrame, top_n: int = 10) -> pd.DataFrame:
    """amenities_count plus flags for the `top_n` most common amenities."""
    if "amenities" not in df.columns:
        df["amenities_count"] = 0
        return df
    df["amenities_count"] = df["amenities"].apply(lambda v: len(parse_amenities(v)))
    df = expand_amenities(df, top_n=top_n)
    return df.drop(columns=["amenities"])


def apply_outlier_filters(df: pd.DataFrame) -> pd.DataFrame:
    ppg = df["price"] / df["accommodates"].clip(lower=1)
    mask = df["price"].between(config.PRICE_MIN, config.PRICE_MAX) & (ppg <= config.PPG_MAX)
    return df.loc[mask].copy()


def filter_short_stays(df: pd.DataFrame, max_min_nights: int = config.MAX_MIN_NIGHTS) -> pd.DataFrame:
    """Keep listings with minimum_nights <= max_min_nights (default: <28)."""
    if "minimum_nights" not in df.columns:
        return df
    return df[df["minimum_nights"] <= max_min_nights].copy()


def slim_property_types(df: pd.DataFrame, top_n: int = 8, min_share: float = 0.01) -> pd.DataFrame:
    """
    Add `property_type_slim`: the `top_n` most frequent property types that
    each cover at least `min_share` of the rows; everything else is 'Other'.
    """
    out = df.copy()
    share = out["property_type"].value_counts(normalize=True)
    keep = share[share >= min_share].head(top_n).index
    out["property_type_slim"] = out["property_type"].where(out["property_type"].isin(keep), "Other")
    out["property_type_slim"] = out["property_type_slim"].fillna("Other")
    return out


def clean_listings(raw: pd.DataFrame) -> pd.DataFrame:
    """Full listings pipeline feeding the `listings_features` table."""
    df = select_columns(raw)
    df = convert_numeric(df)
    df = handle_missing(df)
    df = engineer_features(df)
    df = apply_outlier_filters(df)
    df = filter_short_stays(df)
    df = slim_property_types(df)
    return df.reset_index(drop=True)


# --- Reviews ---

def clean_reviews(raw: pd.DataFrame) -> pd.DataFrame:
    df = raw[[c for c in REVIEW_COLUMNS if c in raw.columns]].copy()
    for col in ["listing_id", "id", "reviewer_id"]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    df["date"] = pd.to_datetime(df["date"], errors="coerce")

    df = df.dropna(subset=["listing_id", "id", "date"]).copy()
    df["listing_id"] = df["listing_id"].astype("int64")
    df["id"] = df["id"].astype("int64")
    if "reviewer_name" in df.columns:
        df["reviewer_name"] = df["reviewer_name"].fillna("Unknown")
    df["comments"] = df["comments"].fillna("")
    return df.reset_index(drop=True)


def summarize_reviews(df: pd.DataFrame) -> pd.DataFrame:
    """Per-listing review counts, first/last dates, comment length and recency."""
    summary = (
        df.groupby("listing_id")
          .agg(
              n_reviews=("id", "count"),
              first_review=("date", "min"),
              last_review=("date", "max"),
              avg_comment_length=("comments", lambda x: x.astype(str).str.len().mean()),
          )
          .reset_index()
    )
    latest_date = df["date"].max()
    summary["days_since_last_review"] = (latest_date - summary["last_review"]).dt.days.astype(np.int64)
    return summary
