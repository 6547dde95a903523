"""
tests/conftest.py — Shared pytest fixtures.

Provides:
  raw_listings        — listings as they come out of the Inside Airbnb CSV
  raw_reviews         — reviews for the first twenty listings
  lexicon             — a tiny word -> valence map (no NLTK download)
  stay_listings       — five hand-made listings for the availability tables
  stay_calendar       — Feb/Mar 2020 calendar for those listings
  sqlite_url          — SQLAlchemy URL of a throwaway SQLite file
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

NEIGHBOURHOODS = ["Back Bay", "South End", "Fenway", "Jamaica Plain"]
PROPERTY_TYPES = ["Apartment", "House", "Condominium", "Loft"]
ROOM_TYPES = ["Entire home/apt", "Private room"]
DESCRIPTIONS = [
    "Lovely clean apartment near the park.",
    "Great location, nice views.",
    "Quiet room.",
    "Terrible street noise but a great price.",
]
COMMENTS = [
    "Great place, very clean!",
    "Lovely host and a nice flat.",
    "Dirty bathroom, terrible stay.",
    "Sehr gut",
    "Nice and clean.",
]
SCORE_COLUMNS = [
    "review_scores_accuracy", "review_scores_cleanliness", "review_scores_checkin",
    "review_scores_communication", "review_scores_location", "review_scores_value",
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _money(value: float) -> str:
    return f"${value:,.2f}"


def _amenities(rng) -> str:
    names = ["Wifi", "Heating"]
    if rng.random() < 0.5:
        names.append("Elevator in Building")
    if rng.random() < 0.6:
        names.append("Air conditioning")
    if rng.random() < 0.3:
        names.append("TV")
    return "{" + ",".join(f'"{n}"' if " " in n else n for n in names) + "}"


def _listing(i: int, rng, **overrides) -> dict:
    accommodates = int(rng.integers(1, 9))
    room_type = ROOM_TYPES[int(rng.integers(0, 2))]
    price = 45 + 38 * accommodates + (60 if room_type == ROOM_TYPES[0] else 0) + rng.normal(0, 15)
    row = {
        "id": i,
        "name": f"Listing {i}",
        "description": DESCRIPTIONS[i % len(DESCRIPTIONS)],
        "neighbourhood_cleansed": NEIGHBOURHOODS[i % len(NEIGHBOURHOODS)],
        "latitude": 42.30 + rng.uniform(0, 0.1),
        "longitude": -71.12 + rng.uniform(0, 0.1),
        "property_type": PROPERTY_TYPES[int(rng.integers(0, len(PROPERTY_TYPES)))],
        "room_type": room_type,
        "accommodates": accommodates,
        "bedrooms": float(max(1, accommodates // 2)),
        "beds": float(max(1, accommodates // 2)),
        "bathrooms": float(rng.choice([1.0, 1.5, 2.0])),
        "amenities": _amenities(rng),
        "price": _money(price),
        "minimum_nights": int(rng.integers(1, 4)),
        "maximum_nights": 30,
        "host_is_superhost": "t" if rng.random() < 0.3 else "f",
        "review_scores_rating": float(rng.integers(80, 101)),
        "reviews_per_month": round(float(rng.uniform(0.1, 4.0)), 2),
    }
    for col in SCORE_COLUMNS:
        row[col] = float(rng.integers(7, 11))
    row.update(overrides)
    return row


# ---------------------------------------------------------------------------
# Listings and reviews
# ---------------------------------------------------------------------------

@pytest.fixture
def raw_listings() -> pd.DataFrame:
    """
    100 ordinary listings plus five that the cleaning steps should treat
    specially: a boat, a Leather District flat, a 12-guest house, a $1,500
    night and a 30-night minimum stay. Listings 5, 17 and 33 have no
    review_scores_value.
    """
    rng = np.random.default_rng(7)
    rows = [_listing(i, rng) for i in range(1, 101)]
    for i in (5, 17, 33):
        rows[i - 1]["review_scores_value"] = np.nan
    rows += [
        _listing(101, rng, property_type="Boat", accommodates=2, price="$150.00"),
        _listing(102, rng, property_type="Apartment", neighbourhood_cleansed="Leather District", price="$200.00"),
        _listing(103, rng, property_type="House", accommodates=12, price="$600.00"),
        _listing(104, rng, property_type="Apartment", accommodates=4, price="$1,500.00"),
        _listing(105, rng, property_type="Apartment", accommodates=2, price="$120.00", minimum_nights=30),
    ]
    return pd.DataFrame(rows)


@pytest.fixture
def raw_reviews() -> pd.DataFrame:
    """Three reviews per listing for listings 1..20, dated through 2019."""
    rows = []
    review_id = 1000
    for listing_id in range(1, 21):
        for k in range(3):
            rows.append({
                "listing_id": listing_id,
                "id": review_id,
                "date": pd.Timestamp("2019-01-15") + pd.Timedelta(days=17 * (review_id - 1000)),
                "reviewer_id": 500 + review_id % 37,
                "reviewer_name": None if review_id % 11 == 0 else f"Guest {review_id}",
                "comments": COMMENTS[review_id % len(COMMENTS)],
            })
            review_id += 1
    return pd.DataFrame(rows)


@pytest.fixture
def lexicon() -> dict:
    return {
        "great": 3.1, "lovely": 2.8, "clean": 1.9, "nice": 1.8,
        "dirty": -1.9, "terrible": -2.5, "noise": -0.5,
    }


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------

@pytest.fixture
def stay_listings() -> pd.DataFrame:
    """
    In neighbourhood A, listings 1 and 5 beat the neighbourhood mean on every
    score; 2 and 3 do not. Listing 4 is alone in B and equals its own mean.
    """
    return pd.DataFrame({
        "id": [1, 2, 3, 4, 5],
        "name": ["Loft", "Flat", "Room", "House", "Studio"],
        "neighbourhood_cleansed": ["A", "A", "A", "B", "A"],
        "property_type": ["Loft", "Apartment", "Apartment", "House", "Apartment"],
        "accommodates": [4, 6, 6, 8, 2],
        "latitude": [42.35, 42.34, 42.33, 42.36, 42.35],
        "longitude": [-71.07, -71.08, -71.06, -71.05, -71.07],
        "review_scores_rating": [95.0, 90.0, 80.0, 99.0, 96.0],
        "review_scores_cleanliness": [10.0, 9.0, 8.0, 10.0, 10.0],
    })


@pytest.fixture
def stay_calendar() -> pd.DataFrame:
    """
    Every night of Feb and Mar 2020 for listings 1, 2, 4 and 5, all
    available except listing 1 on Saturday 2020-02-15. Listing 5 needs a
    two-night minimum.
    """
    nights = pd.date_range("2020-02-01", "2020-03-31", freq="D")
    prices = {1: 100.0, 2: 80.0, 4: 200.0, 5: 50.0}
    frames = []
    for listing_id, price in prices.items():
        frame = pd.DataFrame({
            "listing_id": listing_id,
            "date": nights,
            "available": True,
            "price": price,
            "adjusted_price": price,
            "minimum_nights": 2 if listing_id == 5 else 1,
            "maximum_nights": 10,
        })
        frames.append(frame)
    calendar = pd.concat(frames, ignore_index=True)
    blocked = (calendar["listing_id"] == 1) & (calendar["date"] == pd.Timestamp("2020-02-15"))
    calendar.loc[blocked, "available"] = False
    return calendar


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return "sqlite:///" + str(tmp_path / "airbnb.db")
