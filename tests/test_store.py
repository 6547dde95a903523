"""
tests/test_store.py — SQLAlchemy persistence of the cleaned tables.
"""

from __future__ import annotations

import pandas as pd
import pytest

from airbnb_course.data.store import (
    LISTINGS_TABLE,
    REVIEWS_SUMMARY_TABLE,
    read_joined_listings,
    read_table,
    save_table,
)


@pytest.fixture
def listings() -> pd.DataFrame:
    return pd.DataFrame({"id": [1, 2, 3], "price": [100.0, 80.0, 120.0], "room_type": ["a", "b", "a"]})


@pytest.fixture
def summary() -> pd.DataFrame:
    return pd.DataFrame({
        "listing_id": [1, 3],
        "n_reviews": [4, 1],
        "first_review": pd.to_datetime(["2019-01-01", "2019-06-01"]),
        "last_review": pd.to_datetime(["2019-12-01", "2019-06-01"]),
        "avg_comment_length": [120.5, 30.0],
        "days_since_last_review": [0, 183],
    })


class TestTables:
    def test_round_trip(self, listings, sqlite_url):
        save_table(listings, LISTINGS_TABLE, sqlite_url)
        back = read_table(LISTINGS_TABLE, sqlite_url)
        pd.testing.assert_frame_equal(back, listings, check_dtype=False)

    def test_save_replaces(self, listings, sqlite_url):
        save_table(listings, LISTINGS_TABLE, sqlite_url)
        save_table(listings.head(1), LISTINGS_TABLE, sqlite_url)
        assert len(read_table(LISTINGS_TABLE, sqlite_url)) == 1

    def test_missing_table(self, sqlite_url):
        with pytest.raises(FileNotFoundError, match="clean_listings"):
            read_table(LISTINGS_TABLE, sqlite_url)


class TestJoinedListings:
    def test_left_join_keeps_unreviewed_listings(self, listings, summary, sqlite_url):
        save_table(listings, LISTINGS_TABLE, sqlite_url)
        save_table(summary, REVIEWS_SUMMARY_TABLE, sqlite_url)
        joined = read_joined_listings(sqlite_url).set_index("id")
        assert len(joined) == 3
        assert joined.loc[1, "n_reviews"] == 4
        assert pd.isna(joined.loc[2, "n_reviews"])
        assert "listing_id" not in joined.columns

    def test_requires_both_tables(self, listings, sqlite_url):
        save_table(listings, LISTINGS_TABLE, sqlite_url)
        with pytest.raises(FileNotFoundError, match=REVIEWS_SUMMARY_TABLE):
            read_joined_listings(sqlite_url)
