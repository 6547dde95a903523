"""
tests/test_availability.py — Top-rated listings and bookable stays.
"""

from __future__ import annotations

import pandas as pd
import pytest

from airbnb_course.wrangling.availability import (
    calendar_window,
    get_availability_table,
    prepare_dashboard_data,
    stay_starts,
    stay_table,
    top_rated_listings,
)

FRIDAYS = pd.to_datetime(["2020-02-07", "2020-02-14", "2020-02-21", "2020-02-28"])


@pytest.fixture
def dashboard(stay_listings, stay_calendar):
    return prepare_dashboard_data(stay_listings, stay_calendar)


class TestTopRated:
    def test_beats_neighbourhood_mean_on_every_score(self, stay_listings):
        top = top_rated_listings(stay_listings)
        assert sorted(top["id"]) == [1, 5]
        assert not any(c.startswith("review_scores") for c in top.columns)

    def test_missing_score_fails(self, stay_listings):
        listings = stay_listings.copy()
        listings.loc[listings["id"] == 5, "review_scores_cleanliness"] = None
        assert top_rated_listings(listings)["id"].tolist() == [1]

    def test_missing_neighbourhood_is_its_own_group(self, stay_listings):
        extra = pd.DataFrame({
            "id": [6, 7],
            "neighbourhood_cleansed": [None, None],
            "review_scores_rating": [97.0, 85.0],
            "review_scores_cleanliness": [10.0, 9.0],
        })
        listings = pd.concat([stay_listings, extra], ignore_index=True)
        assert sorted(top_rated_listings(listings)["id"]) == [1, 5, 6]

    def test_needs_score_columns(self, stay_listings):
        with pytest.raises(ValueError, match="review_scores"):
            top_rated_listings(stay_listings.drop(columns=["review_scores_rating", "review_scores_cleanliness"]))


class TestStayTable:
    def test_starts_are_fridays_of_february(self, stay_listings, stay_calendar):
        top = top_rated_listings(stay_listings)
        starts = stay_starts(stay_calendar, top)
        assert len(starts) == 8
        assert set(starts["date"]) == set(FRIDAYS)
        assert set(starts["listing_id"]) == {1, 5}

    def test_window_covers_both_months(self, stay_listings, stay_calendar):
        top = top_rated_listings(stay_listings)
        window = calendar_window(stay_calendar, top)
        assert window["date"].min() == pd.Timestamp("2020-02-01")
        assert window["date"].max() == pd.Timestamp("2020-03-31")

    def test_diff_days(self, dashboard):
        stays = dashboard.stays
        assert {"stay_start", "stay_end", "diff_days", "adjusted_price"} <= set(stays.columns)
        row = stays[(stays["stay_start"] == FRIDAYS[0]) & (stays["stay_end"] == pd.Timestamp("2020-02-09"))]
        assert row["diff_days"].unique().tolist() == [2]

    def test_calendar_requires_columns(self, stay_listings, stay_calendar):
        with pytest.raises(ValueError, match="minimum_nights"):
            stay_starts(stay_calendar.drop(columns="minimum_nights"), stay_listings)


class TestAvailabilityTable:
    def test_one_night_for_two(self, dashboard):
        table = get_availability_table(dashboard.stays, dashboard.top_rated, ndays=1, npeople=2)
        # listing 5 only sleeps two and needs two nights
        assert set(table["listing_id"]) == {1}
        assert sorted(table["stay_start"]) == list(FRIDAYS)
        assert (table["total_price"] == 100.0).all()
        assert (table["price_per_day_person"] == 50.0).all()

    def test_blocked_night_removes_the_weekend(self, dashboard):
        table = get_availability_table(dashboard.stays, dashboard.top_rated, ndays=2, npeople=1)
        loft = table[table["listing_id"] == 1]
        studio = table[table["listing_id"] == 5]
        assert pd.Timestamp("2020-02-14") not in set(loft["stay_start"])
        assert len(loft) == 3
        assert len(studio) == 4
        assert (loft["total_price"] == 200.0).all()
        assert (studio["price_per_day_person"] == 50.0).all()

    def test_incomplete_window(self, stay_listings, stay_calendar):
        data = prepare_dashboard_data(stay_listings, stay_calendar, months=(2,))
        table = get_availability_table(data.stays, data.top_rated, ndays=3, npeople=1)
        # Feb 28 + 3 nights runs into March, which is outside the window
        assert pd.Timestamp("2020-02-28") not in set(table["stay_start"])
        assert len(table) == 5

    def test_respects_maximum_nights(self, dashboard):
        assert get_availability_table(dashboard.stays, dashboard.top_rated, ndays=11, npeople=1).empty

    @pytest.mark.parametrize("ndays,npeople", [(0, 1), (2, 0), (1, 8)])
    def test_empty_results_keep_columns(self, dashboard, ndays, npeople):
        table = get_availability_table(dashboard.stays, dashboard.top_rated, ndays=ndays, npeople=npeople)
        assert table.empty
        assert {"listing_id", "stay_start", "total_price", "price_per_day_person", "latitude"} <= set(table.columns)

    def test_joined_listing_attributes(self, dashboard):
        table = get_availability_table(dashboard.stays, dashboard.top_rated, ndays=1, npeople=1)
        assert {"name", "latitude", "longitude", "accommodates"} <= set(table.columns)
        assert "id" not in table.columns

    def test_stay_table_is_reusable(self, stay_listings, stay_calendar):
        top = top_rated_listings(stay_listings)
        stays = stay_table(stay_starts(stay_calendar, top), calendar_window(stay_calendar, top))
        assert len(get_availability_table(stays, top, ndays=1, npeople=1)) == 4
