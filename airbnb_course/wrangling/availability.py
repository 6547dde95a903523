"""
Availability tables behind the dashboard.

The question the dashboard answers: for a group of `npeople` arriving on a
given weekend and staying `ndays` nights, which of the best-reviewed
listings are bookable, and what does it cost per person per night?

Typical use
-----------
    top = top_rated_listings(listings)
    starts = stay_starts(calendar, top, year=2020, month=2, weekday="Friday")
    window = calendar_window(calendar, top, year=2020, months=(2, 3))
    stays = stay_table(starts, window)
    table = get_availability_table(stays, top, ndays=2, npeople=3)
"""

from typing import NamedTuple, Sequence

import pandas as pd

LISTING_INFO_COLUMNS = [
    "id", "name", "neighbourhood_cleansed", "property_type",
    "accommodates", "bedrooms", "bathrooms", "latitude", "longitude",
]

AVAILABILITY_COLUMNS = ["listing_id", "stay_start", "total_price", "nights"]


class DashboardData(NamedTuple):
    top_rated: pd.DataFrame
    stays: pd.DataFrame


def _require_columns(df: pd.DataFrame, columns, what: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{what} is missing columns: {missing}")


def top_rated_listings(listings: pd.DataFrame, group_col: str = "neighbourhood_cleansed") -> pd.DataFrame:
    """
    Listings whose every `review_scores_*` value is strictly above the mean of
    their neighbourhood. A missing score fails the comparison.
    """
    score_cols = [c for c in listings.columns if c.startswith("review_scores")]
    if not score_cols:
        raise ValueError("Listings have no review_scores_* columns")
    _require_columns(listings, ["id", group_col], "Listings")

    scores = listings[score_cols].apply(pd.to_numeric, errors="coerce")
    group_means = scores.groupby(listings[group_col], dropna=False).transform("mean")
    keep = (scores > group_means).all(axis=1)

    info = [c for c in LISTING_INFO_COLUMNS if c in listings.columns]
    return listings.loc[keep, info].reset_index(drop=True)


def stay_starts(
    calendar: pd.DataFrame,
    listings: pd.DataFrame,
    year: int = 2020,
    month: int = 2,
    weekday: str = "Friday",
) -> pd.DataFrame:
    """Calendar rows that can start a stay: one weekday of one month, for `listings` only."""
    _require_columns(calendar, ["listing_id", "date", "minimum_nights", "maximum_nights"], "Calendar")
    dates = pd.to_datetime(calendar["date"])
    mask = (
        (dates.dt.year == year)
        & (dates.dt.month == month)
        & (dates.dt.day_name() == weekday)
        & calendar["listing_id"].isin(listings["id"])
    )
    out = calendar.loc[mask, ["listing_id", "date", "minimum_nights", "maximum_nights"]].copy()
    out["date"] = pd.to_datetime(out["date"])
    return out.reset_index(drop=True)


def calendar_window(
    calendar: pd.DataFrame,
    listings: pd.DataFrame,
    year: int = 2020,
    months: Sequence[int] = (2, 3),
) -> pd.DataFrame:
    """Availability and adjusted nightly price over the months a stay can span."""
    _require_columns(calendar, ["listing_id", "date", "available", "adjusted_price"], "Calendar")
    dates = pd.to_datetime(calendar["date"])
    mask = (
        (dates.dt.year == year)
        & dates.dt.month.isin(list(months))
        & calendar["listing_id"].isin(listings["id"])
    )
    out = calendar.loc[mask, ["listing_id", "date", "available", "adjusted_price"]].copy()
    out["date"] = pd.to_datetime(out["date"])
    return out.reset_index(drop=True)


def stay_table(starts: pd.DataFrame, window: pd.DataFrame) -> pd.DataFrame:
    """Every (start, night) pair per listing, with the night's offset in days."""
    stays = starts.merge(window, on="listing_id", how="inner", suffixes=("_start", "_end"))
    stays = stays.rename(columns={"date_start": "stay_start", "date_end": "stay_end"})
    stays["diff_days"] = (stays["stay_end"] - stays["stay_start"]).dt.days
    return stays


def _empty_table(top_rated: pd.DataFrame) -> pd.DataFrame:
    info = [c for c in top_rated.columns if c != "id"]
    return pd.DataFrame(columns=AVAILABILITY_COLUMNS + info + ["price_per_day_person"])


def get_availability_table(
    stays: pd.DataFrame,
    top_rated: pd.DataFrame,
    ndays: int,
    npeople: int,
) -> pd.DataFrame:
    """
    Listings bookable for `ndays` nights from each stay start, for more than
    `npeople` guests.

    A stay qualifies when `ndays` lies within the listing's minimum/maximum
    nights, every one of the `ndays` nights is in the calendar window and
    available. `total_price` sums the adjusted nightly prices and
    `price_per_day_person = total_price / (ndays * npeople)`.
    """
    if ndays <= 0 or npeople <= 0 or stays.empty:
        return _empty_table(top_rated)

    in_stay = stays[
        (stays["diff_days"] >= 0)
        & (stays["diff_days"] < ndays)
        & (stays["minimum_nights"] <= ndays)
        & (stays["maximum_nights"] >= ndays)
    ]
    avail = (
        in_stay.groupby(["listing_id", "stay_start"])
               .agg(
                   total_price=("adjusted_price", "sum"),
                   available_all=("available", "all"),
                   nights=("diff_days", "nunique"),
               )
               .reset_index()
    )
    avail = avail[avail["available_all"].astype(bool) & (avail["nights"] == ndays)]
    avail = avail[AVAILABILITY_COLUMNS]

    avail = avail.merge(top_rated, left_on="listing_id", right_on="id", how="inner").drop(columns="id")
    avail = avail[avail["accommodates"] > npeople].copy()
    avail["price_per_day_person"] = avail["total_price"] / (ndays * npeople)
    if avail.empty:
        return _empty_table(top_rated)
    return avail.reset_index(drop=True)


def prepare_dashboard_data(
    listings: pd.DataFrame,
    calendar: pd.DataFrame,
    year: int = 2020,
    month: int = 2,
    weekday: str = "Friday",
    months: Sequence[int] = (2, 3),
) -> DashboardData:
    """Everything the dashboard needs before the user touches a widget."""
    top = top_rated_listings(listings)
    starts = stay_starts(calendar, top, year=year, month=month, weekday=weekday)
    window = calendar_window(calendar, top, year=year, months=months)
    return DashboardData(top_rated=top, stays=stay_table(starts, window))
