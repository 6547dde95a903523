"""
SQLAlchemy persistence for the cleaned tables.

The cleaning scripts write `listings_features` and `reviews_summary`; the
modeling code reads them back joined on the listing id. Any SQLAlchemy URL
works (SQLite by default, PostgreSQL in the classroom database).
"""

import pandas as pd
from sqlalchemy import BigInteger, create_engine, inspect

from airbnb_course import config

LISTINGS_TABLE = "listings_features"
REVIEWS_SUMMARY_TABLE = "reviews_summary"
REVIEWS_TABLE = "reviews"

JOIN_SQL = f"""
SELECT l.*, r.n_reviews, r.first_review, r.last_review,
       r.avg_comment_length, r.days_since_last_review
FROM {LISTINGS_TABLE} AS l
LEFT JOIN {REVIEWS_SUMMARY_TABLE} AS r
    ON r.listing_id = l.id
"""


def get_engine(engine_url: str = None):
    return create_engine(engine_url or config.ENGINE_URL)


def save_table(df: pd.DataFrame, name: str, engine_url: str = None) -> None:
    """Replace table `name` with the contents of `df`."""
    dtype = {"id": BigInteger()} if "id" in df.columns else None
    engine = get_engine(engine_url)
    with engine.begin() as conn:
        df.to_sql(name, conn, if_exists="replace", index=False, dtype=dtype)


def read_table(name: str, engine_url: str = None) -> pd.DataFrame:
    engine = get_engine(engine_url)
    if not inspect(engine).has_table(name):
        raise FileNotFoundError(
            f"Table {name!r} not found at {engine.url}. Run scripts/clean_listings.py "
            "and scripts/clean_reviews.py first."
        )
    with engine.connect() as conn:
        return pd.read_sql_table(name, conn)


def read_joined_listings(engine_url: str = None) -> pd.DataFrame:
    """Cleaned listings LEFT JOINed with the per-listing review summary."""
    engine = get_engine(engine_url)
    inspector = inspect(engine)
    for table in (LISTINGS_TABLE, REVIEWS_SUMMARY_TABLE):
        if not inspector.has_table(table):
            raise FileNotFoundError(
                f"Table {table!r} not found at {engine.url}. Run the cleaning scripts first."
            )
    with engine.connect() as conn:
        return pd.read_sql(JOIN_SQL, conn)
