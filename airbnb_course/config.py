"""
Central configuration for the course toolkit.

This module centralizes constants and derived paths used throughout the
codebase (database connection string, data and model paths, cleaning
thresholds). Paths can be redirected with environment variables so the same
session scripts work on a laptop and in the classroom VM.

Constants
---------
ENGINE_URL : str
    SQLAlchemy connection URL for the cleaned-table store. Defaults to a
    SQLite file under DATA_DIR; override with AIRBNB_DB_URL.
BASE_DIR : str
    Absolute path to the project root.
DATA_DIR, RAW_DATA_DIR, PROCESSED_DATA_DIR : str
    Paths to data folders.
LISTINGS_FILE, CALENDAR_FILE, REVIEWS_FILE : str
    Raw CSV exports.
MODELS_DIR, MODEL_FILE, METADATA_FILE : str
    Paths to model artifacts and metadata.
"""

import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.getenv("AIRBNB_DATA_DIR", os.path.join(BASE_DIR, "data"))
RAW_DATA_DIR = os.path.join(DATA_DIR, "raw")
PROCESSED_DATA_DIR = os.path.join(DATA_DIR, "processed")

LISTINGS_FILE = os.path.join(RAW_DATA_DIR, "listings.csv")
CALENDAR_FILE = os.path.join(RAW_DATA_DIR, "calendar.csv")
REVIEWS_FILE = os.path.join(RAW_DATA_DIR, "reviews.csv")

ENGINE_URL = os.getenv(
    "AIRBNB_DB_URL", "sqlite:///" + os.path.join(DATA_DIR, "airbnb.db")
)

MODELS_DIR = os.getenv("AIRBNB_MODELS_DIR", os.path.join(BASE_DIR, "models"))
MODEL_FILE = os.path.join(MODELS_DIR, "price_xgb_ttr.joblib")
METADATA_FILE = os.path.join(MODELS_DIR, "price_xgb_ttr.metadata.json")

RANDOM_SEED = 42

# Boston city hall
CITY_CENTER = (42.3601, -71.0589)

# process_listings() filters for the modeling session
MAX_ACCOMMODATES = 10
MAX_PRICE = 1000.0
KEEP_PROPERTY_TYPES = [
    "Apartment", "House", "Bed & Breakfast", "Condominium", "Loft", "Townhouse",
]
DROP_NEIGHBOURHOODS = ["Leather District", "Longwood Medical Area"]

# clean_listings() outlier filters, chosen from the cleaning notebook
PRICE_MIN = 10.0
PRICE_MAX = 2000.0
PPG_MAX = 500.0  # price per guest
MAX_MIN_NIGHTS = 27
