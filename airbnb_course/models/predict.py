"""
Nightly price prediction from the persisted model.

`predict_price(input_dict)`:
- loads the model and its metadata on first use,
- aligns the input to the training features (missing ones become NaN),
- coerces numeric-like strings,
- returns the predicted nightly price.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import joblib
import numpy as np
import pandas as pd

from airbnb_course.config import METADATA_FILE, MODEL_FILE

_CACHE: Dict[tuple, tuple] = {}


def load_model(model_file: str = MODEL_FILE, metadata_file: str = METADATA_FILE):
    """(model, metadata), cached per path pair."""
    key = (str(model_file), str(metadata_file))
    if key not in _CACHE:
        if not Path(model_file).exists():
            raise RuntimeError(
                f"Model file not found at {model_file}. Run `python -m airbnb_course.models.train` first."
            )
        model = joblib.load(model_file)
        meta_path = Path(metadata_file)
        metadata = json.loads(meta_path.read_text(encoding="utf-8")) if meta_path.exists() else {}
        _CACHE[key] = (model, metadata)
    return _CACHE[key]


def _align_and_clean(input_df: pd.DataFrame, metadata: Dict[str, Any]) -> pd.DataFrame:
    features = metadata.get("features")
    if not isinstance(features, list):
        return input_df.replace({pd.NA: np.nan, None: np.nan})

    input_df = input_df.copy()
    if "property_type_slim" in features and "property_type_slim" not in input_df.columns:
        if "property_type" in input_df.columns:
            input_df["property_type_slim"] = input_df["property_type"]
    for f in features:
        if f not in input_df.columns:
            input_df[f] = np.nan

    input_df = input_df[features].replace({pd.NA: np.nan, None: np.nan})
    categorical = set(metadata.get("categorical") or [])
    for col in input_df.columns:
        if col in categorical:
            # an all-missing column would otherwise be float and trip the encoder
            input_df[col] = input_df[col].astype(object)
            continue
        input_df[col] = pd.to_numeric(input_df[col], errors="coerce").astype(float)
    return input_df


def predict_price(
    input_dict: Dict[str, Any],
    model_file: str = MODEL_FILE,
    metadata_file: str = METADATA_FILE,
) -> float:
    """
    Predict the nightly price of a single listing.

    Returns
    -------
    float
        Predicted nightly price, in the currency of the training data.
    """
    model, metadata = load_model(model_file, metadata_file)
    input_df = _align_and_clean(pd.DataFrame([input_dict]), metadata)
    return float(model.predict(input_df)[0])


if __name__ == "__main__":
    example = {
        'neighbourhood_cleansed': 'Back Bay',
        'property_type': 'Apartment',
        'room_type': 'Entire home/apt',
        'accommodates': 2,
        'bedrooms': 1,
        'beds': 1,
        'bathrooms': 1,
        'avg_comment_length': 100.0,
        'days_since_last_review': 30,
    }
    print("Predicted price:", predict_price(example))
