"""
Lexicon-based sentiment of free text (reviews, listing descriptions).

A text's sentiment is the mean lexicon score of its words; words the lexicon
does not know are ignored, and a text with no scored words has no sentiment
(NaN). The default lexicon is NLTK's VADER word list.
"""

from typing import Dict, Optional

import nltk
import pandas as pd
from langdetect import DetectorFactory, detect
from langdetect.lang_detect_exception import LangDetectException
from nltk.tokenize import RegexpTokenizer

_TOKENIZER = RegexpTokenizer(r"[a-z']+")

# deterministic detection
DetectorFactory.seed = 0

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

Lexicon = Dict[str, float]


def load_lexicon() -> Lexicon:
    """VADER word -> valence mapping, downloading the lexicon on first use."""
    from nltk.sentiment.vader import SentimentIntensityAnalyzer

    try:
        analyzer = SentimentIntensityAnalyzer()
    except LookupError:
        nltk.download("vader_lexicon", quiet=True)
        analyzer = SentimentIntensityAnalyzer()
    return dict(analyzer.lexicon)


def detect_language(text) -> Optional[str]:
    """ISO 639-1 code of the language of `text`, or None when it cannot tell."""
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        return detect(text)
    except LangDetectException:
        return None


def filter_language(df: pd.DataFrame, column: str = "comments", lang: str = "en") -> pd.DataFrame:
    """Rows whose `column` is written in `lang`, with the detected `language` added."""
    out = df.copy()
    out["language"] = out[column].map(detect_language)
    return out[out["language"] == lang]


def lexicon_frame(lexicon: Lexicon) -> pd.DataFrame:
    return pd.DataFrame({"word": list(lexicon), "value": list(lexicon.values())})


def lexicon_value_counts(lexicon: Lexicon) -> pd.DataFrame:
    """Number of words per sentiment value."""
    return (
        lexicon_frame(lexicon)
        .groupby("value")
        .size()
        .rename("n")
        .reset_index()
    )


def tokenize(df: pd.DataFrame, id_col: str, text_col: str) -> pd.DataFrame:
    """One row per (id, lowercase word); punctuation and digits are dropped."""
    words = df[text_col].fillna("").astype(str).str.lower().map(_TOKENIZER.tokenize)
    long = pd.DataFrame({id_col: df[id_col].to_numpy(), "word": words.to_numpy()}).explode("word")
    long["word"] = long["word"].str.strip("'")
    return long[long["word"].notna() & (long["word"] != "")].reset_index(drop=True)


def add_sentiment_feature(
    df: pd.DataFrame,
    id_col: str,
    text_col: str,
    lexicon: Optional[Lexicon] = None,
    name: str = "sentiment",
) -> pd.DataFrame:
    """
    Left-join the mean lexicon score of `text_col` onto `df` as column `name`.
    """
    lexicon = lexicon if lexicon is not None else load_lexicon()
    tokens = tokenize(df, id_col, text_col)
    tokens["value"] = tokens["word"].map(lexicon)
    scores = tokens.groupby(id_col)["value"].mean().rename(name).reset_index()
    out = df.drop(columns=[name], errors="ignore")
    return out.merge(scores, on=id_col, how="left")


def most_extreme(df: pd.DataFrame, column: str = "sentiment", n: int = 20, ascending: bool = False) -> pd.DataFrame:
    """The `n` rows with the highest (or lowest) sentiment."""
    return df.dropna(subset=[column]).sort_values(column, ascending=ascending).head(n)


def flag_disasters(df: pd.DataFrame, column: str = "reviewer_sentiment", threshold: float = 1.0) -> pd.DataFrame:
    """`is_disaster` marks texts whose sentiment falls below `threshold`."""
    out = df.copy()
    out["is_disaster"] = (out[column] < threshold).astype(int)
    return out


def join_review_features(
    reviews: pd.DataFrame,
    listings: pd.DataFrame,
    lexicon: Optional[Lexicon] = None,
    language: Optional[str] = None,
) -> pd.DataFrame:
    """
    Reviews with reviewer sentiment, joined to their listing's attributes and
    description sentiment. Reviews without a scored word, and listings
    without complete review scores, are dropped. Adds the review `month`.

    With `language` set (e.g. "en"), only reviews written in it are kept.
    """
    lexicon = lexicon if lexicon is not None else load_lexicon()
    if language is not None:
        reviews = filter_language(reviews, "comments", language)
    scored = add_sentiment_feature(reviews, "id", "comments", lexicon, name="reviewer_sentiment")
    scored = scored.dropna(subset=["reviewer_sentiment"])

    described = listings
    if "description" in listings.columns:
        described = add_sentiment_feature(listings, "id", "description", lexicon, name="description_sentiment")

    features = scored.merge(described, left_on="listing_id", right_on="id", how="left",
                            suffixes=("", "_listing"))
    score_cols = [c for c in features.columns if "scores" in c]
    features = features.dropna(subset=score_cols)
    features["month"] = pd.Categorical(
        pd.to_datetime(features["date"]).dt.strftime("%b"), categories=MONTHS, ordered=True
    )
    return features.reset_index(drop=True)
