"""
Session 3: sentiment of reviews and listing descriptions.

    python scripts/session_sentiment.py
"""

import os

from airbnb_course.config import BASE_DIR, LISTINGS_FILE, REVIEWS_FILE
from airbnb_course.data.load_data import read_listings, read_reviews
from airbnb_course.models.classification import fit_logistic
from airbnb_course.text import sentiment
from airbnb_course.viz.plots import sentiment_box_chart

REPORTS_DIR = os.path.join(BASE_DIR, "reports")


def main():
    lexicon = sentiment.load_lexicon()
    print(sentiment.lexicon_value_counts(lexicon).to_string(index=False))

    reviews = read_reviews(REVIEWS_FILE)
    listings = read_listings(LISTINGS_FILE)

    scored = sentiment.add_sentiment_feature(reviews, "id", "comments", lexicon, name="reviewer_sentiment")
    top = sentiment.most_extreme(scored, "reviewer_sentiment", n=20)
    print("\nMost positive reviews:")
    print(top["comments"].str.slice(0, 100).to_string())

    worst = sentiment.most_extreme(scored, "reviewer_sentiment", n=20, ascending=True)
    print("\nMost negative reviews (note the languages):")
    print(worst["comments"].str.slice(0, 100).to_string())

    english = sentiment.filter_language(scored, "comments", "en")
    print(f"\n{len(english):,} of {len(scored):,} reviews are in English")
    worst = sentiment.most_extreme(english, "reviewer_sentiment", n=20, ascending=True)
    print("Most negative English reviews:")
    print(worst["comments"].str.slice(0, 100).to_string())

    features = sentiment.join_review_features(reviews, listings, lexicon, language="en")
    print(f"\n{len(features):,} scored reviews joined to their listings")

    os.makedirs(REPORTS_DIR, exist_ok=True)
    fig = sentiment_box_chart(features, "month", title="Reviewer sentiment by month")
    fig.write_html(os.path.join(REPORTS_DIR, "sentiment_by_month.html"))

    # which reviews are disasters, and can listing features predict them?
    features = sentiment.flag_disasters(features, threshold=1.0)
    print(f"Disaster rate: {features['is_disaster'].mean():.3f}")
    model = fit_logistic("is_disaster ~ review_scores_rating + host_is_superhost", features)
    print(model.summary())


if __name__ == "__main__":
    main()
