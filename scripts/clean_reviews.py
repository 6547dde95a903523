from airbnb_course.config import ENGINE_URL, REVIEWS_FILE
from airbnb_course.data.clean import clean_reviews, summarize_reviews
from airbnb_course.data.load_data import read_reviews
from airbnb_course.data.store import REVIEWS_SUMMARY_TABLE, REVIEWS_TABLE, save_table


def main():
    print(f"📥 Loading raw reviews from {REVIEWS_FILE}...")
    df = clean_reviews(read_reviews(REVIEWS_FILE))

    print(f"💾 Saving {REVIEWS_TABLE} ...")
    save_table(df, REVIEWS_TABLE, ENGINE_URL)

    print(f"🧮 Building {REVIEWS_SUMMARY_TABLE} ...")
    save_table(summarize_reviews(df), REVIEWS_SUMMARY_TABLE, ENGINE_URL)
    print(f"✅ {REVIEWS_TABLE} + {REVIEWS_SUMMARY_TABLE} ready.")


if __name__ == "__main__":
    main()
