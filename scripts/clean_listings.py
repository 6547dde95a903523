from airbnb_course.config import ENGINE_URL, LISTINGS_FILE
from airbnb_course.data.clean import clean_listings
from airbnb_course.data.load_data import read_listings
from airbnb_course.data.store import LISTINGS_TABLE, save_table


def main():
    print(f"Loading raw listings from {LISTINGS_FILE}...")
    raw = read_listings(LISTINGS_FILE, parse_prices=False)
    df = clean_listings(raw)
    print(f"Saving {len(df):,} of {len(raw):,} listings to {LISTINGS_TABLE}...")
    save_table(df, LISTINGS_TABLE, ENGINE_URL)
    print("✅ Done.")


if __name__ == "__main__":
    main()
