import argparse
import json

from airbnb_course.data.load_data import load_data
from airbnb_course.models.train import train_price_model


def main():
    parser = argparse.ArgumentParser(description="Train the nightly price model.")
    parser.add_argument("--no-cache", action="store_true", help="re-read the SQL store instead of the parquet cache")
    parser.add_argument("--n-iter", type=int, default=40, help="RandomizedSearchCV iterations")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    df = load_data(use_cache=not args.no_cache)
    _, meta = train_price_model(df, seed=args.seed, n_iter=args.n_iter)
    print(json.dumps(meta, indent=2))


if __name__ == "__main__":
    main()
