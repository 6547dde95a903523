"""
Random partitions of a dataset into training/validation/testing subsets.
"""

from typing import Dict

import numpy as np
import pandas as pd

from airbnb_course.config import RANDOM_SEED

DEFAULT_PROPORTIONS = {"train": 0.6, "val": 0.2, "test": 0.2}


def resample_partition(
    df: pd.DataFrame,
    proportions: Dict[str, float] = None,
    seed: int = RANDOM_SEED,
) -> Dict[str, pd.DataFrame]:
    """
    Randomly partition `df` into disjoint named subsets.

    Parameters
    ----------
    df : pd.DataFrame
    proportions : dict
        Subset name -> share of rows, e.g. {"train": .6, "val": .2, "test": .2}.
        Shares must be positive and sum to one.
    seed : int

    Returns
    -------
    dict
        Subset name -> DataFrame. Every row of `df` lands in exactly one
        subset; rows keep their original order and index within a subset.
    """
    proportions = proportions or DEFAULT_PROPORTIONS
    shares = np.array(list(proportions.values()), dtype=float)
    if (shares <= 0).any():
        raise ValueError(f"Partition proportions must be positive, got {proportions}")
    if not np.isclose(shares.sum(), 1.0):
        raise ValueError(f"Partition proportions must sum to 1, got {shares.sum():.3f}")

    n = len(df)
    perm = np.random.default_rng(seed).permutation(n)
    bounds = np.round(n * np.cumsum(shares)).astype(int)
    bounds[-1] = n
    starts = np.concatenate([[0], bounds[:-1]])

    return {
        name: df.iloc[np.sort(perm[lo:hi])]
        for name, lo, hi in zip(proportions, starts, bounds)
    }


def sample_split(y, split_ratio: float = 0.7, seed: int = RANDOM_SEED) -> pd.Series:
    """
    Boolean train mask that keeps the ratio of each label value.

    Within every distinct value of `y`, round(count * split_ratio) rows are
    marked True. When `y` has more distinct values than half its length
    (e.g. a continuous price) it is treated as a single group.
    """
    if not 0 < split_ratio < 1:
        raise ValueError(f"split_ratio must be in (0, 1), got {split_ratio}")
    y = pd.Series(y)
    rng = np.random.default_rng(seed)
    mask = pd.Series(False, index=y.index)

    if y.nunique(dropna=False) > len(y) / 2:
        groups = [np.arange(len(y))]
    else:
        codes = pd.factorize(y, use_na_sentinel=False)[0]
        groups = [np.flatnonzero(codes == c) for c in np.unique(codes)]

    for positions in groups:
        n_true = int(round(len(positions) * split_ratio))
        chosen = rng.choice(positions, size=n_true, replace=False)
        mask.iloc[chosen] = True
    return mask
