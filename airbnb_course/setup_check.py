"""
Pre-lecture environment check.

Run before the first session:

    python -m airbnb_course.setup_check

Each check prints a small result to compare with the slides. If a library is
missing, the corresponding import fails with the package name to install.
"""

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor

from airbnb_course.config import RANDOM_SEED
from airbnb_course.models.regression import lasso_path_summary
from airbnb_course.optimization import example_conic_model, example_model

EXPECTED_OBJECTIVE = 10.6
EXPECTED_CONIC_OBJECTIVE = 3 * np.sqrt(2)


def check_lasso() -> pd.Series:
    """First coefficient along the LASSO path of a 4x2 toy problem."""
    X = pd.DataFrame({"x1": [1, 2, 3, 4], "x2": [3, 4, 5, 6]})
    y = [2, 4, 6, 8]
    path = lasso_path_summary(X, y)
    return pd.Series(path.coefficients.loc["x1"].values, index=path.lambdas, name="x1")


def check_random_forest(seed: int = RANDOM_SEED) -> pd.DataFrame:
    """Forest on uniform noise; returns the first rows of y and its residuals."""
    rng = np.random.default_rng(seed)
    X = pd.DataFrame(rng.uniform(size=(1000, 20)), columns=[f"X{i}" for i in range(1, 21)])
    y = rng.uniform(size=1000)
    rf = RandomForestRegressor(n_estimators=5, random_state=seed).fit(X, y)
    return pd.DataFrame({"y": y, "resid": y - rf.predict(X)}).head()


def check_solver() -> float:
    sol = example_model().solve()
    return sol.objective if sol.is_optimal else float("nan")


def check_conic_solver() -> float:
    sol = example_conic_model().solve()
    return sol.objective if sol.is_optimal else float("nan")


def run_checks() -> dict:
    results = {
        "lasso": check_lasso(),
        "random_forest": check_random_forest(),
        "objective": check_solver(),
        "conic_objective": check_conic_solver(),
    }
    results["solver_ok"] = bool(
        np.isclose(results["objective"], EXPECTED_OBJECTIVE)
        and np.isclose(results["conic_objective"], EXPECTED_CONIC_OBJECTIVE, atol=1e-5)
    )
    return results


def main():
    results = run_checks()
    print("LASSO path, first coefficient:")
    print(results["lasso"].round(4).to_string())
    print("\nRandom forest residuals:")
    print(results["random_forest"].round(4).to_string(index=False))
    print(f"\nLP objective: {results['objective']:.4f} (expected {EXPECTED_OBJECTIVE})")
    print(f"SOCP objective: {results['conic_objective']:.4f} (expected {EXPECTED_CONIC_OBJECTIVE:.4f})")
    print("✅ Environment ready." if results["solver_ok"] else "❌ Solver check failed.")


if __name__ == "__main__":
    main()
