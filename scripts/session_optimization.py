"""
Session 8: linear, integer and conic programming.

    python scripts/session_optimization.py
"""

import cvxpy as cp

from airbnb_course.optimization import Program, example_conic_model, example_model


def report(name, sol):
    print(f"\n{name}: {sol.status}")
    if not sol.is_optimal:
        return
    print(f"  objective = {sol.objective:.4f}")
    for var, value in sol.values.items():
        print(f"  {var} = {value}")


def main():
    sol = example_model().solve()
    report("LP", sol)
    print(f"  dual(capacity) = {sol.dual('capacity'):.4f}")

    report("MIP (integer y)", example_model(integer=True).solve())

    # a listing portfolio: pick how many of each unit type to furnish on a budget
    studio = cp.Variable(name="studio", integer=True)
    family = cp.Variable(name="family", integer=True)
    budget = 3000 * studio + 7000 * family <= 40000
    staff = studio + family <= 8
    furnish = cp.Problem(
        cp.Maximize(120 * studio + 260 * family),
        [budget, staff, studio >= 0, studio <= 10, family >= 0, family <= 6],
    )
    report("Furnishing plan", Program(furnish, {"budget": budget, "staff": staff}).solve())

    sol = example_conic_model().solve()
    report("SOCP (nearest feasible point)", sol)
    print(f"  dual(region) = {sol.dual('region').round(4)}")


if __name__ == "__main__":
    main()
