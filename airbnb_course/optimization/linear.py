"""
Linear and mixed-integer programs written with CVXPY.

Models are written the way they read on the whiteboard:

    x = cp.Variable(name="x")
    y = cp.Variable(name="y")
    capacity = x + 5 * y <= 3
    problem = cp.Problem(cp.Maximize(5 * x + 3 * y),
                         [capacity, x >= 0, x <= 2, y >= 0, y <= 30])
    sol = Program(problem, {"capacity": capacity}).solve()
    sol.objective, sol.value("x"), sol.dual("capacity")   # 10.6, 2.0, 0.6

Continuous problems go to CVXPY's default solver and report the duals of the
named constraints. As soon as one variable is integer the problem is handed
to HiGHS through `scipy.optimize.milp` and no duals are available.
"""

from typing import Dict, Optional

import cvxpy as cp
import numpy as np

MIP_SOLVER = cp.SCIPY
OPTIMAL = (cp.OPTIMAL, cp.OPTIMAL_INACCURATE)


def _number(value):
    value = np.asarray(value, dtype=float)
    return float(value) if value.size == 1 else value


class Solution:
    def __init__(self, status: str, objective: Optional[float], values: Dict[str, object],
                 duals: Optional[Dict[str, object]], message: str = ""):
        self.status = status
        self.objective = objective
        self.values = values
        self.duals = duals
        self.message = message

    @property
    def is_optimal(self) -> bool:
        return self.status in OPTIMAL

    def _check(self):
        if not self.is_optimal:
            raise RuntimeError(f"No optimal solution available (status: {self.status}). {self.message}")

    def value(self, var):
        self._check()
        return self.values[var.name() if isinstance(var, cp.Variable) else var]

    def dual(self, name: str):
        self._check()
        if self.duals is None:
            raise RuntimeError("Duals are only available for continuous models")
        return self.duals[name]

    def __repr__(self):
        return f"Solution(status={self.status!r}, objective={self.objective})"


def solve(problem: cp.Problem, constraints: Optional[Dict[str, cp.Constraint]] = None,
          solver: Optional[str] = None, **kwargs) -> Solution:
    """
    Solve a CVXPY problem and collect the result.

    `constraints` names the constraints whose duals should be reported.
    A solver failure comes back as a `solver_error` status.
    """
    constraints = constraints or {}
    mip = problem.is_mixed_integer()
    if solver is None and mip:
        solver = MIP_SOLVER
    try:
        problem.solve(solver=solver, **kwargs)
    except cp.SolverError as exc:
        return Solution("solver_error", None, {}, None, str(exc))

    if problem.status not in OPTIMAL:
        return Solution(problem.status, None, {}, None)

    values = {v.name(): _number(v.value) for v in problem.variables()}
    duals = None
    if not mip:
        duals = {name: _number(con.dual_value) for name, con in constraints.items()}
    return Solution(problem.status, float(problem.value), values, duals)


class Program:
    """A CVXPY problem plus the constraints whose duals we want, by name."""

    def __init__(self, problem: cp.Problem, constraints: Optional[Dict[str, cp.Constraint]] = None):
        self.problem = problem
        self.constraints = dict(constraints or {})

    @property
    def variables(self) -> Dict[str, cp.Variable]:
        return {v.name(): v for v in self.problem.variables()}

    @property
    def is_mip(self) -> bool:
        return self.problem.is_mixed_integer()

    def solve(self, solver: Optional[str] = None, **kwargs) -> Solution:
        return solve(self.problem, self.constraints, solver, **kwargs)

    def __repr__(self):
        names = ", ".join(self.variables)
        return f"Program([{names}], {len(self.problem.constraints)} constraints)"


def example_model(integer: bool = False) -> Program:
    """
    max 5x + 3y  s.t.  x + 5y <= 3,  0 <= x <= 2,  0 <= y <= 30.

    The LP optimum is 10.6 at (2, 0.2); with integer y it is 10.0 at (2, 0).
    """
    x = cp.Variable(name="x")
    y = cp.Variable(name="y", integer=integer)
    capacity = x + 5 * y <= 3
    problem = cp.Problem(
        cp.Maximize(5 * x + 3 * y),
        [capacity, x >= 0, x <= 2, y >= 0, y <= 30],
    )
    return Program(problem, {"capacity": capacity})
