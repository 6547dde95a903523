"""
Second-order cone programs.

`nearest_feasible_point` is the classic SOCP: the point of a polyhedron
`A p <= b` closest (in Euclidean distance) to a target. With the target at a
landmark and the polyhedron a neighbourhood, it answers "where is the
nearest place we are allowed to be".
"""

import cvxpy as cp
import numpy as np

from airbnb_course.optimization.linear import Program


def nearest_feasible_point(target, A, b, name: str = "p") -> Program:
    """min ||p - target||_2  s.t.  A p <= b."""
    target = np.asarray(target, dtype=float)
    A = np.atleast_2d(np.asarray(A, dtype=float))
    b = np.asarray(b, dtype=float)
    if A.shape != (len(b), len(target)):
        raise ValueError(f"A must be {len(b)}x{len(target)}, got {A.shape[0]}x{A.shape[1]}")

    p = cp.Variable(len(target), name=name)
    region = A @ p <= b
    problem = cp.Problem(cp.Minimize(cp.norm(p - target, 2)), [region])
    return Program(problem, {"region": region})


def example_conic_model() -> Program:
    """
    Closest point to (3, 4) with p1 + p2 <= 1 and p >= 0.

    The optimum is 3 * sqrt(2) at (0, 1).
    """
    A = [[1, 1], [-1, 0], [0, -1]]
    return nearest_feasible_point([3, 4], A, [1, 0, 0])
