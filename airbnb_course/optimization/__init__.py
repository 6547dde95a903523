"""Linear, integer and conic programming."""

from airbnb_course.optimization.conic import example_conic_model, nearest_feasible_point  # noqa: F401
from airbnb_course.optimization.linear import Program, Solution, example_model, solve  # noqa: F401
