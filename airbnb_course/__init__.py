"""
airbnb_course package initializer.

Session material for the data science course, packaged as importable helpers
around the Inside Airbnb listings, calendar and reviews exports.

Modules
-------
- config: Central configuration and path constants.
- data: CSV readers, cleaning steps and the SQL/parquet store.
- features: Feature engineering for the price model.
- wrangling: Availability tables behind the dashboard.
- models: Partitions, regression, classification, clustering, evaluation
  and the price model.
- text: Lexicon-based sentiment.
- optimization: Linear, integer and conic programs written with CVXPY.
- viz: Plotly figures.
"""

__version__ = "0.1.0"
