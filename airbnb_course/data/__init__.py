"""
Data package for reading, cleaning and storing the Airbnb exports.

Raw CSVs are read with pandas, cleaned tables are persisted through
SQLAlchemy, and the joined modeling table is cached as parquet.
"""
