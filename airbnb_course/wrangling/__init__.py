"""Table wrangling for the dashboard session."""
