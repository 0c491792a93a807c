"""Data acquisition modules."""
