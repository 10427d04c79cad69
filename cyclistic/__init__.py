"""
Cyclistic Trip Cleaning Pipeline

Reconciles the Divvy 2019 Q1 and 2020 Q1 trip logs into one canonical,
analysis-ready table and drops implausible trips.
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"
