"""Source file extraction"""

from .trip_reader import TripFileReader

__all__ = ['TripFileReader']
