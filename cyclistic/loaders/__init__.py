"""Output persistence"""

from .trip_writer import TripWriter

__all__ = ['TripWriter']
