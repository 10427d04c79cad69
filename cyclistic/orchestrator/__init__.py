"""Pipeline orchestration"""

from .cleaning_pipeline import CleaningPipeline, CleaningResult, CleanedTrips

__all__ = ['CleaningPipeline', 'CleaningResult', 'CleanedTrips']
