"""Table transforms: normalize, merge, derive, filter"""

from .normalizer import normalize_table, recode_member_casual
from .merger import merge_tables, count_duplicate_ride_ids
from .deriver import derive_fields, parse_timestamps
from .validity_filter import ValidityRules, filter_valid_trips, exclusion_counts

__all__ = [
    'normalize_table', 'recode_member_casual',
    'merge_tables', 'count_duplicate_ride_ids',
    'derive_fields', 'parse_timestamps',
    'ValidityRules', 'filter_valid_trips', 'exclusion_counts'
]
