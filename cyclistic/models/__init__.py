"""Data models"""

from .trip_record import (
    CanonicalTrip, SchemaVariant, MemberType, TimezonePolicy,
    CANONICAL_COLUMNS, DERIVED_COLUMNS, OUTPUT_COLUMNS,
    EXPECTED_COLUMNS, COLUMN_MAPPINGS, USER_TYPE_VOCABULARIES,
    WEEKDAY_NAMES, MONTH_LABELS
)

__all__ = [
    'CanonicalTrip', 'SchemaVariant', 'MemberType', 'TimezonePolicy',
    'CANONICAL_COLUMNS', 'DERIVED_COLUMNS', 'OUTPUT_COLUMNS',
    'EXPECTED_COLUMNS', 'COLUMN_MAPPINGS', 'USER_TYPE_VOCABULARIES',
    'WEEKDAY_NAMES', 'MONTH_LABELS'
]
