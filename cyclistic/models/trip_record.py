# cyclistic/models/trip_record.py
"""
Data models for Divvy/Cyclistic trip records

Holds the static tables that describe both raw schema variants, the
canonical trip record they are mapped into, and the locale-independent
label tables used for derived calendar fields.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any, List, Mapping

import pandas as pd

from cyclistic.utils.exceptions import ConfigurationError, SchemaError, VocabularyError


class SchemaVariant(Enum):
    """Raw trip log layouts understood by the pipeline"""
    DIVVY_2019 = "divvy_2019"  # variant A: trip_id/start_time/usertype...
    DIVVY_2020 = "divvy_2020"  # variant B: ride_id/started_at/member_casual...

    @classmethod
    def from_value(cls, value) -> 'SchemaVariant':
        """
        Resolve a variant from its value, its name or the short a/b alias

        Raises:
            ConfigurationError: If the value names no known variant
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        for variant in cls:
            if key in (variant.value, variant.name.lower()):
                return variant
        if key in _VARIANT_ALIASES:
            return _VARIANT_ALIASES[key]

        raise ConfigurationError(
            f"Unknown schema variant: {value!r}",
            context={'known_variants': [v.value for v in cls]}
        )


_VARIANT_ALIASES = {
    'a': SchemaVariant.DIVVY_2019,
    'b': SchemaVariant.DIVVY_2020,
}


class MemberType(Enum):
    """Canonical rider categories"""
    MEMBER = "member"
    CASUAL = "casual"


class TimezonePolicy(Enum):
    """How zone-less timestamp strings are interpreted"""
    ASSUME_UTC = "assume-utc"
    ASSUME_LOCAL = "assume-local"

    @classmethod
    def from_value(cls, value) -> 'TimezonePolicy':
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower().replace('_', '-')
        for policy in cls:
            if key == policy.value:
                return policy

        raise ConfigurationError(
            f"Unknown time zone policy: {value!r}",
            context={'known_policies': [p.value for p in cls]}
        )


CANONICAL_COLUMNS: List[str] = [
    'ride_id',
    'started_at',
    'ended_at',
    'start_station_name',
    'end_station_name',
    'member_casual',
]

DERIVED_COLUMNS: List[str] = [
    'ride_length_sec',
    'ride_length_min',
    'day_of_week',
    'day_name',
    'start_hour',
    'date',
    'month',
]

OUTPUT_COLUMNS: List[str] = CANONICAL_COLUMNS + DERIVED_COLUMNS

# Full raw headers as published for each quarter; extra columns are tolerated
EXPECTED_COLUMNS: Dict[SchemaVariant, List[str]] = {
    SchemaVariant.DIVVY_2019: [
        'trip_id', 'start_time', 'end_time', 'bikeid', 'tripduration',
        'from_station_id', 'from_station_name', 'to_station_id',
        'to_station_name', 'usertype', 'gender', 'birthyear',
    ],
    SchemaVariant.DIVVY_2020: [
        'ride_id', 'rideable_type', 'started_at', 'ended_at',
        'start_station_name', 'start_station_id', 'end_station_name',
        'end_station_id', 'member_casual',
    ],
}

COLUMN_MAPPINGS: Dict[SchemaVariant, Dict[str, str]] = {
    SchemaVariant.DIVVY_2019: {
        'trip_id': 'ride_id',
        'start_time': 'started_at',
        'end_time': 'ended_at',
        'from_station_name': 'start_station_name',
        'to_station_name': 'end_station_name',
        'usertype': 'member_casual',
    },
    SchemaVariant.DIVVY_2020: {column: column for column in CANONICAL_COLUMNS},
}

USER_TYPE_VOCABULARIES: Dict[SchemaVariant, Dict[str, str]] = {
    SchemaVariant.DIVVY_2019: {
        'Subscriber': MemberType.MEMBER.value,
        'Customer': MemberType.CASUAL.value,
    },
    SchemaVariant.DIVVY_2020: {
        'member': MemberType.MEMBER.value,
        'casual': MemberType.CASUAL.value,
    },
}

# Keyed by pandas dayofweek (Monday=0)
WEEKDAY_NAMES: Dict[int, str] = {
    0: 'Monday',
    1: 'Tuesday',
    2: 'Wednesday',
    3: 'Thursday',
    4: 'Friday',
    5: 'Saturday',
    6: 'Sunday',
}

MONTH_LABELS: List[str] = [
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec',
]


def user_type_column(variant: SchemaVariant) -> str:
    """Raw column holding the user category for a variant"""
    for raw_name, canonical_name in COLUMN_MAPPINGS[variant].items():
        if canonical_name == 'member_casual':
            return raw_name
    raise KeyError(variant)


def missing_columns(columns, variant: SchemaVariant) -> List[str]:
    """Expected columns of ``variant`` absent from ``columns``, in header order"""
    present = set(columns)
    return [column for column in EXPECTED_COLUMNS[variant] if column not in present]


def lookup_member_casual(
    value: Any,
    variant: SchemaVariant,
    source: Optional[str] = None
) -> Optional[str]:
    """
    Map one raw user-category value to the canonical vocabulary

    Missing values stay missing.

    Raises:
        VocabularyError: If the value is not in the variant's vocabulary
    """
    if _is_missing(value):
        return None

    vocabulary = USER_TYPE_VOCABULARIES[variant]
    if value not in vocabulary:
        raise VocabularyError(
            f"Unknown user category {value!r} for variant {variant.value}",
            error_code="UNKNOWN_VOCABULARY",
            context={
                'stage': 'normalize',
                'source': source,
                'column': user_type_column(variant),
                'values': [value],
            }
        )
    return vocabulary[value]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class CanonicalTrip:
    """
    One trip in the unified schema

    Values are carried as read (strings for timestamps); parsing and
    derived fields happen on whole tables downstream.
    """

    ride_id: Optional[str]
    started_at: Any
    ended_at: Any
    start_station_name: Optional[str]
    end_station_name: Optional[str]
    member_casual: Optional[str]

    @classmethod
    def from_raw(
        cls,
        record: Mapping[str, Any],
        variant: SchemaVariant,
        source: Optional[str] = None
    ) -> 'CanonicalTrip':
        """
        Build a canonical trip from one raw record of a known variant

        Record-at-a-time counterpart of ``normalize_table``; both read the
        same COLUMN_MAPPINGS and USER_TYPE_VOCABULARIES tables.

        Args:
            record: Raw record keyed by the variant's column names
            variant: Schema variant the record was read under
            source: Optional source label used in error context

        Returns:
            CanonicalTrip with renamed fields and recoded user category

        Raises:
            SchemaError: If a mapped column is absent from the record
            VocabularyError: If the user category is unknown
        """
        mapping = COLUMN_MAPPINGS[variant]
        absent = [column for column in mapping if column not in record]
        if absent:
            raise SchemaError(
                f"Record is missing columns {absent} for variant {variant.value}",
                error_code="MISSING_COLUMNS",
                context={'stage': 'normalize', 'source': source, 'columns': absent}
            )

        values = {
            canonical: (None if _is_missing(record[raw]) else record[raw])
            for raw, canonical in mapping.items()
        }
        values['member_casual'] = lookup_member_casual(
            record[user_type_column(variant)], variant, source
        )
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert trip to a dictionary keyed by canonical column names"""
        return asdict(self)
