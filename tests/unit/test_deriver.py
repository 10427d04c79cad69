# tests/unit/test_deriver.py
"""Tests for timestamp parsing and derived trip fields."""

from datetime import date

import pandas as pd
import pytest

from cyclistic.models.trip_record import MONTH_LABELS, OUTPUT_COLUMNS, SchemaVariant, TimezonePolicy
from cyclistic.transforms.deriver import derive_fields, parse_timestamps
from cyclistic.transforms.merger import merge_tables
from cyclistic.transforms.normalizer import normalize_table
from cyclistic.utils.exceptions import ConfigurationError, SchemaError


def _trips(started, ended, member_casual='member'):
    """Canonical table from parallel lists of start/end strings."""
    return pd.DataFrame({
        'ride_id': [f"R{i}" for i in range(len(started))],
        'started_at': started,
        'ended_at': ended,
        'start_station_name': ['X'] * len(started),
        'end_station_name': ['Y'] * len(started),
        'member_casual': [member_casual] * len(started),
    })


@pytest.fixture
def merged(variant_a_raw, variant_b_raw):
    return merge_tables([
        normalize_table(variant_a_raw, SchemaVariant.DIVVY_2019),
        normalize_table(variant_b_raw, SchemaVariant.DIVVY_2020),
    ])


class TestDeriveFields:
    """Test derived fields under the default UTC policy."""

    def test_scenario_row(self, merged):
        """Test the 2019-01-01 08:00 → 08:10 subscriber ride."""
        derived = derive_fields(merged)
        row = derived.iloc[0]

        assert row['ride_id'] == 'A1'
        assert row['started_at'] == pd.Timestamp('2019-01-01 08:00:00', tz='UTC')
        assert row['ended_at'] == pd.Timestamp('2019-01-01 08:10:00', tz='UTC')
        assert row['member_casual'] == 'member'
        assert row['ride_length_sec'] == 600.0
        assert row['ride_length_min'] == 10.0
        assert row['start_hour'] == 8
        assert row['day_of_week'] == 3
        assert row['day_name'] == 'Tuesday'
        assert row['date'] == date(2019, 1, 1)
        assert row['month'] == 'Jan'

    def test_output_columns(self, merged):
        assert list(derive_fields(merged).columns) == OUTPUT_COLUMNS

    def test_input_is_not_modified(self, merged):
        before = merged.copy()

        derive_fields(merged)

        pd.testing.assert_frame_equal(merged, before)

    @pytest.mark.parametrize("started, day_of_week, day_name", [
        ('2020-01-05 07:15:00', 1, 'Sunday'),
        ('2020-01-06 07:15:00', 2, 'Monday'),
        ('2020-01-08 07:15:00', 4, 'Wednesday'),
        ('2020-01-11 07:15:00', 7, 'Saturday'),
    ])
    def test_week_starts_on_sunday(self, started, day_of_week, day_name):
        derived = derive_fields(_trips([started], ['2020-01-12 00:00:00']))

        assert derived.loc[0, 'day_of_week'] == day_of_week
        assert derived.loc[0, 'day_name'] == day_name

    def test_negative_lengths_are_not_clamped(self):
        derived = derive_fields(_trips(['2020-01-07 10:00:00'], ['2020-01-07 09:55:00']))

        assert derived.loc[0, 'ride_length_sec'] == -300.0
        assert derived.loc[0, 'ride_length_min'] == -5.0

    def test_unparseable_timestamps_propagate_missing(self):
        """Test bad timestamps yield missing fields instead of raising."""
        derived = derive_fields(_trips(
            ['not a timestamp', '2020-01-06 08:00:00'],
            ['2020-01-08 10:00:00', None]
        ))

        assert pd.isna(derived.loc[0, 'started_at'])
        assert pd.isna(derived.loc[0, 'ride_length_sec'])
        assert pd.isna(derived.loc[0, 'day_of_week'])
        assert pd.isna(derived.loc[0, 'day_name'])
        assert pd.isna(derived.loc[0, 'start_hour'])
        assert pd.isna(derived.loc[0, 'month'])
        assert pd.isna(derived.loc[1, 'ended_at'])
        assert pd.isna(derived.loc[1, 'ride_length_sec'])
        assert derived.loc[1, 'start_hour'] == 8

    def test_month_is_ordered_label(self, merged):
        month = derive_fields(merged)['month']

        assert month.dtype == 'category'
        assert month.cat.ordered
        assert list(month.cat.categories) == MONTH_LABELS

    def test_ride_length_min_is_seconds_over_sixty(self, merged):
        derived = derive_fields(merged).dropna(subset=['ride_length_sec'])

        pd.testing.assert_series_equal(
            derived['ride_length_min'], derived['ride_length_sec'] / 60, check_names=False
        )

    def test_empty_table(self):
        derived = derive_fields(_trips([], []))

        assert list(derived.columns) == OUTPUT_COLUMNS
        assert len(derived) == 0

    def test_missing_canonical_column(self, merged):
        with pytest.raises(SchemaError) as exc_info:
            derive_fields(merged.drop(columns=['ended_at']))

        assert exc_info.value.stage == 'derive'


class TestTimezonePolicies:
    """Test explicit time zone interpretation."""

    def test_utc_accepts_zoned_strings(self):
        parsed = parse_timestamps(pd.Series(['2019-01-01T14:00:00+06:00']))
        assert parsed[0] == pd.Timestamp('2019-01-01 08:00:00', tz='UTC')

    def test_local_policy_localizes_wall_clock(self):
        derived = derive_fields(
            _trips(['2020-01-05 07:15:00'], ['2020-01-05 07:45:00']),
            policy=TimezonePolicy.ASSUME_LOCAL,
            local_timezone='America/Chicago'
        )

        assert str(derived['started_at'].dt.tz) == 'America/Chicago'
        assert derived.loc[0, 'start_hour'] == 7
        assert derived.loc[0, 'ride_length_sec'] == 1800.0

    def test_policies_differ_across_dst_change(self):
        """Test the 2020-03-08 spring-forward hour is only skipped under local time."""
        trips = _trips(['2020-03-08 01:30:00'], ['2020-03-08 03:30:00'])

        utc = derive_fields(trips, policy=TimezonePolicy.ASSUME_UTC)
        local = derive_fields(trips, policy=TimezonePolicy.ASSUME_LOCAL, local_timezone='America/Chicago')

        assert utc.loc[0, 'ride_length_sec'] == 7200.0
        assert local.loc[0, 'ride_length_sec'] == 3600.0

    def test_nonexistent_local_time_becomes_missing(self):
        parsed = parse_timestamps(
            pd.Series(['2020-03-08 02:30:00']),
            TimezonePolicy.ASSUME_LOCAL,
            'America/Chicago'
        )
        assert pd.isna(parsed[0])

    def test_local_policy_with_mixed_zoned_and_wall_clock(self):
        """Test offsets in some rows do not abort parsing of the rest."""
        parsed = parse_timestamps(
            pd.Series(['2019-01-01 08:00:00', '2019-01-01T14:00:00+06:00', 'garbage', None]),
            TimezonePolicy.ASSUME_LOCAL,
            'America/Chicago'
        )

        assert str(parsed.dt.tz) == 'America/Chicago'
        assert parsed[0] == pd.Timestamp('2019-01-01 08:00:00', tz='America/Chicago')
        assert parsed[1] == pd.Timestamp('2019-01-01 08:00:00', tz='UTC')
        assert pd.isna(parsed[2])
        assert pd.isna(parsed[3])

    def test_local_policy_keeps_index(self):
        values = pd.Series(['2020-01-05T13:15:00Z', '2020-01-05 07:45:00'], index=[10, 4])

        parsed = parse_timestamps(values, TimezonePolicy.ASSUME_LOCAL, 'America/Chicago')

        assert parsed.index.tolist() == [10, 4]
        assert parsed[10].hour == 7
        assert parsed[4].hour == 7

    def test_local_policy_requires_zone(self):
        with pytest.raises(ConfigurationError):
            parse_timestamps(pd.Series(['2020-01-05 07:15:00']), TimezonePolicy.ASSUME_LOCAL)
