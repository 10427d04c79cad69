# tests/unit/conftest.py
"""
Shared pytest fixtures for the trip cleaning tests
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from cyclistic.config.settings import Settings, SourceConfig
from cyclistic.models.trip_record import SchemaVariant


@pytest.fixture
def temp_dir():
    """Temporary working directory"""
    with tempfile.TemporaryDirectory() as directory:
        yield Path(directory)


@pytest.fixture
def variant_a_raw():
    """
    Raw 2019 Q1 layout, as read with dtype=str

    A1 and A4 are valid; A2 is a 45 second false start; A3 lasts 25 hours.
    """
    return pd.DataFrame({
        'trip_id': ['A1', 'A2', 'A3', 'A4'],
        'start_time': [
            '2019-01-01 08:00:00', '2019-01-01 09:00:00',
            '2019-01-02 10:00:00', '2019-01-05 12:00:00'
        ],
        'end_time': [
            '2019-01-01 08:10:00', '2019-01-01 09:00:45',
            '2019-01-03 11:00:00', '2019-01-05 12:30:00'
        ],
        'bikeid': ['2167', '4386', '1524', '252'],
        'tripduration': ['600.0', '45.0', '90000.0', '1800.0'],
        'from_station_id': ['199', '44', '15', '123'],
        'from_station_name': ['X', 'State St & Randolph St', 'Racine Ave & 18th St', 'California Ave & Milwaukee Ave'],
        'to_station_id': ['84', '624', '644', '176'],
        'to_station_name': ['Y', 'Dearborn St & Van Buren St', 'Western Ave & Fillmore St', 'Clark St & Elm St'],
        'usertype': ['Subscriber', 'Customer', 'Customer', 'Customer'],
        'gender': ['Male', 'Female', None, None],
        'birthyear': ['1989', '1990', None, None],
    })


@pytest.fixture
def variant_b_raw():
    """
    Raw 2020 Q1 layout, including the lat/lng columns the file ships with

    B1 is valid; B2 has no end time; B3 ends before it starts; B4 has a
    garbage start time.
    """
    return pd.DataFrame({
        'ride_id': ['B1', 'B2', 'B3', 'B4'],
        'rideable_type': ['docked_bike'] * 4,
        'started_at': [
            '2020-01-05 07:15:00', '2020-01-06 08:00:00',
            '2020-01-07 10:00:00', 'not a timestamp'
        ],
        'ended_at': [
            '2020-01-05 07:45:00', None,
            '2020-01-07 09:55:00', '2020-01-08 10:00:00'
        ],
        'start_station_name': ['Western Ave & Leland Ave', 'Clark St & Montrose Ave', 'Broadway & Belmont Ave', 'Clark St & Randolph St'],
        'start_station_id': ['239', '234', '296', '51'],
        'end_station_name': ['Clark St & Leland Ave', 'Southport Ave & Irving Park Rd', 'Wilton Ave & Belmont Ave', 'Fairbanks Ct & Grand Ave'],
        'end_station_id': ['326', '318', '117', '24'],
        'start_lat': ['41.9665', '41.9616', '41.9401', '41.8846'],
        'start_lng': ['-87.6884', '-87.666', '-87.6455', '-87.6319'],
        'end_lat': ['41.9671', '41.9542', '41.9402', '41.8918'],
        'end_lng': ['-87.6674', '-87.6644', '-87.653', '-87.6206'],
        'member_casual': ['member', 'member', 'casual', 'casual'],
    })


@pytest.fixture
def source_files(temp_dir, variant_a_raw, variant_b_raw):
    """Both raw fixtures written as CSV files"""
    raw_dir = temp_dir / "raw_data"
    raw_dir.mkdir()

    path_a = raw_dir / "Divvy_Trips_2019_Q1.csv"
    path_b = raw_dir / "Divvy_Trips_2020_Q1.csv"
    variant_a_raw.to_csv(path_a, index=False)
    variant_b_raw.to_csv(path_b, index=False)

    return {
        SchemaVariant.DIVVY_2019: path_a,
        SchemaVariant.DIVVY_2020: path_b,
    }


@pytest.fixture
def pipeline_settings(temp_dir, source_files):
    """Settings pointing at the fixture files, with a clean environment"""
    with patch.dict(os.environ, {}, clear=True):
        settings = Settings()

    settings.pipeline.sources = [
        SourceConfig(path=source_files[SchemaVariant.DIVVY_2019], variant=SchemaVariant.DIVVY_2019),
        SourceConfig(path=source_files[SchemaVariant.DIVVY_2020], variant=SchemaVariant.DIVVY_2020),
    ]
    settings.output.output_dir = temp_dir / "processed_data"
    return settings
