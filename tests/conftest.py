"""Shared fixtures: raw trip CSVs written to a temporary directory."""

import pandas as pd
import pytest

from cyclistic.config import CleaningConfig
from cyclistic.data_prep import run_cleaning

RAW_COLUMNS = [
    'ride_id', 'rideable_type', 'started_at', 'ended_at',
    'start_station_name', 'end_station_name', 'member_casual',
]


def make_ride(ride_id, started_at, minutes, member='member', start_station='A', end_station='B'):
    start = pd.Timestamp(started_at)
    end = start + pd.Timedelta(minutes=minutes)
    return {
        'ride_id': ride_id,
        'rideable_type': 'classic_bike',
        'started_at': start.strftime('%Y-%m-%d %H:%M:%S'),
        'ended_at': end.strftime('%Y-%m-%d %H:%M:%S'),
        'start_station_name': start_station,
        'end_station_name': end_station,
        'member_casual': member,
    }


@pytest.fixture
def ride():
    return make_ride


@pytest.fixture
def raw_dir(tmp_path):
    path = tmp_path / 'raw'
    path.mkdir()
    return path


@pytest.fixture
def write_raw(raw_dir):
    """Write rows (list of dicts) to raw_dir/<name>; `columns` overrides the header."""
    def _write(name, rows, columns=None):
        path = raw_dir / name
        pd.DataFrame(rows, columns=columns or RAW_COLUMNS).to_csv(path, index=False)
        return path
    return _write


@pytest.fixture
def cleaning_config(raw_dir, tmp_path):
    return CleaningConfig(
        raw_dir=raw_dir,
        output_csv=tmp_path / 'cleaned' / 'rides.csv',
        output_parquet=tmp_path / 'cleaned' / 'rides.parquet',
    )


# 6 member rides averaging 10 minutes, 4 casual rides averaging 30
SEGMENT_RIDES = [
    ('m1', '2024-01-05 08:00:00', 8, 'member'),     # Fri
    ('m2', '2024-01-08 09:00:00', 10, 'member'),    # Mon
    ('m3', '2024-01-07 17:00:00', 12, 'member'),    # Sun
    ('m4', '2024-02-14 08:30:00', 9, 'member'),     # Wed
    ('m5', '2024-04-03 07:45:00', 11, 'member'),    # Wed
    ('m6', '2024-12-02 18:10:00', 10, 'member'),    # Mon
    ('c1', '2024-08-03 14:00:00', 25, 'casual'),    # Sat
    ('c2', '2024-03-10 11:00:00', 35, 'casual'),    # Sun
    ('c3', '2024-08-09 15:00:00', 30, 'casual'),    # Fri
    ('c4', '2024-01-06 13:00:00', 30, 'casual'),    # Sat
]


@pytest.fixture
def cleaned_csv(write_raw, cleaning_config):
    """Run the cleaning stage over SEGMENT_RIDES and return the cleaned CSV path."""
    write_raw('2024_rides.csv', [make_ride(*r) for r in SEGMENT_RIDES])
    run_cleaning(cleaning_config)
    return cleaning_config.output_csv
