import logging

import pandas as pd
import pytest

from cyclistic.combine_csv import combine_ride_files, load_ride_files, read_ride_file
from cyclistic.errors import CleaningError, FileReadError, MissingColumnsError


def test_read_ride_file_normalizes_headers_and_keeps_ids_as_text(raw_dir):
    path = raw_dir / 'jan.csv'
    path.write_text(
        'Ride ID,Started At,ENDED_AT,start_lat\n'
        '007,2024-01-01 08:00:00,2024-01-01 08:20:00,41.9\n'
    )

    df = read_ride_file(path)

    assert list(df.columns) == ['ride_id', 'started_at', 'ended_at', 'start_lat']
    assert df['ride_id'].iloc[0] == '007'
    assert df['start_lat'].iloc[0] == pytest.approx(41.9)


def test_read_ride_file_reports_missing_columns(write_raw, ride):
    path = write_raw('feb.csv', [ride('1', '2024-02-01 08:00', 5)],
                     columns=['ride_id', 'ended_at', 'member_casual'])

    with pytest.raises(MissingColumnsError) as exc:
        read_ride_file(path)

    assert exc.value.missing == ['started_at']


def test_read_ride_file_wraps_parse_errors(raw_dir):
    path = raw_dir / 'broken.csv'
    path.write_text('started_at,ended_at\n"2024-01-01 08:00:00,2024-01-01 08:20:00\n')

    with pytest.raises(FileReadError):
        read_ride_file(path)


def test_load_ride_files_skips_bad_files_and_continues(write_raw, raw_dir, ride, caplog):
    good = write_raw('01.csv', [ride('1', '2024-01-01 08:00', 20)])
    no_start = write_raw('02.csv', [ride('2', '2024-02-01 08:00', 20)],
                         columns=['ride_id', 'ended_at', 'member_casual'])
    missing = raw_dir / 'does_not_exist.csv'

    frames, excluded = load_ride_files([good, no_start, missing])

    assert len(frames) == 1
    assert [path for path, _ in excluded] == [no_start, missing]
    assert 'missing required columns: started_at' in caplog.text
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_combine_keeps_union_of_columns():
    a = pd.DataFrame({'ride_id': ['1'], 'started_at': ['x'], 'ended_at': ['y'], 'rideable_type': ['ebike']})
    b = pd.DataFrame({'ride_id': ['2'], 'started_at': ['x'], 'ended_at': ['y']})

    combined = combine_ride_files([a, b])

    assert len(combined) == 2
    assert 'rideable_type' in combined.columns
    assert combined['rideable_type'].isna().tolist() == [False, True]


def test_combine_fails_without_files():
    with pytest.raises(CleaningError, match='No data was loaded'):
        combine_ride_files([])


def test_combine_fails_without_ride_id():
    frame = pd.DataFrame({'started_at': ['x'], 'ended_at': ['y']})

    with pytest.raises(CleaningError, match='ride_id'):
        combine_ride_files([frame])
