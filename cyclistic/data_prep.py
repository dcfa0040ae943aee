"""
Stage one: clean the monthly Divvy trip extracts into one dataset.

Steps:
1) read every raw CSV, skipping files that fail to parse or lack timestamps
2) combine them (union of columns)
3) parse timestamps and derive ride_length, day_of_week and month
4) drop rows failing the quality checks (missing ids or stations,
   duplicate ids, ride_length outside 1..1440 minutes, unknown rider type)
5) cast the categorical columns, validate and save as CSV and Parquet
"""

import argparse
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd

from cyclistic.combine_csv import combine_ride_files, load_ride_files
from cyclistic.config import (
    CLEANED_CSV, CLEANED_PARQUET, DATETIME_FORMAT, ID_COLUMN, MAX_RIDE_MINUTES,
    MIN_RIDE_MINUTES, RAW_DIR, RAW_PATTERN, RIDER_COLUMN, RIDER_TYPES,
    STATION_COLUMNS, CleaningConfig,
)
from cyclistic.errors import CleaningError, CyclisticError
from cyclistic.utils import (
    MONTH_LABELS, WEEKDAY_LABELS, as_ordered_categorical, configure_logging,
    month_categorical, parse_datetime_series, weekday_categorical,
)
from cyclistic.validation import validate_cleaned

logger = logging.getLogger(__name__)

FILTER_REASONS = {
    'missing_ride_id': 'missing ride_id',
    'missing_station': 'missing station data',
    'duplicate_ride_id': 'duplicate ride_id (first kept)',
    'non_positive_length': "invalid 'ride_length' (<= 0)",
    'out_of_range_length': f"'ride_length' outside ({MIN_RIDE_MINUTES}, {MAX_RIDE_MINUTES}) minutes",
    'unknown_rider_type': f"member_casual not one of {', '.join(RIDER_TYPES)}",
}


@dataclass
class FilterReport:
    rows_before: int
    rows_after: int
    removed: dict = field(default_factory=dict)

    @property
    def rows_removed(self):
        return self.rows_before - self.rows_after


@dataclass
class CleaningResult:
    rides: pd.DataFrame
    report: FilterReport
    excluded: list = field(default_factory=list)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Combine and clean the monthly bike-share trip CSVs")
    p.add_argument('--raw-dir', default=str(RAW_DIR), help='directory holding the raw monthly CSVs')
    p.add_argument('--pattern', default=RAW_PATTERN, help='glob for raw files inside --raw-dir')
    p.add_argument('--out', default=str(CLEANED_CSV), help='path to write the cleaned CSV')
    p.add_argument('--parquet', default=str(CLEANED_PARQUET), help='path to write the Parquet copy')
    p.add_argument('--no-parquet', action='store_true', help='skip the Parquet copy')
    p.add_argument('--log-level', default='INFO')
    return p.parse_args(argv)


def derive_ride_fields(df):
    """Parse started_at/ended_at and add ride_length, day_of_week and month.

    Rows whose timestamps do not parse are dropped with a warning.
    """
    df = df.copy()
    df['started_at'] = parse_datetime_series(df['started_at'])
    df['ended_at'] = parse_datetime_series(df['ended_at'])

    unparsed = df['started_at'].isna() | df['ended_at'].isna()
    if unparsed.any():
        logger.warning("%s rows have started_at/ended_at values that could not be parsed "
                       "(expected %s); removing them", f"{int(unparsed.sum()):,}", DATETIME_FORMAT)
        df = df.loc[~unparsed].copy()

    if df.empty:
        raise CleaningError(
            "No 'started_at'/'ended_at' values could be parsed. "
            f"Please check the data format (expected {DATETIME_FORMAT})."
        )
    if df['started_at'].isna().any() or df['ended_at'].isna().any():
        raise CleaningError("Some 'started_at' or 'ended_at' values are still missing after parsing.")

    df['ride_length'] = (df['ended_at'] - df['started_at']).dt.total_seconds() / 60
    df['day_of_week'] = weekday_categorical(df['started_at'])
    df['month'] = month_categorical(df['started_at'])
    return df.reset_index(drop=True)


def check_filter_columns(df):
    """Raise CleaningError naming any column the quality checks need but the data lacks."""
    missing = [c for c in [ID_COLUMN, *STATION_COLUMNS, RIDER_COLUMN] if c not in df.columns]
    if missing:
        raise CleaningError(f"Required columns are missing from the combined data: {', '.join(missing)}")


def normalize_rider_types(riders):
    """'Member ' -> 'member'; missing values stay missing."""
    return riders.where(riders.isna(), riders.astype(str).str.strip().str.lower())


def quality_masks(df):
    """One boolean mask per quality check; True marks a row to drop."""
    ride_id = df[ID_COLUMN]
    stations = df[STATION_COLUMNS]
    riders = df[RIDER_COLUMN]
    length = df['ride_length']
    return {
        'missing_ride_id': ride_id.isna(),
        'missing_station': stations.isna().any(axis=1),
        'duplicate_ride_id': ride_id.notna() & ride_id.duplicated(keep='first'),
        'non_positive_length': length <= 0,
        'out_of_range_length': ~((length > MIN_RIDE_MINUTES) & (length < MAX_RIDE_MINUTES)),
        'unknown_rider_type': ~riders.isin(RIDER_TYPES),
    }


def filter_rides(df):
    """Apply all quality checks as one combined mask.

    A row failing several checks is counted under each of them, so the
    per-reason counts can add up to more than the rows removed.

    Returns (filtered frame, FilterReport).

    Raises:
        CleaningError: a column the checks need is missing, or no row survives.
    """
    check_filter_columns(df)
    df = df.copy()
    df[RIDER_COLUMN] = normalize_rider_types(df[RIDER_COLUMN])
    masks = quality_masks(df)
    drop = np.logical_or.reduce([m.to_numpy(dtype=bool) for m in masks.values()])
    removed = {reason: int(mask.sum()) for reason, mask in masks.items()}

    for reason, count in removed.items():
        if count:
            logger.warning("Rows removed due to %s: %s", FILTER_REASONS[reason], f"{count:,}")
        else:
            logger.info("Rows removed due to %s: 0", FILTER_REASONS[reason])

    filtered = df.loc[~drop].reset_index(drop=True)
    report = FilterReport(rows_before=len(df), rows_after=len(filtered), removed=removed)
    logger.info("Initial rows: %s", f"{report.rows_before:,}")
    logger.info("Final rows: %s", f"{report.rows_after:,}")
    logger.info("Rows removed during cleaning: %s", f"{report.rows_removed:,}")

    if filtered.empty:
        raise CleaningError("The dataset is empty after quality filtering. Please check the data integrity.")
    return filtered, report


def finalize_rides(df):
    """Fix the categorical levels and log rides per member type and month."""
    df = df.copy()
    df[RIDER_COLUMN] = as_ordered_categorical(df[RIDER_COLUMN], RIDER_TYPES)
    df['month'] = as_ordered_categorical(df['month'], MONTH_LABELS)
    df['day_of_week'] = as_ordered_categorical(df['day_of_week'], WEEKDAY_LABELS)

    logger.info("Final dataset dimensions: %d x %d", *df.shape)
    counts = (df.groupby([RIDER_COLUMN, 'month'], observed=True)
                .size()
                .reset_index(name='n')
                .sort_values('n', ascending=False, kind='stable'))
    logger.info("Rides by member type and month:\n%s", counts.to_string(index=False))
    return df


def write_cleaned(df, csv_path, parquet_path=None):
    """Write the cleaned CSV and the optional Parquet copy.

    Both files go to temporary siblings first and are renamed into place only
    once every write succeeded. If any step fails, files already renamed are
    removed again, so a failed run leaves neither output behind.

    Raises:
        CleaningError: an output could not be written.
    """
    writers = [(Path(csv_path), lambda p: df.to_csv(p, index=False, date_format=DATETIME_FORMAT))]
    if parquet_path is not None:
        writers.append((Path(parquet_path), lambda p: df.to_parquet(p, engine='pyarrow', index=False)))

    staged = []
    published = []
    try:
        for path, write in writers:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.parent / f'{path.name}.tmp.{os.getpid()}'
            staged.append((tmp_path, path))
            write(tmp_path)
        for tmp_path, path in staged:
            os.replace(tmp_path, path)
            published.append(path)
    except OSError as e:
        for path in published:
            path.unlink()
        raise CleaningError(f"Could not write cleaned data: {e}") from e
    finally:
        for tmp_path, _ in staged:
            if tmp_path.exists():
                tmp_path.unlink()

    logger.info("Cleaned data saved successfully to: %s", csv_path)
    if parquet_path is not None:
        logger.info("Parquet copy saved to: %s", parquet_path)


def run_cleaning(config):
    """Run stage one end to end and write the cleaned files.

    Raises:
        CleaningError: on any dataset-level failure; nothing is written.
    """
    paths = config.raw_files()
    logger.info("Found %d raw files in %s", len(paths), config.raw_dir)
    frames, excluded = load_ride_files(paths)
    combined = combine_ride_files(frames)
    derived = derive_ride_fields(combined)
    filtered, report = filter_rides(derived)
    rides = finalize_rides(filtered)
    validate_cleaned(rides)
    write_cleaned(rides, config.output_csv, config.output_parquet)
    return CleaningResult(rides=rides, report=report, excluded=excluded)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = CleaningConfig(
        raw_dir=Path(args.raw_dir),
        output_csv=Path(args.out),
        output_parquet=None if args.no_parquet else Path(args.parquet),
        pattern=args.pattern,
    )
    try:
        run_cleaning(config)
    except CyclisticError as e:
        logger.error("Cleaning failed: %s", e)
        raise SystemExit(1)


if __name__ == '__main__':
    main()
