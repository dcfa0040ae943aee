"""Read the monthly trip extracts and combine them into one frame."""

import logging
from pathlib import Path

import pandas as pd

from cyclistic.config import (
    COORDINATE_COLUMNS, ID_COLUMN, REQUIRED_FILE_COLUMNS, TIMESTAMP_COLUMNS,
)
from cyclistic.errors import CleaningError, FileReadError, MissingColumnsError
from cyclistic.utils import load_csv, normalize_column_names

logger = logging.getLogger(__name__)


def read_ride_file(path):
    """Load one raw CSV with normalised column names.

    Every column is read as text so ride ids keep their exact spelling;
    coordinate columns are converted to numbers afterwards.

    Raises:
        FileReadError: the file could not be parsed.
        MissingColumnsError: started_at or ended_at is absent.
    """
    try:
        df = load_csv(path, dtype=str)
    except (OSError, ValueError) as e:
        # pandas parser and decoding errors are ValueErrors
        raise FileReadError(f"Error reading file '{path}': {e}") from e

    df.columns = normalize_column_names(df.columns)
    missing = [c for c in REQUIRED_FILE_COLUMNS if c not in df.columns]
    if missing:
        raise MissingColumnsError(path, missing)

    for col in COORDINATE_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors='coerce')
    return df


def load_ride_files(paths):
    """Read every file, skipping the ones that fail.

    Returns (frames, excluded) where excluded is a list of (path, reason).
    """
    frames = []
    excluded = []
    for path in paths:
        logger.info("Reading file: %s", path)
        try:
            df = read_ride_file(path)
        except MissingColumnsError as e:
            logger.warning("File '%s' is missing required columns: %s. Skipping.",
                           path, ', '.join(e.missing))
            excluded.append((Path(path), str(e)))
            continue
        except FileReadError as e:
            logger.warning("Failed to load %s: %s", path, e)
            excluded.append((Path(path), str(e)))
            continue
        logger.info("  %s rows, %d columns", f"{len(df):,}", df.shape[1])
        frames.append(df)

    if excluded:
        logger.warning("Skipped %d of %d files", len(excluded), len(frames) + len(excluded))
    return frames, excluded


def combine_ride_files(frames):
    """Stack the per-file frames, keeping the union of their columns.

    Raises:
        CleaningError: nothing was loaded, or the timestamp or ride_id
            columns are missing from the combined data.
    """
    if not frames:
        raise CleaningError(
            "No data was loaded. Check the source files and path; every raw "
            "file was missing or failed validation."
        )

    combined = pd.concat(frames, ignore_index=True, sort=False)
    if combined.empty:
        raise CleaningError("No data was loaded. The raw files contain no rows.")

    missing = [c for c in TIMESTAMP_COLUMNS if c not in combined.columns]
    if missing:
        raise CleaningError(f"Combined data is missing required columns: {', '.join(missing)}")
    if ID_COLUMN not in combined.columns:
        raise CleaningError(f"Column '{ID_COLUMN}' is missing from the combined data.")

    logger.info("Combined %d files: %s rows x %d columns",
                len(frames), f"{len(combined):,}", combined.shape[1])
    logger.debug("Columns: %s", ', '.join(combined.columns))
    return combined
