# cyclistic/config.py
"""
Paths, column names and cleaning policy shared by both pipeline stages.

Paths are relative to the directory the commands are run from (the project
root). Everything else here is fixed policy.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Default locations
RAW_DIR = Path('data/raw/csv')
RAW_PATTERN = '*.csv'
CLEANED_DIR = Path('data/cleaned')
CLEANED_CSV = CLEANED_DIR / '2024_bike_data_combined.csv'
CLEANED_PARQUET = CLEANED_DIR / '2024_bike_data_combined.parquet'
OUTPUT_DIR = Path('outputs')

# Columns
ID_COLUMN = 'ride_id'
TIMESTAMP_COLUMNS = ['started_at', 'ended_at']
STATION_COLUMNS = ['start_station_name', 'end_station_name']
COORDINATE_COLUMNS = ['start_lat', 'start_lng', 'end_lat', 'end_lng']
RIDER_COLUMN = 'member_casual'

# a raw file without these is skipped
REQUIRED_FILE_COLUMNS = TIMESTAMP_COLUMNS

# the analysis stage aborts if the cleaned data lacks any of these
ANALYSIS_COLUMNS = [
    ID_COLUMN, 'started_at', 'ride_length', 'day_of_week', 'month', RIDER_COLUMN,
]

# Divvy extracts: 2024-01-12 15:30:27 (some months append .000)
DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'

# Ride length policy, minutes. Rows are kept when MIN < ride_length < MAX.
MIN_RIDE_MINUTES = 1
MAX_RIDE_MINUTES = 1440

RIDER_TYPES = ['casual', 'member']


@dataclass(frozen=True)
class CleaningConfig:
    raw_dir: Path = RAW_DIR
    output_csv: Path = CLEANED_CSV
    output_parquet: Optional[Path] = CLEANED_PARQUET
    pattern: str = RAW_PATTERN

    def raw_files(self):
        """Raw CSV files in a stable (sorted) order."""
        return sorted(Path(self.raw_dir).glob(self.pattern))


@dataclass(frozen=True)
class AnalysisConfig:
    data_path: Path = CLEANED_CSV
    output_dir: Path = OUTPUT_DIR

    @property
    def figures_dir(self):
        return Path(self.output_dir) / 'figures'

    @property
    def tables_dir(self):
        return Path(self.output_dir) / 'tables'
