"""
Schema check for the cleaned ride dataset.

Uses pandera to confirm the invariants the cleaning stage promises before
the dataset is written:
- ride_id present and unique
- timestamps and station names present
- 1 < ride_length < 1440 minutes
- weekday, month and rider type within their label sets
"""

import logging

import pandera.pandas as pa
from pandera.errors import SchemaErrors
from pandera.pandas import Check, Column

from cyclistic.config import MAX_RIDE_MINUTES, MIN_RIDE_MINUTES, RIDER_TYPES
from cyclistic.errors import CleaningError
from cyclistic.utils import MONTH_LABELS, WEEKDAY_LABELS

logger = logging.getLogger(__name__)

cleaned_ride_schema = pa.DataFrameSchema(
    {
        'ride_id': Column(nullable=False, unique=True),
        'started_at': Column(nullable=False),
        'ended_at': Column(nullable=False),
        'ride_length': Column(
            float,
            [Check.gt(MIN_RIDE_MINUTES), Check.lt(MAX_RIDE_MINUTES)],
            nullable=False,
            description='minutes',
        ),
        'start_station_name': Column(nullable=False),
        'end_station_name': Column(nullable=False),
        'day_of_week': Column(checks=Check.isin(WEEKDAY_LABELS), nullable=False),
        'month': Column(checks=Check.isin(MONTH_LABELS), nullable=False),
        'member_casual': Column(checks=Check.isin(RIDER_TYPES), nullable=False),
    },
    strict=False,  # raw columns such as rideable_type pass through
    description='Cleaned ride dataset',
)


def validate_cleaned(df):
    """Raise CleaningError if the cleaned frame breaks the schema."""
    try:
        cleaned_ride_schema.validate(df, lazy=True)
    except SchemaErrors as err:
        logger.error("Schema validation failed:\n%s", err.failure_cases.head(20).to_string())
        raise CleaningError(
            f"Cleaned data failed schema validation ({len(err.failure_cases)} failures)"
        ) from err
    logger.info("Schema validation passed")
    return True
