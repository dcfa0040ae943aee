# cyclistic/utils.py
import logging
import re
from enum import IntEnum

import pandas as pd

from cyclistic.config import DATETIME_FORMAT

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class Weekday(IntEnum):
    """Day of week, ordered from Sunday."""
    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THU = 4
    FRI = 5
    SAT = 6

    @property
    def label(self):
        return self.name.title()


class Month(IntEnum):
    JAN = 1
    FEB = 2
    MAR = 3
    APR = 4
    MAY = 5
    JUN = 6
    JUL = 7
    AUG = 8
    SEP = 9
    OCT = 10
    NOV = 11
    DEC = 12

    @property
    def label(self):
        return self.name.title()


WEEKDAY_LABELS = [d.label for d in Weekday]
MONTH_LABELS = [m.label for m in Month]


def configure_logging(level='INFO'):
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def load_csv(path, parse_dates=None, dtype=None):
    return pd.read_csv(path, parse_dates=parse_dates, dtype=dtype, low_memory=False)


def normalize_column_name(name):
    """snake_case a header: ' Started At' -> 'started_at', 'rideID' -> 'ride_id'."""
    name = str(name).strip()
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    name = re.sub(r'[^0-9a-zA-Z]+', '_', name)
    return name.strip('_').lower()


def normalize_column_names(columns):
    """Normalise every header; repeated names get a numeric suffix (x, x_2, ...)."""
    seen = {}
    result = []
    for col in columns:
        name = normalize_column_name(col) or 'x'
        if name in seen:
            seen[name] += 1
            name = f'{name}_{seen[name]}'
        else:
            seen[name] = 1
        result.append(name)
    return result


def parse_datetime_series(series):
    """Parse timestamps in the extract format; anything else becomes NaT.

    Trailing fractional seconds are ignored.
    """
    if pd.api.types.is_datetime64_any_dtype(series):
        return series
    return pd.to_datetime(series, format=DATETIME_FORMAT, exact=False, errors='coerce')


def as_ordered_categorical(series, labels):
    """Cast to an ordered categorical; values outside `labels` become missing."""
    return series.astype(pd.CategoricalDtype(categories=list(labels), ordered=True))


def weekday_categorical(timestamps):
    # pandas counts Monday as 0
    codes = (timestamps.dt.dayofweek.astype(int) + 1) % 7
    return pd.Series(
        pd.Categorical.from_codes(codes.to_numpy(), categories=WEEKDAY_LABELS, ordered=True),
        index=timestamps.index,
    )


def month_categorical(timestamps):
    codes = timestamps.dt.month.astype(int) - Month.JAN
    return pd.Series(
        pd.Categorical.from_codes(codes.to_numpy(), categories=MONTH_LABELS, ordered=True),
        index=timestamps.index,
    )
