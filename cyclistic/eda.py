
"""
Descriptive analysis of the cleaned rides: members vs casual riders.

Views (one table and one bar chart each):
1) rides and average duration by day of week
2) ride_length summary per rider type
3) rides by hour of day
4) rides by month
"""

import argparse
import logging
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.ticker import StrMethodFormatter

from cyclistic.config import (
    ANALYSIS_COLUMNS, CLEANED_CSV, ID_COLUMN, OUTPUT_DIR, RIDER_COLUMN, RIDER_TYPES,
    AnalysisConfig,
)
from cyclistic.errors import AnalysisError, CyclisticError
from cyclistic.utils import (
    MONTH_LABELS, WEEKDAY_LABELS, as_ordered_categorical, configure_logging,
    load_csv, parse_datetime_series,
)

logger = logging.getLogger(__name__)

COUNT_FORMAT = StrMethodFormatter('{x:,.0f}')


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Summary tables and charts for the cleaned rides")
    p.add_argument('--data', default=str(CLEANED_CSV), help='cleaned CSV (or .parquet)')
    p.add_argument('--out', default=str(OUTPUT_DIR), help='output dir')
    p.add_argument('--log-level', default='INFO')
    return p.parse_args(argv)


def load_cleaned(path):
    """Load the cleaned dataset and restore its column types.

    Raises:
        AnalysisError: the file is missing or lacks an expected column.
    """
    path = Path(path)
    if not path.exists():
        raise AnalysisError(f"Cleaned data not found at {path}")
    if path.suffix == '.parquet':
        df = pd.read_parquet(path)
    else:
        df = load_csv(path, dtype={ID_COLUMN: str})

    missing = [c for c in ANALYSIS_COLUMNS if c not in df.columns]
    if missing:
        raise AnalysisError(f"Cleaned data at {path} is missing expected columns: {', '.join(missing)}")

    df['started_at'] = parse_datetime_series(df['started_at'])
    df['ride_length'] = pd.to_numeric(df['ride_length'], errors='coerce')
    df[RIDER_COLUMN] = as_ordered_categorical(df[RIDER_COLUMN], RIDER_TYPES)
    df['day_of_week'] = as_ordered_categorical(df['day_of_week'], WEEKDAY_LABELS)
    df['month'] = as_ordered_categorical(df['month'], MONTH_LABELS)
    return df


def describe_dataset(df):
    logger.info("Loaded %s rides x %d columns", f"{len(df):,}", df.shape[1])
    logger.info("Rides from %s to %s", df['started_at'].min(), df['started_at'].max())
    missing = df.isna().sum()
    missing = missing[missing > 0]
    if len(missing):
        logger.warning("Missing values per column:\n%s", missing.to_string())
    logger.info("ride_length (minutes):\n%s", df['ride_length'].describe().to_string())


def summarize_by_rider_type(df):
    return (df.groupby(RIDER_COLUMN, observed=True)['ride_length']
              .agg(avg_duration='mean', median_duration='median', max_duration='max',
                   min_duration='min', sd_duration='std', ride_count='size')
              .reset_index())


def rides_by_weekday(df):
    """Ride count and mean duration per rider type and weekday, Sun..Sat."""
    table = (df.groupby([RIDER_COLUMN, 'day_of_week'], observed=True)
               .agg(rides=('ride_length', 'size'), avg_duration=('ride_length', 'mean'))
               .reset_index())
    return table.sort_values([RIDER_COLUMN, 'day_of_week'], kind='stable').reset_index(drop=True)


def rides_by_hour(df):
    hours = df.assign(hour_of_day=df['started_at'].dt.hour)
    return (hours.groupby([RIDER_COLUMN, 'hour_of_day'], observed=True)
                 .size()
                 .reset_index(name='rides'))


def rides_by_month(df):
    table = (df.groupby([RIDER_COLUMN, 'month'], observed=True)
               .size()
               .reset_index(name='rides'))
    return table.sort_values([RIDER_COLUMN, 'month'], kind='stable').reset_index(drop=True)


def _observed(values, labels):
    present = set(values.astype(str))
    return [label for label in labels if label in present]


def plot_grouped_bars(table, x, y, path, title, xlabel, ylabel, order=None,
                      y_format=COUNT_FORMAT, rotate=False):
    """Bar chart of `y` per `x`, bars dodged by rider type."""
    data = table.assign(**{RIDER_COLUMN: table[RIDER_COLUMN].astype(str)})
    if isinstance(table[x].dtype, pd.CategoricalDtype):
        data[x] = data[x].astype(str)
    fig, ax = plt.subplots(figsize=(10, 5))
    sns.barplot(
        data=data, x=x, y=y, hue=RIDER_COLUMN,
        order=order, hue_order=_observed(data[RIDER_COLUMN], RIDER_TYPES),
        errorbar=None, ax=ax,
    )
    ax.yaxis.set_major_formatter(y_format)
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if rotate:
        ax.tick_params(axis='x', labelrotation=45)
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)


def plot_rides_by_weekday(table, path):
    plot_grouped_bars(table, 'day_of_week', 'rides', path,
                      title='Number of Rides by Day of Week', xlabel='Day of Week',
                      ylabel='Ride Count', order=_observed(table['day_of_week'], WEEKDAY_LABELS),
                      rotate=True)


def plot_avg_duration(table, path):
    plot_grouped_bars(table, RIDER_COLUMN, 'avg_duration', path,
                      title='Average Ride Duration by User Type', xlabel='User Type',
                      ylabel='Avg Duration (minutes)',
                      order=_observed(table[RIDER_COLUMN], RIDER_TYPES),
                      y_format=StrMethodFormatter('{x:,.1f}'))


def plot_rides_by_hour(table, path):
    plot_grouped_bars(table, 'hour_of_day', 'rides', path,
                      title='Ride Counts by Time of Day', xlabel='Hour of Day',
                      ylabel='Ride Count', order=sorted(table['hour_of_day'].unique()))


def plot_rides_by_month(table, path):
    plot_grouped_bars(table, 'month', 'rides', path,
                      title='Ride Counts by Month', xlabel='Month', ylabel='Ride Count',
                      order=_observed(table['month'], MONTH_LABELS), rotate=True)


# (file slug, aggregate, chart); files are numbered in this order
REPORT_VIEWS = [
    ('rides_by_weekday', rides_by_weekday, plot_rides_by_weekday),
    ('avg_duration_by_rider_type', summarize_by_rider_type, plot_avg_duration),
    ('rides_by_hour', rides_by_hour, plot_rides_by_hour),
    ('rides_by_month', rides_by_month, plot_rides_by_month),
]


def run_analysis(config):
    """Compute every view, save its table and chart, and return the tables.

    A view that fails is logged and skipped so the others still run; the
    run then raises AnalysisError naming the failed views.
    """
    df = load_cleaned(config.data_path)
    describe_dataset(df)
    config.figures_dir.mkdir(parents=True, exist_ok=True)
    config.tables_dir.mkdir(parents=True, exist_ok=True)

    tables = {}
    failed = []
    for number, (slug, aggregate, plot) in enumerate(REPORT_VIEWS, start=1):
        name = f'{number:02d}_{slug}'
        try:
            table = aggregate(df)
            table.to_csv(config.tables_dir / f'{name}.csv', index=False)
            plot(table, config.figures_dir / f'{name}.png')
        except Exception:
            logger.exception("Could not produce %s", name)
            failed.append(name)
            continue
        logger.info("%s:\n%s", name, table.to_string(index=False))
        tables[slug] = table

    if failed:
        raise AnalysisError(f"{len(failed)} of {len(REPORT_VIEWS)} views failed: {', '.join(failed)}")
    logger.info("Saved tables to %s and plots to %s", config.tables_dir, config.figures_dir)
    return tables


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = AnalysisConfig(data_path=Path(args.data), output_dir=Path(args.out))
    try:
        run_analysis(config)
    except CyclisticError as e:
        logger.error("Analysis failed: %s", e)
        raise SystemExit(1)


if __name__ == '__main__':
    main()
