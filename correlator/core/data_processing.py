import logging
import math
import re
from numbers import Real
from typing import Any, Iterable

import numpy as np
import pandas as pd
from ddtrace.trace import tracer

from analysis.models import AlignedPoint, Dataset

logger = logging.getLogger(__name__)

EPOCH_PATTERN = re.compile(r"[+-]?\d+")
YEAR_PATTERN = re.compile(r"\d{4}")
# pandas fills a missing year with year 1 and resolves relative words against the clock
EXPLICIT_YEAR_PATTERN = re.compile(r"(?<!\d)\d{4}(?!\d)")
RELATIVE_PATTERN = re.compile(r"\b(now|today|yesterday|tomorrow)\b", re.IGNORECASE)


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def to_day_key(value: Any) -> str | None:
    """Normalize a timestamp to a YYYY-MM-DD day key in UTC.

    Four-digit strings are years. Numbers and other all-digit strings are read
    as Unix epoch milliseconds. Remaining strings are handed to the pandas
    parser and must spell out a four-digit year. Naive timestamps are taken to
    be UTC already. Returns None when the value is not a usable timestamp.
    """
    if value is None or _is_bool(value):
        return None

    try:
        if isinstance(value, Real):
            if not math.isfinite(value):
                return None
            timestamp = pd.Timestamp(int(value), unit="ms", tz="UTC")
        elif isinstance(value, str):
            text = value.strip()
            if text == "":
                return None
            if YEAR_PATTERN.fullmatch(text):
                timestamp = pd.Timestamp(f"{text}-01-01")
            elif EPOCH_PATTERN.fullmatch(text):
                timestamp = pd.Timestamp(int(text), unit="ms", tz="UTC")
            elif RELATIVE_PATTERN.search(text) or not EXPLICIT_YEAR_PATTERN.search(text):
                return None
            else:
                timestamp = pd.Timestamp(text)
        else:
            return None
    except (ValueError, OverflowError, TypeError):
        return None

    if pd.isna(timestamp):
        return None

    if timestamp.tzinfo is None:
        timestamp = timestamp.tz_localize("UTC")
    else:
        timestamp = timestamp.tz_convert("UTC")
    # isoformat keeps the year zero-padded so keys sort chronologically
    return timestamp.date().isoformat()


def to_finite_float(value: Any) -> float | None:
    if value is None or _is_bool(value):
        return None

    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def daily_means(
    records: Iterable[dict[str, Any]], time_field: str, value_field: str
) -> pd.Series:
    """Average the values of each calendar day.

    Records with a missing or unusable timestamp or value are dropped. The
    result is indexed by day key and named "Value".
    """
    rows = [(record.get(time_field), record.get(value_field)) for record in records]
    # object dtype keeps the original python values for the converters
    df = pd.DataFrame(rows, columns=["Date", "Value"], dtype=object)

    df["Date"] = df["Date"].map(to_day_key)
    df["Value"] = df["Value"].map(to_finite_float)

    total = len(df.index)
    df = df.dropna().astype({"Value": float})
    skipped = total - len(df.index)
    if skipped:
        logger.debug(
            "Skipped %d of %d rows without a valid %s/%s",
            skipped,
            total,
            time_field,
            value_field,
        )
    return df.groupby("Date")["Value"].mean()


def align_records(
    records1: Iterable[dict[str, Any]],
    time_field1: str,
    value_field1: str,
    records2: Iterable[dict[str, Any]],
    time_field2: str,
    value_field2: str,
) -> list[AlignedPoint]:
    daily1 = daily_means(records1, time_field1, value_field1)
    daily2 = daily_means(records2, time_field2, value_field2)

    # Only days present in both datasets survive
    merged = pd.merge(
        daily1.rename("value1").reset_index(),
        daily2.rename("value2").reset_index(),
        on="Date",
        how="inner",
    )
    merged = merged.sort_values("Date")

    return [
        AlignedPoint(date=date, value1=value1, value2=value2)
        for date, value1, value2 in zip(
            merged["Date"], merged["value1"], merged["value2"]
        )
    ]


@tracer.wrap("data_processing.align_datasets")
def align_datasets(dataset1: Dataset, dataset2: Dataset) -> list[AlignedPoint]:
    """Pair the daily means of two datasets, sorted ascending by day."""
    aligned = align_records(
        dataset1.records,
        dataset1.time_field,
        dataset1.value_field,
        dataset2.records,
        dataset2.time_field,
        dataset2.value_field,
    )
    logger.info(
        "Aligned %s and %s on %d common days",
        dataset1.name,
        dataset2.name,
        len(aligned),
    )
    return aligned
