import logging
import math
from typing import Any, List, Optional

from covid_views.dataframe import DataFrame

logger = logging.getLogger(__name__)


def _as_number(value: Any, integer: bool) -> Optional[float]:
    # None for anything that is not a usable number
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value) if integer else value


def running_total(df: DataFrame, value: str, partition: str = "location", order: str = "date",
                  name: Optional[str] = None, integer: bool = False) -> DataFrame:
    """
    Windowed SUM(value) OVER (PARTITION BY partition ORDER BY order).

    Rows are neither dropped nor moved: the returned frame is ``df`` plus one
    column aligned with the input rows. Within a partition rows are visited
    in ascending ``order``; rows sharing an order value are summed in input
    order, each getting its own running value. Missing values count as 0 and
    non-numeric ones are counted as 0 with a warning. ``integer`` truncates
    every value before it is added.
    """
    name = name or f"cumulative_{value}"
    for col in (value, partition, order):
        if col not in df.columns:
            raise KeyError(f"Column '{col}' not found. Available: {df.columns}")

    totals: List[Any] = [None] * len(df)
    if len(df) == 0:
        return df.with_column(name, totals)

    values = df[value]
    order_col = df[order]
    bad = 0
    for idxs in df.groupby(partition).groups.values():
        # sorted() is stable, so equal dates keep input order
        idxs = sorted(idxs, key=lambda i: (order_col[i] is None, order_col[i] if order_col[i] is not None else 0))
        acc = 0
        for i in idxs:
            raw = values[i]
            num = _as_number(raw, integer)
            if num is None and raw is not None:
                bad += 1
            acc += num or 0
            totals[i] = acc

    if bad:
        logger.warning("Treated %d non-numeric '%s' values as 0 in running total", bad, value)

    return df.with_column(name, totals)


def safe_ratio(numerator: Any, denominator: Any) -> Optional[float]:
    """``numerator / denominator * 100``, or None when it is undefined."""
    num = _as_number(numerator, False)
    den = _as_number(denominator, False)
    if num is None or den is None or den == 0:
        return None
    return num / den * 100


def with_ratio(df: DataFrame, numerator: str, denominator: str, name: str) -> DataFrame:
    return df.with_column(name, [safe_ratio(n, d) for n, d in zip(df[numerator], df[denominator])])
