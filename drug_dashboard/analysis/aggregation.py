"""
Group-by-sum aggregation shared by every chart.

Every chart in the dashboard reduces the row-level table the same way: pick
one or more categorical keys, sum a measure column, and make sure that key
combinations with no rows still show up as an explicit zero.  The helpers in
this module are that one pipeline; chart_data.py only chooses keys, filters
and sort policies.

Contract
--------
* Rows with a blank key (NaN, "", whitespace) are excluded from grouping.
* Measure values that do not parse as numbers count as 0.
* With ``complete=True`` (or explicit ``levels``) the result is the full
  Cartesian product of key levels; absent combinations hold 0, never NaN.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence

import pandas as pd

logger = logging.getLogger(__name__)

TOTAL = 'total'


def drop_blank_keys(df: pd.DataFrame, keys: Sequence[str]) -> pd.DataFrame:
    """Return ``df`` without rows whose value in any key column is blank."""
    mask = pd.Series(True, index=df.index)
    for key in keys:
        col = df[key]
        mask &= col.notna() & col.astype(str).str.strip().ne('')
    return df[mask]


def group_sum(df: pd.DataFrame,
              keys: Sequence[str],
              measure: str = 'count',
              levels: Optional[Dict[str, Iterable]] = None,
              complete: bool = False) -> pd.DataFrame:
    """Sum ``measure`` per unique combination of ``keys``.

    Parameters
    ----------
    df : pd.DataFrame
        Row-level table.  Must contain every column in ``keys`` and ``measure``.
    keys : sequence of str
        Grouping columns, outermost first.
    measure : str, default 'count'
        Column to sum.  Coerced to numbers; failures count as 0.
    levels : dict, optional
        Explicit level list per key.  Keys given here are reindexed to exactly
        these levels (rows outside them are dropped); other keys use the
        observed non-blank values.  Implies ``complete=True``.
    complete : bool, default False
        Reindex to the Cartesian product of levels, filling gaps with 0.

    Returns
    -------
    pd.DataFrame
        Columns ``keys + ['total']``.  Totals are integers when the measure
        holds only whole numbers.
    """
    keys = list(keys)
    rows = drop_blank_keys(df, keys).copy()
    rows[measure] = pd.to_numeric(rows[measure], errors='coerce').fillna(0).astype(float)

    grouped = rows.groupby(keys, sort=True)[measure].sum()

    if levels or complete:
        levels = dict(levels or {})
        level_lists = []
        for key in keys:
            if key in levels:
                level_lists.append(list(levels[key]))
            else:
                level_lists.append(sorted(rows[key].unique().tolist()))
        if len(keys) == 1:
            index = pd.Index(level_lists[0], name=keys[0])
        else:
            index = pd.MultiIndex.from_product(level_lists, names=keys)
        grouped = grouped.reindex(index, fill_value=0)

    result = grouped.rename(TOTAL).reset_index()
    totals = result[TOTAL].astype(float).fillna(0)
    if (totals == totals.round()).all():
        totals = totals.round().astype(int)
    result[TOTAL] = totals
    logger.debug(f"group_sum by {keys}: {len(rows)} rows -> {len(result)} groups")
    return result


def totals_by(df: pd.DataFrame, key: str, measure: str = 'count') -> Dict[str, float]:
    """``{key value: total}`` for a single grouping key."""
    table = group_sum(df, [key], measure)
    return dict(zip(table[key], table[TOTAL]))


# ============================================================================
# SORT POLICIES
# ============================================================================

def sort_desc_by_total(table: pd.DataFrame, column: str = TOTAL) -> pd.DataFrame:
    """Largest first (Pareto-style).  Stable, so ties keep their key order."""
    return table.sort_values(column, ascending=False, kind='mergesort').reset_index(drop=True)


def sort_by_order(table: pd.DataFrame, column: str, order: Sequence[str]) -> pd.DataFrame:
    """Sort by a fixed category order; unknown values follow alphabetically."""
    known = {value: i for i, value in enumerate(order)}
    extras = sorted(v for v in table[column].unique() if v not in known)
    rank = {**known, **{v: len(order) + i for i, v in enumerate(extras)}}
    return (
        table.assign(_rank=table[column].map(rank))
        .sort_values('_rank', kind='mergesort')
        .drop(columns='_rank')
        .reset_index(drop=True)
    )


def sort_alphabetical(table: pd.DataFrame, column: str) -> pd.DataFrame:
    return table.sort_values(column, kind='mergesort').reset_index(drop=True)


# ============================================================================
# PARETO
# ============================================================================

def pareto_table(df: pd.DataFrame, key: str, measure: str = 'count') -> pd.DataFrame:
    """Totals per ``key`` sorted descending with a cumulative-percentage column.

    Keys whose total is not positive are dropped.  ``cum_pct`` is the running
    total over the grand total times 100, so it is non-decreasing and the last
    row is 100.

    Returns
    -------
    pd.DataFrame
        Columns ``[key, 'total', 'cum_pct']``; empty when nothing is positive.
    """
    table = group_sum(df, [key], measure)
    table = table[table[TOTAL] > 0]
    table = sort_desc_by_total(table)
    grand_total = table[TOTAL].sum()
    if grand_total <= 0:
        return table.assign(cum_pct=pd.Series(dtype=float))
    table['cum_pct'] = table[TOTAL].cumsum() / grand_total * 100
    return table


def safe_rate(numerator, denominator) -> float:
    """Percentage ``numerator / denominator * 100``; 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator) * 100
