"""
Per-chart datasets.

Each function here takes the normalised row-level frame (see
data.loader.normalize_columns) and returns exactly the table one figure
builder needs.  They only choose filters, keys and sort policies; the summing
itself always goes through aggregation.group_sum so every chart shares the
same blank-handling and zero-fill rules.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from ..core.config import (
    AGE_CHART_YEARS, AGE_GROUP_ORDER, DETECTION_STAGES, DETECTION_YEAR_RANGE,
    DOMINANT_DRUG_MIN_YEAR, ROADSIDE_DRUGS, STAGE_KEYWORDS, STAGE_OTHER,
    ALL_REGIONS_LABEL, OVERVIEW_LABEL,
)
from ..core.utils import detected_mask, is_blank
from ..data.jurisdictions import jurisdiction_code, jurisdiction_label, display_name
from .aggregation import (
    TOTAL, group_sum, totals_by, pareto_table, sort_by_order, sort_desc_by_total,
    sort_alphabetical, safe_rate,
)

logger = logging.getLogger(__name__)


def _is_best_detection(df: pd.DataFrame) -> pd.Series:
    return df['best_detection_method'].astype(str).str.strip().str.lower().eq('yes')


# ============================================================================
# SHARED FILTERS
# ============================================================================

def filter_rows(df: pd.DataFrame,
                years: Optional[Iterable[int]] = None,
                jurisdictions: Optional[Iterable[str]] = None,
                drugs: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """Apply the sidebar filters.

    Empty or None filters mean "all".  For ``drugs`` a row is kept when at
    least one of the selected drug columns is flagged as detected.
    """
    mask = pd.Series(True, index=df.index)
    if years:
        mask &= df['year'].isin(list(years))
    if jurisdictions:
        mask &= df['jurisdiction'].isin(list(jurisdictions))
    if drugs:
        drug_mask = pd.Series(False, index=df.index)
        for drug in drugs:
            col = str(drug).lower()
            if col in df.columns:
                drug_mask |= detected_mask(df[col])
        mask &= drug_mask
    return df[mask]


def available_years(df: pd.DataFrame) -> List[int]:
    """Distinct non-zero years, newest first."""
    return sorted((int(y) for y in df['year'].unique() if y), reverse=True)


def available_jurisdictions(df: pd.DataFrame) -> List[str]:
    return sorted(j for j in df['jurisdiction'].unique() if not is_blank(j))


# ============================================================================
# AGE GROUPS (tests vs positives)
# ============================================================================

def age_group_tests(df: pd.DataFrame,
                    years: Sequence[int] = AGE_CHART_YEARS,
                    order: Sequence[str] = AGE_GROUP_ORDER) -> pd.DataFrame:
    """Total tests and positive detections per age group and year.

    Totals sum ``count`` over every row of the year; positives only over rows
    whose best detection method is "yes".  Every observed age group gets a
    row for every year in ``years`` (0 when absent).

    Returns
    -------
    pd.DataFrame
        Columns ``age_group, year, total_tests, positive, rate`` in the fixed
        age order, then year.
    """
    base = df[df['year'].isin(list(years))]
    observed = [a for a in base['age_group'].unique() if not is_blank(a)]
    levels = {'age_group': observed, 'year': list(years)}

    totals = group_sum(base, ['age_group', 'year'], levels=levels)
    positives = group_sum(base[_is_best_detection(base)], ['age_group', 'year'], levels=levels)

    table = totals.rename(columns={TOTAL: 'total_tests'}).merge(
        positives.rename(columns={TOTAL: 'positive'}), on=['age_group', 'year'], how='left'
    )
    table['positive'] = table['positive'].fillna(0).astype(int)
    table['rate'] = [safe_rate(p, t) for p, t in zip(table['positive'], table['total_tests'])]
    table = sort_by_order(table, 'age_group', order)
    return table


def age_group_positives(long_df: pd.DataFrame,
                        years: Sequence[int] = AGE_CHART_YEARS,
                        order: Sequence[str] = AGE_GROUP_ORDER) -> pd.DataFrame:
    """Same schema as age_group_tests() from a wide positives-only export.

    The wide export carries positive counts only, so ``total_tests`` is 0 and
    the figure skips the light "total tests" bars.
    """
    base = long_df[long_df['year'].isin(list(years))]
    observed = [a for a in base['age_group'].unique() if not is_blank(a)]
    table = group_sum(base, ['age_group', 'year'],
                      levels={'age_group': observed, 'year': list(years)})
    table = table.rename(columns={TOTAL: 'positive'})
    table['total_tests'] = 0
    table['rate'] = 0.0
    table = table[['age_group', 'year', 'total_tests', 'positive', 'rate']]
    return sort_by_order(table, 'age_group', order)


# ============================================================================
# JURISDICTION PARETO
# ============================================================================

def jurisdiction_pareto(df: pd.DataFrame) -> pd.DataFrame:
    """Positive totals per jurisdiction, descending, with cumulative %.

    Spellings of the same state ("NSW", "nsw", "New South Wales") are merged
    under their upper-case code so every bar has its own label.  Adds
    ``label`` ("NSW - New South Wales") and ``name`` columns for hover text
    and the info box.
    """
    codes = df.assign(jurisdiction=df['jurisdiction'].map(jurisdiction_code))
    table = pareto_table(codes, 'jurisdiction')
    table['label'] = table['jurisdiction'].map(jurisdiction_label)
    table['name'] = table['jurisdiction'].map(display_name)
    return table


# ============================================================================
# DETECTION STAGES
# ============================================================================

def classify_stage(method) -> str:
    """Map a raw detection method to its testing stage.

    Substring rules are checked in order: indicator / stage 1, confirm /
    stage 2, lab / toxicology / stage 3.  Anything else is "Other / NA".
    """
    text = "" if is_blank(method) else str(method).lower()
    for stage, keywords in STAGE_KEYWORDS:
        if any(k in text for k in keywords):
            return stage
    return STAGE_OTHER


def stage_by_year(df: pd.DataFrame,
                  year_range=DETECTION_YEAR_RANGE,
                  stages: Sequence[str] = DETECTION_STAGES) -> pd.DataFrame:
    """Positive counts per detection stage for every year in ``year_range``.

    Returns
    -------
    pd.DataFrame
        Indexed by year (every year of the inclusive range, zero-filled) with
        one column per stage in ``stages`` order.
    """
    first, last = year_range
    years = list(range(first, last + 1))
    rows = df.assign(stage=df['detection_method'].map(classify_stage))
    rows = rows[rows['year'].between(first, last) & rows['stage'].isin(list(stages))]

    long = group_sum(rows, ['year', 'stage'], levels={'year': years, 'stage': list(stages)})
    wide = long.pivot(index='year', columns='stage', values=TOTAL)
    return wide.reindex(index=years, columns=list(stages), fill_value=0)


def detection_method_totals(df: pd.DataFrame, ascending: bool = False) -> pd.DataFrame:
    """Sum per raw detection method (blank methods excluded)."""
    table = group_sum(df, ['detection_method'])
    if ascending:
        return table.sort_values(TOTAL, kind='mergesort').reset_index(drop=True)
    return sort_desc_by_total(table)


# ============================================================================
# LOCATIONS
# ============================================================================

def _location_rows(df: pd.DataFrame) -> pd.DataFrame:
    loc = df['location'].astype(str).str.strip()
    return df[loc.ne('') & loc.str.lower().ne(ALL_REGIONS_LABEL)]


def location_options(df: pd.DataFrame) -> List[str]:
    """Dropdown options: "Overview" first, then locations alphabetically."""
    locations = sorted(
        loc for loc in _location_rows(df)['location'].unique()
        if loc.lower() != OVERVIEW_LABEL.lower()
    )
    return [OVERVIEW_LABEL] + locations


def location_stats(df: pd.DataFrame) -> pd.DataFrame:
    """Total and positive counts per location for the radar chart.

    Returns
    -------
    pd.DataFrame
        Columns ``location, total, positive, rate``, alphabetical.
    """
    rows = _location_rows(df)
    locations = sorted(rows['location'].unique())
    totals = group_sum(rows, ['location'], levels={'location': locations})
    positives = group_sum(rows[_is_best_detection(rows)], ['location'],
                          levels={'location': locations})
    table = totals.merge(positives.rename(columns={TOTAL: 'positive'}), on='location')
    table['rate'] = [safe_rate(p, t) for p, t in zip(table['positive'], table[TOTAL])]
    return sort_alphabetical(table, 'location')


def is_overview(location: Optional[str]) -> bool:
    return location is None or str(location).strip().lower() == OVERVIEW_LABEL.lower()


def jurisdiction_totals(df: pd.DataFrame, location: Optional[str] = None) -> Dict[str, float]:
    """Totals keyed by lowercase GeoJSON state name.

    Abbreviated and full spellings of the same state are merged because the
    grouping key is the normalised ``jurisdiction_name`` column.

    Args:
        df: Normalised rows.
        location: A location to filter on, or "Overview" / None for all rows.
    """
    rows = df if is_overview(location) else df[df['location'] == location]
    return totals_by(rows, 'jurisdiction_name')


# ============================================================================
# DOMINANT DRUG
# ============================================================================

def dominant_drugs(df: pd.DataFrame,
                   drugs: Sequence[str] = ROADSIDE_DRUGS,
                   min_year: int = DOMINANT_DRUG_MIN_YEAR) -> pd.DataFrame:
    """Per-state drug totals, dominant drug and drug shares.

    Only rows from ``min_year`` onwards whose best detection method is "yes"
    count.  For each drug the ``count`` of rows flagging that drug is summed.

    Returns
    -------
    pd.DataFrame
        Indexed by lowercase state name.  One column per drug (totals), one
        ``<drug>_pct`` column per drug (share of ``total``, 0-100, one decimal),
        ``total`` (sum over drugs) and ``dominant`` (largest drug, last in
        ``drugs`` order on ties, None when ``total`` is 0).
    """
    rows = df[(df['year'] >= min_year) & _is_best_detection(df)]
    states = sorted(s for s in rows['jurisdiction_name'].unique() if not is_blank(s))

    table = pd.DataFrame(index=pd.Index(states, name='jurisdiction_name'))
    for drug in drugs:
        flagged = rows[detected_mask(rows[drug])] if drug in rows.columns else rows.iloc[0:0]
        sums = group_sum(flagged, ['jurisdiction_name'], levels={'jurisdiction_name': states})
        table[drug] = sums.set_index('jurisdiction_name')[TOTAL]

    table = table.fillna(0)
    table[TOTAL] = table[list(drugs)].sum(axis=1)

    def _winner(row):
        best, best_val = None, 0
        for drug in drugs:
            if row[drug] > 0 and row[drug] >= best_val:
                best, best_val = drug, row[drug]
        return best

    table['dominant'] = table.apply(_winner, axis=1) if len(table) else pd.Series(dtype=object)
    for drug in drugs:
        table[f'{drug}_pct'] = [
            round(safe_rate(v, t), 1) for v, t in zip(table[drug], table[TOTAL])
        ]
    logger.debug(f"Dominant drug table for {len(table)} states")
    return table
