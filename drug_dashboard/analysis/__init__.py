"""
Analysis module for the Drug Testing Dashboard.

Contains the shared group-by-sum pipeline and the per-chart datasets built on it.
"""

from .aggregation import (
    TOTAL,
    group_sum,
    totals_by,
    pareto_table,
    sort_desc_by_total,
    sort_by_order,
    sort_alphabetical,
    safe_rate,
)
from .chart_data import (
    filter_rows,
    available_years,
    available_jurisdictions,
    age_group_tests,
    age_group_positives,
    jurisdiction_pareto,
    classify_stage,
    stage_by_year,
    detection_method_totals,
    location_options,
    location_stats,
    is_overview,
    jurisdiction_totals,
    dominant_drugs,
)

__all__ = [
    'TOTAL',
    'group_sum',
    'totals_by',
    'pareto_table',
    'sort_desc_by_total',
    'sort_by_order',
    'sort_alphabetical',
    'safe_rate',
    'filter_rows',
    'available_years',
    'available_jurisdictions',
    'age_group_tests',
    'age_group_positives',
    'jurisdiction_pareto',
    'classify_stage',
    'stage_by_year',
    'detection_method_totals',
    'location_options',
    'location_stats',
    'is_overview',
    'jurisdiction_totals',
    'dominant_drugs',
]
