"""
Unit tests for the non-map figure builders.

Figures are inspected through their trace properties; nothing is rendered.
"""

import unittest

import pandas as pd

from drug_dashboard.analysis.chart_data import (
    age_group_tests, stage_by_year, detection_method_totals, location_stats,
    jurisdiction_pareto,
)
from drug_dashboard.core.config import (
    AGE_BAR_OPACITY, COMPARE_BAR_OPACITY, BAR_OPACITY, POINT_OPACITY, SELECTED_STROKE,
    STAGE_INDICATOR, STAGE_CONFIRMATORY, RADAR_SELECTED_COLOR, RADAR_POINT_SIZE,
)
from drug_dashboard.dashboard.selection import SelectionState, clicked_point
from drug_dashboard.visualization.charts import (
    COMPARE_TRENDS, no_data_figure, chart_age_group_tests, chart_jurisdiction_pareto,
    chart_detection_layered, chart_detection_stacked, chart_detection_methods,
    chart_location_radar,
)
from tests.fixtures.sample_data import create_sample_rows


def _positive_bars(fig):
    return [t for t in fig.data if t.type == 'bar' and 'Positive' in t.name]


def _lines(fig):
    return [t for t in fig.data if t.type == 'scatter']


class FigureTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.df = create_sample_rows()


class TestNoData(unittest.TestCase):

    def test_message_annotation(self):
        fig = no_data_figure('Title', 'Nothing here')
        self.assertEqual(len(fig.data), 0)
        self.assertEqual(fig.layout.annotations[0].text, 'Nothing here')

    def test_empty_tables_render_placeholder(self):
        empty = pd.DataFrame(columns=['age_group', 'year', 'total_tests', 'positive', 'rate'])
        self.assertEqual(len(chart_age_group_tests(empty).data), 0)
        self.assertEqual(len(chart_detection_methods(
            pd.DataFrame(columns=['detection_method', 'total'])).data), 0)
        self.assertEqual(len(chart_location_radar(
            pd.DataFrame(columns=['location', 'total', 'positive', 'rate'])).data), 0)


class TestAgeChart(FigureTestCase):

    def setUp(self):
        self.table = age_group_tests(self.df)
        self.selection = SelectionState('age', opacity=AGE_BAR_OPACITY)

    def test_resting_state(self):
        fig = chart_age_group_tests(self.table, self.selection)

        self.assertEqual(len(_positive_bars(fig)), 2)
        self.assertEqual(len([t for t in fig.data if t.type == 'bar']), 4)
        self.assertEqual(_lines(fig), [])
        for bar in _positive_bars(fig):
            self.assertEqual(bar.opacity, AGE_BAR_OPACITY['base'])

    def test_year_selected_draws_its_trend(self):
        self.selection.toggle(2024)
        fig = chart_age_group_tests(self.table, self.selection)

        opacity = {bar.customdata[0][0]: bar.opacity for bar in _positive_bars(fig)}
        self.assertEqual(opacity[2024], AGE_BAR_OPACITY['selected'])
        self.assertEqual(opacity[2023], AGE_BAR_OPACITY['dimmed'])
        self.assertEqual([t.name for t in _lines(fig)], ['2024 trend'])

    def test_compare_draws_both_trends(self):
        self.selection.toggle(COMPARE_TRENDS)
        fig = chart_age_group_tests(self.table, self.selection)

        lines = _lines(fig)
        self.assertEqual([t.name for t in lines], ['2023 trend', '2024 trend'])
        self.assertEqual(lines[0].line.dash, 'dash')
        self.assertEqual(lines[1].line.dash, 'solid')
        for bar in _positive_bars(fig):
            self.assertEqual(bar.opacity, COMPARE_BAR_OPACITY)

    def test_toggle_twice_restores_figure(self):
        before = chart_age_group_tests(self.table, self.selection).to_dict()['data']
        self.selection.toggle(2023)
        self.selection.toggle(2023)
        after = chart_age_group_tests(self.table, self.selection).to_dict()['data']
        self.assertEqual(before, after)

    def test_low_sample_box(self):
        fig = chart_age_group_tests(self.table)
        self.assertEqual(len(fig.layout.shapes), 1)
        self.assertIn('Low sample size', fig.layout.annotations[0].text)

    def test_click_on_total_bar_selects_its_year(self):
        fig = chart_age_group_tests(self.table, self.selection)
        totals = [t for t in fig.data if t.type == 'bar' and 'Total' in t.name]
        self.assertEqual(len(totals), 2)

        point = {'customdata': list(totals[1].customdata[0]), 'x': totals[1].x[0]}
        self.selection.sync(clicked_point({'selection': {'points': [point]}}, ('customdata',)))
        self.assertEqual(self.selection.selected, 2024)

    def test_positives_only_table_skips_total_bars(self):
        table = self.table.assign(total_tests=0)
        fig = chart_age_group_tests(table)
        self.assertEqual(len([t for t in fig.data if t.type == 'bar']), 2)


class TestParetoChart(unittest.TestCase):

    def setUp(self):
        totals = pd.DataFrame({'jurisdiction': ['NSW', 'VIC', 'QLD'], 'count': [60, 25, 15]})
        self.table = jurisdiction_pareto(totals)
        self.selection = SelectionState('pareto')

    def test_axes_and_reference_line(self):
        fig = chart_jurisdiction_pareto(self.table, self.selection)

        bar, line = fig.data
        self.assertEqual(list(bar.x), ['NSW', 'VIC', 'QLD'])
        self.assertEqual(line.yaxis, 'y2')
        self.assertEqual(list(fig.layout.yaxis2.range), [0, 105])
        self.assertEqual(fig.layout.shapes[0].y0, 80)

    def test_selection_emphasis(self):
        self.selection.toggle('VIC')
        bar, line = chart_jurisdiction_pareto(self.table, self.selection).data

        self.assertEqual(list(bar.marker.opacity),
                         [BAR_OPACITY['dimmed'], BAR_OPACITY['selected'], BAR_OPACITY['dimmed']])
        self.assertEqual(bar.marker.line.color[1], SELECTED_STROKE)
        self.assertEqual(list(line.marker.opacity),
                         [POINT_OPACITY['dimmed'], POINT_OPACITY['base'], POINT_OPACITY['dimmed']])

    def test_click_key_in_customdata(self):
        bar = chart_jurisdiction_pareto(self.table).data[0]
        self.assertEqual([c[0] for c in bar.customdata], ['NSW', 'VIC', 'QLD'])


class TestDetectionCharts(FigureTestCase):

    def setUp(self):
        self.wide = stage_by_year(self.df)
        self.selection = SelectionState('stages')

    def test_layered_draw_order(self):
        fig = chart_detection_layered(self.wide)
        self.assertEqual([t.name for t in fig.data], [
            'Stage 1 - Indicator', 'Stage 3 - Laboratory', 'Stage 2 - Confirmatory',
        ])
        self.assertTrue(all(t.fill == 'tozeroy' for t in fig.data))

    def test_layered_highlight(self):
        self.selection.toggle(STAGE_CONFIRMATORY)
        fig = chart_detection_layered(self.wide, self.selection)
        fills = {t.name: t.fillcolor for t in fig.data}

        self.assertTrue(fills[STAGE_CONFIRMATORY].endswith(',0.85)'))
        self.assertTrue(fills[STAGE_INDICATOR].endswith(',0.08)'))

    def test_stacked_has_total_hover_trace(self):
        fig = chart_detection_stacked(self.wide)

        stacked = [t for t in fig.data if t.stackgroup == 'stages']
        self.assertEqual(len(stacked), 3)
        total = fig.data[-1]
        self.assertEqual(total.name, 'Total')
        self.assertEqual(list(total.y), list(self.wide.sum(axis=1)))

    def test_all_zero_is_placeholder(self):
        zero = self.wide * 0
        self.assertEqual(len(chart_detection_layered(zero).data), 0)
        self.assertEqual(len(chart_detection_stacked(zero).data), 0)

    def test_methods_follow_table_order(self):
        table = detection_method_totals(self.df, ascending=True)
        fig = chart_detection_methods(table)
        self.assertEqual(list(fig.data[0].x), table['detection_method'].tolist())


class TestRadarChart(FigureTestCase):

    def setUp(self):
        self.stats = location_stats(self.df)

    def test_closed_outline(self):
        outline, points = chart_location_radar(self.stats).data
        self.assertEqual(outline.theta[0], outline.theta[-1])
        self.assertEqual(len(points.theta), len(self.stats))

    def test_selected_point(self):
        fig = chart_location_radar(self.stats, 'Remote Australia')
        points = fig.data[1]
        idx = list(points.theta).index('Remote Australia')

        self.assertEqual(points.marker.color[idx], RADAR_SELECTED_COLOR)
        self.assertEqual(points.marker.size[idx], RADAR_POINT_SIZE['selected'])
        self.assertEqual(points.marker.opacity[(idx + 1) % len(self.stats)], 0.25)

    def test_unknown_location_means_no_highlight(self):
        points = chart_location_radar(self.stats, 'Overview').data[1]
        self.assertTrue(all(o == 1.0 for o in points.marker.opacity))

    def test_metric(self):
        points = chart_location_radar(self.stats, metric='total').data[1]
        self.assertEqual(list(points.r), self.stats['total'].tolist())


if __name__ == '__main__':
    unittest.main()
