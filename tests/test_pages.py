"""
Script-level tests for the Streamlit pages.

Each page is executed headless with streamlit's AppTest runner against a
temporary data directory:
- A missing source renders the placeholder instead of failing the page
- The year filter never becomes empty
- Reset restores the filter defaults and clears chart selections
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from streamlit.testing.v1 import AppTest

from drug_dashboard.dashboard.selection import SelectionState
from drug_dashboard.dashboard.sidebar import YEARS_KEY, JURISDICTIONS_KEY, SORT_KEY
from tests.fixtures.sample_data import create_sample_data_dir

# Marker of the load-failure box; the injected CSS only names the class.
PLACEHOLDER = 'class="chart-placeholder"'

DASHBOARD_DIR = Path(__file__).parent.parent / 'drug_dashboard' / 'dashboard'
PAGES = [
    DASHBOARD_DIR / 'app.py',
    DASHBOARD_DIR / 'pages' / 'age_groups.py',
    DASHBOARD_DIR / 'pages' / 'jurisdictions.py',
    DASHBOARD_DIR / 'pages' / 'detection_methods.py',
    DASHBOARD_DIR / 'pages' / 'locations.py',
    DASHBOARD_DIR / 'pages' / 'dominant_drug.py',
]


class PageTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def run_page(self, page, data_dir):
        at = AppTest.from_file(str(page), default_timeout=30)
        at.session_state['data_dir'] = str(data_dir)
        return at.run()


class TestMissingData(PageTestCase):

    def test_every_page_shows_placeholder(self):
        empty = self.temp_dir / 'empty'
        empty.mkdir()

        for page in PAGES:
            with self.subTest(page=page.name):
                at = self.run_page(page, empty)

                self.assertFalse(at.exception)
                self.assertTrue(any(PLACEHOLDER in md.value for md in at.markdown))


class TestSidebar(PageTestCase):

    def setUp(self):
        super().setUp()
        self.data_dir = create_sample_data_dir(self.temp_dir / 'data')

    def test_pages_render_with_sample_data(self):
        for page in PAGES:
            with self.subTest(page=page.name):
                at = self.run_page(page, self.data_dir)
                self.assertFalse(at.exception)
                self.assertFalse(any(PLACEHOLDER in md.value for md in at.markdown))

    def test_defaults_to_newest_year(self):
        at = self.run_page(PAGES[0], self.data_dir)
        self.assertEqual(at.multiselect(key=YEARS_KEY).value, [2024])
        self.assertEqual(at.session_state['filters'].years, [2024])

    def test_last_year_cannot_be_removed(self):
        at = self.run_page(PAGES[0], self.data_dir)

        at.multiselect(key=YEARS_KEY).set_value([]).run()

        self.assertFalse(at.exception)
        self.assertEqual(at.multiselect(key=YEARS_KEY).value, [2024])
        self.assertEqual(at.session_state['filters'].years, [2024])

    def test_reset_restores_defaults_and_clears_selections(self):
        at = self.run_page(PAGES[2], self.data_dir)
        at.multiselect(key=YEARS_KEY).set_value([2023, 2024])
        at.multiselect(key=JURISDICTIONS_KEY).set_value(['VIC'])
        at.radio(key=SORT_KEY).set_value('asc')
        selection = SelectionState('pareto')
        selection.toggle('VIC')
        at.session_state['selection_pareto'] = selection
        at.run()

        self.assertEqual(at.session_state['filters'].jurisdictions, ['VIC'])
        self.assertEqual(at.session_state['selection_pareto'].selected, 'VIC')

        reset = [b for b in at.button if b.label == 'Reset filters'][0]
        reset.click().run()

        self.assertFalse(at.exception)
        self.assertEqual(at.multiselect(key=YEARS_KEY).value, [2024])
        self.assertEqual(at.multiselect(key=JURISDICTIONS_KEY).value, [])
        self.assertEqual(at.radio(key=SORT_KEY).value, 'desc')
        self.assertIsNone(at.session_state['selection_pareto'].selected)


if __name__ == '__main__':
    unittest.main()
