"""
Unit tests for data loading and column normalisation.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch, MagicMock

import pandas as pd
import requests

from drug_dashboard.data.loader import (
    DataLoadError, is_url, resolve_source, read_csv, normalize_columns, melt_year_columns,
    load_cleaned_data, load_age_year_table, load_jurisdiction_totals, load_geojson,
)
from tests.fixtures.sample_data import AGE_YEAR_CSV, create_sample_data_dir


class LoaderTestCase(unittest.TestCase):
    """Writes the sample sources to a temporary data directory."""

    def setUp(self):
        self.data_dir = create_sample_data_dir(Path(tempfile.mkdtemp()))

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)


class TestSources(LoaderTestCase):

    def test_is_url(self):
        self.assertTrue(is_url("https://example.org/data.csv"))
        self.assertTrue(is_url("HTTP://example.org/data.csv"))
        self.assertFalse(is_url("data/cleanedData.csv"))

    def test_bare_name_resolves_into_data_dir(self):
        self.assertEqual(resolve_source("cleanedData.csv", self.data_dir),
                         self.data_dir / "cleanedData.csv")

    def test_missing_file(self):
        with self.assertRaises(DataLoadError):
            read_csv("nothing.csv", self.data_dir)

    @patch('drug_dashboard.data.loader.requests.get')
    def test_url_source(self, mock_get):
        response = MagicMock()
        response.text = "JURISDICTION,Sum(COUNT)\nNSW,3\n"
        mock_get.return_value = response

        df = read_csv("https://example.org/Chart1Data.csv")

        self.assertEqual(len(df), 1)
        self.assertEqual(mock_get.call_args.kwargs['timeout'], 15)

    @patch('drug_dashboard.data.loader.requests.get')
    def test_http_error(self, mock_get):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        mock_get.return_value = response

        with self.assertRaises(DataLoadError):
            read_csv("https://example.org/missing.csv")


class TestNormalizeColumns(unittest.TestCase):

    def test_aliases_and_coercion(self):
        raw = pd.DataFrame({
            'YEAR': ['2023', 'x'],
            'State': [' NSW ', None],
            'Sum(COUNT)': ['4', ''],
            'BEST_DETECTION_METHOD': ['Yes', 'NO'],
            'Cannabis': ['Yes', None],
        })
        df = normalize_columns(raw)

        self.assertEqual(df['year'].tolist(), [2023, 0])
        self.assertEqual(df['jurisdiction'].tolist(), ['NSW', ''])
        self.assertEqual(df['count'].tolist(), [4, 0])
        self.assertEqual(df['best_detection_method'].tolist(), ['yes', 'no'])
        self.assertEqual(df['jurisdiction_name'].tolist(), ['new south wales', ''])
        self.assertEqual(df['cannabis'].tolist(), ['Yes', ''])

    def test_missing_columns_are_created_empty(self):
        df = normalize_columns(pd.DataFrame({'JURISDICTION': ['VIC'], 'COUNT': ['1']}))

        self.assertEqual(df['year'].tolist(), [0])
        self.assertEqual(df['location'].tolist(), [''])
        self.assertEqual(df['ecstasy'].tolist(), [''])

    def test_first_non_empty_alias_wins(self):
        raw = pd.DataFrame({'count': [None, None], 'COUNT': ['2', '3']})
        self.assertEqual(normalize_columns(raw)['count'].tolist(), [2, 3])


class TestLoaders(LoaderTestCase):

    def test_cleaned_data(self):
        df = load_cleaned_data(data_dir=self.data_dir)

        self.assertEqual(len(df), 8)
        self.assertEqual(df['count'].sum(), 151)
        nsw = df[df['jurisdiction_name'] == 'new south wales']
        self.assertEqual(nsw['count'].sum(), 17)

    def test_jurisdiction_totals(self):
        df = load_jurisdiction_totals(data_dir=self.data_dir)
        self.assertEqual(df['jurisdiction'].tolist(), ['NSW', 'VIC', 'QLD', 'TAS'])
        self.assertEqual(df['count'].tolist(), [60, 25, 15, 0])

    def test_jurisdiction_totals_without_jurisdiction(self):
        (self.data_dir / 'Chart1Data.csv').write_text(AGE_YEAR_CSV)
        with self.assertRaises(DataLoadError):
            load_jurisdiction_totals(data_dir=self.data_dir)

    def test_age_year_table(self):
        (self.data_dir / 'Chart1Data.csv').write_text(AGE_YEAR_CSV)
        long = load_age_year_table(data_dir=self.data_dir)

        self.assertEqual(set(long.columns), {'age_group', 'year', 'count'})
        self.assertEqual(len(long), 6)
        blank = long[(long['age_group'] == '26-39') & (long['year'] == 2024)]
        self.assertEqual(int(blank['count'].iloc[0]), 0)

    def test_melt_without_year_columns(self):
        with self.assertRaises(DataLoadError):
            melt_year_columns(pd.DataFrame({'AGE_GROUP': ['17-25'], 'total': ['1']}))

    def test_geojson_ids(self):
        geo = load_geojson(data_dir=self.data_dir)
        ids = [f['id'] for f in geo['features']]
        self.assertIn('new south wales', ids)
        self.assertIn('northern territory', ids)

    def test_geojson_without_features(self):
        (self.data_dir / 'australia_states.geojson').write_text(json.dumps({'type': 'FeatureCollection', 'features': []}))
        with self.assertRaises(DataLoadError):
            load_geojson(data_dir=self.data_dir)

    def test_geojson_invalid_json(self):
        (self.data_dir / 'australia_states.geojson').write_text("{not json")
        with self.assertRaises(DataLoadError):
            load_geojson(data_dir=self.data_dir)


if __name__ == '__main__':
    unittest.main()
