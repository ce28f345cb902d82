"""
Unit tests for run.py

Tests the entry point script:
- Argument parsing
- Logging setup
- Streamlit command construction and port checks
- Dispatch between dashboard and export modes
"""

import logging
import unittest
from unittest.mock import patch, MagicMock
from pathlib import Path
import sys
import tempfile
import shutil

# Add parent directory to path to import run module
sys.path.insert(0, str(Path(__file__).parent.parent))

import run
from drug_dashboard.core.utils import setup_logging
from drug_dashboard.data.loader import DataLoadError


class TestArgumentParsing(unittest.TestCase):
    """Test suite for command-line argument parsing."""

    def test_parse_args_defaults(self):
        """Test argument parsing with default values."""
        with patch('sys.argv', ['run.py']):
            args = run.parse_args()

            self.assertEqual(args.port, 8501)
            self.assertFalse(args.no_browser)
            self.assertFalse(args.verbose)
            self.assertIsNone(args.export)
            self.assertIsNone(args.data_dir)

    def test_parse_args_verbose(self):
        """Test argument parsing with verbose flag."""
        args = run.parse_args(['-v'])
        self.assertTrue(args.verbose)

    def test_parse_args_custom_port(self):
        """Test argument parsing with custom port."""
        args = run.parse_args(['--port', '8502'])
        self.assertEqual(args.port, 8502)

    def test_parse_args_export_and_data_dir(self):
        """Test argument parsing with export and data directories."""
        args = run.parse_args(['--export', 'out', '--data-dir', '/srv/data'])

        self.assertEqual(args.export, 'out')
        self.assertEqual(args.data_dir, '/srv/data')

    def test_parse_args_no_browser(self):
        args = run.parse_args(['--no-browser'])
        self.assertTrue(args.no_browser)

    def test_parse_args_rejects_non_integer_port(self):
        with self.assertRaises(SystemExit):
            run.parse_args(['--port', 'abc'])


class TestLogging(unittest.TestCase):
    """Test suite for logging configuration."""

    def setUp(self):
        self.test_log_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)
        if self.test_log_dir.exists():
            shutil.rmtree(self.test_log_dir)

    def test_setup_logging_creates_directory(self):
        """Test that logging setup creates the log directory and file."""
        log_dir = self.test_log_dir / "logs"
        log_file = setup_logging(verbose=False, log_dir=log_dir)

        self.assertTrue(log_dir.is_dir())
        self.assertEqual(log_file.parent, log_dir)
        self.assertTrue(log_file.name.startswith("drug_dashboard_"))

    def test_setup_logging_verbose_mode(self):
        """Test logging setup in verbose mode."""
        setup_logging(verbose=True, log_dir=self.test_log_dir)

        root_logger = logging.getLogger()
        self.assertEqual(root_logger.level, logging.DEBUG)
        self.assertEqual(len(root_logger.handlers), 2)

        console = [h for h in root_logger.handlers if not isinstance(h, logging.FileHandler)]
        self.assertEqual(console[0].level, logging.INFO)

    def test_setup_logging_twice_does_not_duplicate_handlers(self):
        setup_logging(log_dir=self.test_log_dir)
        setup_logging(log_dir=self.test_log_dir)
        self.assertEqual(len(logging.getLogger().handlers), 2)


class TestDashboardLaunch(unittest.TestCase):
    """Test suite for the Streamlit subprocess launcher."""

    def test_streamlit_command(self):
        cmd = run.build_streamlit_command(Path("dashboard.py"), 8600)

        self.assertEqual(cmd[0], sys.executable)
        self.assertEqual(cmd[1:4], ["-m", "streamlit", "run"])
        self.assertIn("8600", cmd)
        self.assertEqual(cmd[cmd.index("--server.headless") + 1], "true")

    @patch('run.port_in_use', return_value=True)
    @patch('run.subprocess.Popen')
    def test_port_in_use_aborts(self, mock_popen, mock_port):
        self.assertFalse(run.launch_dashboard(port=8501, open_browser=False))
        mock_popen.assert_not_called()

    @patch('run.atexit.register')
    @patch('run.port_in_use', return_value=False)
    @patch('run.subprocess.Popen')
    def test_data_dir_passed_through_environment(self, mock_popen, mock_port, mock_atexit):
        process = MagicMock()
        process.wait.return_value = 0
        mock_popen.return_value = process

        self.assertTrue(run.launch_dashboard(port=8501, open_browser=False, data_dir="/srv/data"))

        env = mock_popen.call_args.kwargs['env']
        self.assertEqual(env[run.DATA_DIR_ENV], "/srv/data")

    @patch('run.atexit.register')
    @patch('run.port_in_use', return_value=False)
    @patch('run.subprocess.Popen', side_effect=FileNotFoundError)
    def test_missing_streamlit(self, mock_popen, mock_port, mock_atexit):
        self.assertFalse(run.launch_dashboard(port=8501, open_browser=False))


class TestMain(unittest.TestCase):
    """Test suite for mode dispatch."""

    def setUp(self):
        self.log_patch = patch('run.setup_logging', return_value=Path('test.log'))
        self.log_patch.start()

    def tearDown(self):
        self.log_patch.stop()

    @patch('run.run_export', return_value=True)
    @patch('run.launch_dashboard')
    def test_export_mode_skips_dashboard(self, mock_launch, mock_export):
        with self.assertRaises(SystemExit) as ctx:
            run.main(['--export', 'out', '--data-dir', 'data'])

        self.assertEqual(ctx.exception.code, 0)
        mock_export.assert_called_once_with('out', data_dir='data')
        mock_launch.assert_not_called()

    @patch('run.launch_dashboard', return_value=False)
    def test_failed_launch_exits_non_zero(self, mock_launch):
        with self.assertRaises(SystemExit) as ctx:
            run.main(['--no-browser', '--port', '9000'])

        self.assertEqual(ctx.exception.code, 1)
        mock_launch.assert_called_once_with(port=9000, open_browser=False, data_dir=None)

    @patch('drug_dashboard.reports.export.export_all', side_effect=DataLoadError("missing"))
    def test_export_load_failure_returns_false(self, mock_export_all):
        self.assertFalse(run.run_export('out'))


if __name__ == '__main__':
    unittest.main()
