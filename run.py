#!/usr/bin/env python3
"""
Drug Testing Dashboard - Main CLI Entry Point
=============================================

Single command-line entry point for the dashboard.  Two modes:

DASHBOARD (default)  (launch_dashboard)
    Spawns a Streamlit subprocess running dashboard.py, the multi-page app
    with the age group, jurisdiction, detection method, location and
    dominant drug views.  The data directory is handed to the subprocess
    through the DRUG_DASHBOARD_DATA_DIR environment variable.

EXPORT  (run_export)
    Renders every figure to a standalone HTML file and writes the aggregated
    tables to summary.xlsx in the given directory, without starting a server.

Usage:
    python run.py                        Launch the dashboard on port 8501
    python run.py --port 8502            Use a custom port
    python run.py --no-browser           Do not open a browser tab
    python run.py --data-dir ./data      Read the CSV / GeoJSON files from ./data
    python run.py --export out/          Write HTML figures + summary.xlsx to out/
"""

import logging
import sys
import os
import subprocess
import argparse
import webbrowser
import threading
from pathlib import Path
import time
import atexit
import socket

from drug_dashboard.core.utils import setup_logging
from drug_dashboard.data.loader import DataLoadError

logger = logging.getLogger(__name__)

DATA_DIR_ENV = 'DRUG_DASHBOARD_DATA_DIR'


def parse_args(argv=None):
    """
    Parse and return command-line arguments.

    Args:
        argv: Argument list; defaults to ``sys.argv[1:]``.

    Returns:
        argparse.Namespace with the parsed flags.
    """
    parser = argparse.ArgumentParser(
        description='Drug Testing Dashboard - Australian roadside drug testing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                     Launch the dashboard
  python run.py --port 8502         Use custom port for dashboard
  python run.py --data-dir ./data   Read input files from ./data
  python run.py --export out/       Export HTML figures and summary.xlsx
        """
    )

    parser.add_argument(
        '--port',
        type=int,
        default=8501,
        help='Port for Streamlit dashboard (default: 8501)'
    )

    parser.add_argument(
        '--no-browser',
        action='store_true',
        help='Do not automatically open browser'
    )

    parser.add_argument(
        '--export',
        metavar='DIR',
        type=str,
        help='Export figures (HTML) and summary.xlsx to DIR instead of launching the dashboard'
    )

    parser.add_argument(
        '--data-dir',
        metavar='DIR',
        type=str,
        help=f'Directory or base URL holding the input files (default: ${DATA_DIR_ENV} or ./data)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed logging output'
    )

    return parser.parse_args(argv)


def port_in_use(port: int) -> bool:
    """True when something already accepts connections on localhost:port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        return sock.connect_ex(('localhost', port)) == 0
    finally:
        sock.close()


def build_streamlit_command(dashboard_path: Path, port: int) -> list:
    return [
        sys.executable, "-m", "streamlit", "run",
        str(dashboard_path),
        "--server.port", str(port),
        "--server.headless", "true",
        "--browser.gatherUsageStats", "false",
        "--theme.base", "light",
        "--theme.primaryColor", "#00176B",
    ]


def launch_dashboard(port: int = 8501, open_browser: bool = True, data_dir=None):
    """
    Launch the Streamlit dashboard as a managed subprocess.

    The server runs headless; the browser is opened from a daemon thread
    after a short delay.  An atexit handler terminates the subprocess on
    exit, killing it if it does not stop within 5 seconds.

    Args:
        port: TCP port for the Streamlit HTTP server.
        open_browser: Open http://localhost:{port} once the server is up.
        data_dir: Input directory or base URL passed to the app via
                  DRUG_DASHBOARD_DATA_DIR.

    Returns:
        bool: True if the dashboard ran and exited cleanly (including Ctrl+C),
              False on errors (missing entry script, port conflict, ...).
    """
    print()
    print("=" * 60)
    print("  Launching Drug Testing Dashboard")
    print("=" * 60)
    print()

    dashboard_path = Path(__file__).parent / "dashboard.py"
    if not dashboard_path.exists():
        print(f"Error: Dashboard not found at {dashboard_path}")
        return False

    try:
        if port_in_use(port):
            print(f"Port {port} is already in use. Please use a different port with --port")
            return False
    except OSError as e:
        logger.warning(f"Could not check port status: {e}")

    env = os.environ.copy()
    if data_dir:
        env[DATA_DIR_ENV] = str(data_dir)
        print(f"  Data directory: {data_dir}")

    print(f"  Starting Streamlit server on port {port}...")
    print(f"  URL: http://localhost:{port}")
    print()
    print("  Press Ctrl+C to stop the dashboard")
    print("-" * 60)
    sys.stdout.flush()

    cmd = build_streamlit_command(dashboard_path, port)
    streamlit_process = None

    def cleanup():
        """Terminate the Streamlit subprocess, then kill it after 5 seconds."""
        nonlocal streamlit_process
        if streamlit_process and streamlit_process.poll() is None:
            print("\nCleaning up dashboard process...")
            streamlit_process.terminate()
            try:
                streamlit_process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                print("   Force killing process...")
                streamlit_process.kill()

    atexit.register(cleanup)

    try:
        if open_browser:
            def open_browser_delayed():
                time.sleep(3)  # server needs a moment to bind the port
                try:
                    webbrowser.open(f"http://localhost:{port}")
                except webbrowser.Error as e:
                    logger.warning(f"Failed to open browser: {e}")

            threading.Thread(target=open_browser_delayed, daemon=True).start()

        streamlit_process = subprocess.Popen(cmd, env=env)
        streamlit_process.wait()
        return True

    except KeyboardInterrupt:
        print("\n\nDashboard stopped by user.")
        cleanup()
        return True
    except FileNotFoundError:
        print("\nStreamlit not found. Install with: pip install streamlit plotly")
        return False
    except OSError as e:
        print(f"\nError launching dashboard: {e}")
        logger.error("Dashboard launch failed", exc_info=True)
        cleanup()
        return False


def run_export(out_dir: str, data_dir=None) -> bool:
    """
    Write every figure as HTML plus summary.xlsx into ``out_dir``.

    Returns:
        bool: False when the main data file could not be loaded.
    """
    from drug_dashboard.reports.export import export_all

    print()
    print("=" * 60)
    print(f"  Exporting figures to {out_dir}")
    print("=" * 60)

    try:
        result = export_all(out_dir, data_dir=data_dir)
    except DataLoadError as e:
        logger.error(f"Export failed: {e}")
        print(f"\nExport failed: {e}")
        return False

    print(f"\n  {len(result['figures'])} figures written")
    print(f"  Summary workbook: {result['workbook']}")
    return True


def main(argv=None):
    """Parse CLI args and dispatch to export or dashboard mode."""
    args = parse_args(argv)
    log_file = setup_logging(verbose=args.verbose)
    if args.verbose:
        print(f"Verbose logging enabled. Log file: {log_file}")

    try:
        if args.export:
            success = run_export(args.export, data_dir=args.data_dir)
        else:
            success = launch_dashboard(port=args.port, open_browser=not args.no_browser,
                                       data_dir=args.data_dir)
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(0)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
