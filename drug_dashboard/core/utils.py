"""
Utility functions for text cleaning, value coercion and logging setup.
"""

import re
import time
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from .config import LOG_DIR, YES_TOKENS

logger = logging.getLogger(__name__)


def clean_text(text):
    """Clean and normalize a single categorical cell"""
    if pd.isna(text):
        return ""
    text = str(text).replace('\xa0', ' ').replace('\t', ' ')
    return re.sub(r'\s+', ' ', text).strip()


def clean_text_series(s: pd.Series) -> pd.Series:
    """Vectorised clean_text(): NaN and blanks become empty strings."""
    return (
        s.astype(str)
        .str.replace('\xa0', ' ', regex=False)
        .str.replace('\t', ' ', regex=False)
        .str.strip()
        .replace({'nan': '', 'None': '', 'NaN': ''})
    )


def coerce_int_series(s: pd.Series) -> pd.Series:
    """Coerce a Series to integers; anything unparsable becomes 0."""
    return pd.to_numeric(s, errors='coerce').fillna(0).astype(int)


def is_blank(value) -> bool:
    """True for NaN, None and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return str(value).strip() == ""


def is_detected(value) -> bool:
    """Return True when a drug cell marks the drug as detected.

    Row-level exports store Yes/No flags, summary exports store percentages,
    so both are accepted: a yes-like token or any number above zero.
    """
    if is_blank(value):
        return False
    token = str(value).strip().lower()
    if token in YES_TOKENS:
        return True
    try:
        return float(token) > 0
    except ValueError:
        return False


def detected_mask(s: pd.Series) -> pd.Series:
    """Boolean Series version of is_detected()."""
    return s.map(is_detected).astype(bool)


def validate_columns(df, required_cols):
    """Validate that required columns exist in dataframe"""
    missing = [c for c in required_cols if c not in df.columns]
    if missing:
        logger.warning(f"Missing columns: {missing}. Some charts may show no data.")
        return False
    return True


def setup_logging(verbose: bool = False, log_dir: Path = LOG_DIR) -> Path:
    """
    Configure the root logger with file and console handlers.

    Every run produces a dedicated log file under logs/ with a timestamp in
    the filename.  The file handler always captures DEBUG-level messages,
    while the console handler shows only warnings (or info in verbose mode).

    Args:
        verbose: When True, lower the console handler to INFO level.
        log_dir: Directory for the log file; created if missing.

    Returns:
        Path: Absolute path to the newly created log file.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = time.strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"drug_dashboard_{timestamp}.log"

    file_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Called again by main() when --verbose is passed; avoid duplicate lines.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return log_file
