"""
Settings and configuration for Yomikata.

Values are read once from the environment at import time.
"""

import os
from pathlib import Path

# Data directory paths
PACKAGE_DIR = Path(__file__).parent
DATA_DIR = PACKAGE_DIR / "data"

# Database - defaults to a SQLite file in data/
DEFAULT_DB_PATH = DATA_DIR / "yomikata.db"
DB_URL = os.environ.get("YOMIKATA_DB_URL", f"sqlite+aiosqlite:///{DEFAULT_DB_PATH}")

# Debug mode (SQL echo + debug logging)
DEBUG = os.environ.get("YOMIKATA_DEBUG", "").lower() in ("1", "true", "yes")

# Optional morphological tokenizer used as a secondary ranking signal
TOKENIZER_ENABLED = os.environ.get("YOMIKATA_TOKENIZER", "").lower() in ("1", "true", "yes")

# Sudachi split mode for the tokenizer ("A", "B" or "C")
TOKENIZER_SPLIT_MODE = os.environ.get("YOMIKATA_TOKENIZER_MODE", "C")

# ----------------------------------------------------------------------------
# Reading links
# ----------------------------------------------------------------------------

# Maximum number of example words linked to a kanji's kun readings
KUN_LINK_LIMIT = 10

# Maximum number of example words linked to a kanji's on readings
ON_LINK_LIMIT = 9

# Kanji whose kun links are written concurrently
KUN_UPDATE_BATCH = 100

# Kanji whose on links are looked up and written concurrently
ON_BATCH_SIZE = 50

# ----------------------------------------------------------------------------
# Search
# ----------------------------------------------------------------------------

# A narrow reading search returning this many or fewer results is widened
NARROW_RESULT_THRESHOLD = 2

# Words per result page
PAGE_SIZE = 10

# Words whose kanji are loaded for the kanji info box
KANJI_INFO_WORDS = 10

# Default user language for senses
DEFAULT_LANGUAGE = "eng"


def ensure_data_dirs():
    """Create necessary data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
