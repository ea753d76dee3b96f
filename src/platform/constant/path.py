from pathlib import Path


# Repository root (src/platform/constant/path.py -> ../../..)
BASE_DIR = Path(__file__).resolve().parents[3]

# Rotated log files, written only when DEBUG is on
LOG_DIR = BASE_DIR / 'logs'
