"""
Filesystem locations shared by the backend, the logging setup and mechanism IO.
"""
from __future__ import annotations

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Saved mechanisms (editor JSON) live here
USER_DIR = BASE_DIR / 'user'
