"""
Pytest configuration - runs before test collection.

Adds project root to sys.path so local modules can be imported.
Configures logging for test output.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path for local module imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Configure logging for tests
# Default to INFO level - use pytest -s --log-cli-level=DEBUG for more verbose output
logging.basicConfig(
    level=logging.INFO,
    format='%(levelname)s - %(name)s - %(message)s',
    datefmt='%H:%M:%S',
)

# Reduce noise from the solver (every project logger is a child of 'dyad_tools')
from configs.logging_config import setup_logging  # noqa: E402

setup_logging(level=logging.WARNING)


@pytest.fixture
def crank_rocker():
    from structs.basic import make_crank_rocker
    return make_crank_rocker()


@pytest.fixture
def locking_fourbar():
    from structs.basic import make_locking_fourbar
    return make_locking_fourbar()


@pytest.fixture
def initial_fourbar():
    from structs.basic import make_initial_fourbar
    return make_initial_fourbar()
