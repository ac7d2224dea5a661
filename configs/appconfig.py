"""
appconfig.py - Central application constants.

Values that a deployment may want to change are read from environment
variables; everything else is a plain module constant.
"""
from __future__ import annotations

import os

from configs.paths import USER_DIR  # noqa: F401

# Backend server
BACKEND_PORT = int(os.getenv('DYADSIM_BACKEND_PORT', '8021'))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

# Simulation sampling
DEFAULT_N_STEPS = 200      # continuous preview while editing
CHALLENGE_N_STEPS = 360    # one-degree resolution for evaluation / export
MAX_N_STEPS = 3600

# Two-circle feasibility band tolerance
LOCKING_EPSILON = 1e-10

# Challenge scoring
CHALLENGE_CANVAS = (600.0, 400.0)
CHALLENGE_FILL = 0.9
