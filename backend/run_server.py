#!/usr/bin/env python3
"""
dyadsim Backend Server
Uses centralized port configuration from configs.appconfig
"""
from __future__ import annotations

import os
import sys

# Add parent directory to path to import configs
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn  # noqa: E402

from configs.appconfig import BACKEND_PORT  # noqa: E402
from configs.appconfig import LOG_LEVEL  # noqa: E402
from configs.logging_config import get_logger  # noqa: E402
from configs.logging_config import log_separator  # noqa: E402
from configs.logging_config import LOG_FILE  # noqa: E402
from configs.logging_config import LOG_FILE_ENV  # noqa: E402
from configs.logging_config import setup_logging  # noqa: E402

if __name__ == '__main__':
    uvicorn_log_level = LOG_LEVEL.lower() if LOG_LEVEL in ('DEBUG', 'INFO', 'WARNING', 'ERROR') else 'info'
    # The reload worker re-imports the app; it finds the log file through the environment
    os.environ.setdefault(LOG_FILE_ENV, str(LOG_FILE))
    setup_logging(level=LOG_LEVEL)
    logger = get_logger('backend')

    log_separator(logger, 'dyadsim backend')
    logger.info('Port %d, log level %s (set LOG_LEVEL env var to change)', BACKEND_PORT, LOG_LEVEL)
    logger.info('Writing log to %s', os.environ[LOG_FILE_ENV])
    uvicorn.run(
        'backend.mechanism_api:app',
        host='0.0.0.0',
        port=BACKEND_PORT,
        reload=True,
        log_level=uvicorn_log_level,
    )
