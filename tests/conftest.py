"""Test configuration for pytest."""

import logging
import os
import pytest


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['LOOKALIKE_LOG_LEVEL'] = 'WARNING'

    logging.getLogger().setLevel(logging.WARNING)

    # Grouping logs a warning for every skipped image
    for logger_name in ['lookalike.grouping.engine', 'lookalike.grouping.cluster']:
        logging.getLogger(logger_name).setLevel(logging.ERROR)
