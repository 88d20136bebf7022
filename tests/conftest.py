"""Test configuration for pytest."""

import logging
import os
import pytest


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['PHOTODEDUP_LOG_LEVEL'] = 'WARNING'

    logging.getLogger().setLevel(logging.WARNING)

    # Collisions are logged at INFO; keep them out of test output
    for logger_name in ['photodedup.dedup.collection', 'photodedup.image.ppm']:
        logging.getLogger(logger_name).setLevel(logging.ERROR)


@pytest.fixture(autouse=True)
def default_settings_env(monkeypatch):
    """Run every test against the built-in grid and sample type."""
    for name in ['PHOTODEDUP_GRID_WIDTH', 'PHOTODEDUP_GRID_HEIGHT', 'PHOTODEDUP_PIXEL_DTYPE']:
        monkeypatch.delenv(name, raising=False)
