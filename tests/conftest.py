"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use a real bearer token
os.environ.setdefault("FEATUREDEV_BEARER_TOKEN", "test-fake-token")
os.environ.setdefault("LOG_FORMAT", "text")
