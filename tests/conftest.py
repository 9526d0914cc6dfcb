"""
Root conftest.py: sys.path setup and default environment for all tests.

Sets up the test environment so all production code can be imported
without Azure Storage, Service Bus or email credentials.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'config', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so config loads without Azure.
    """
    defaults = {
        "ENVIRONMENT": "dev",
        "STORAGE_ACCOUNT_NAME": "teststorage",
        "UPLOAD_CONTAINER_NAME": "upload",
        "RESULT_CONTAINER_NAME": "download",
        "EVENT_TOPIC_NAMESPACE": "test.servicebus.windows.net",
        "NOTIFICATION_BACKEND": "sendgrid",
        "SENDGRID_API_KEY": "SG.test-key",
        "SENDER_EMAIL": "noreply@example.com",
        "RECIPIENT_EMAIL": "ops@example.com",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def fresh_config():
    """Drop the config singleton around each test."""
    from config import reset_config
    reset_config()
    yield
    reset_config()
