"""
Pytest configuration and shared fixtures.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import Mock

from ddd_kernel.domain.interfaces.base import ILogger, IErrorHandler

from bank_account import AccountId, BankAccount
from doubles import RecordingEventBus

ACCOUNT_UUID = "7d3f1c2e-4b5a-4e8f-9a10-2b3c4d5e6f70"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    logger = Mock(spec=ILogger)
    logger.debug = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.critical = Mock()
    return logger


@pytest.fixture
def mock_error_handler():
    """Create a mock error handler for testing."""
    error_handler = Mock(spec=IErrorHandler)
    error_handler.handle_error = Mock(return_value="Error handled")
    error_handler.log_error = Mock()
    error_handler.create_user_message = Mock(return_value="User friendly error")
    return error_handler


@pytest.fixture
def account_id():
    return AccountId(ACCOUNT_UUID)


@pytest.fixture
def account(account_id):
    """A freshly opened account with its creation event already pulled."""
    account = BankAccount.open(account_id, "ada")
    account.pull_domain_events()
    return account


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def sample_config_dict():
    """Create a sample configuration dictionary for testing."""
    return {
        'log_level': "DEBUG",
        'log_file': None,
        'raise_handler_errors': False,
        'handler_timeout': 2.5,
    }
