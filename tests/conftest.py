# tests/conftest.py
"""
Global pytest fixtures for relax tests.
"""

import pytest
import requests

from relax.core import config as config_module
from relax.core.http.transport import reset_default_session
from tests.mocks.mock_transport import RecordingAdapter


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory as a Path."""
    return tmp_path


@pytest.fixture
def adapter():
    """Recording adapter with no routes (every URL answers 200)."""
    return RecordingAdapter()


@pytest.fixture
def session(adapter):
    """Session whose traffic goes to the recording adapter."""
    s = requests.Session()
    s.trust_env = False
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    yield s
    s.close()


@pytest.fixture(autouse=True)
def reset_globals():
    """Forget the default session and global config between tests."""
    reset_default_session()
    config_module.reset_config()
    yield
    reset_default_session()
    config_module.reset_config()
