"""
Pytest configuration file.

Sets up the Python path so test files can import from the python/ directory,
and provides shared fixtures for the image cleaner tests.
"""
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add python directory to path for all tests
_python_dir = Path(__file__).parent.parent / 'python'
_python_dir_abs = str(_python_dir.absolute())
if _python_dir_abs not in sys.path:
    sys.path.insert(0, _python_dir_abs)

# Keep the host environment out of the shared ConfigManager
os.environ.setdefault('SKIP_CONFIG_VALIDATION', 'true')


@pytest.fixture
def mock_config_manager():
    """Create a mock ConfigManager"""
    mock = MagicMock()
    mock.get_docker_base_url.return_value = None
    mock.get_docker_timeout.return_value = 60
    mock.is_color_enabled.return_value = False
    mock.get_log_level.return_value = 'INFO'
    return mock


@pytest.fixture
def mock_docker_image():
    """Factory for docker SDK Image stand-ins"""
    def _make(image_id, repo_tags):
        image = MagicMock()
        image.id = image_id
        image.attrs = {'Id': image_id, 'RepoTags': repo_tags}
        return image
    return _make
