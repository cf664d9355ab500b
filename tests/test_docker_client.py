"""Unit tests for icleaner/docker_client.py"""

import os
from unittest.mock import MagicMock, patch

import docker.errors
import pytest
import requests.exceptions

from icleaner.config_manager import ConfigManager
from icleaner.docker_client import DockerImageClient, ImageRecord
from icleaner.error_utils import ActionableError, ErrorCategory


class TestDockerImageClientInitialization:
    """Tests for connecting to the daemon"""

    def test_uses_environment_when_no_base_url(self, mock_config_manager):
        with patch("icleaner.docker_client.docker.from_env") as mock_from_env:
            client = DockerImageClient(mock_config_manager)

        mock_from_env.assert_called_once_with(timeout=60)
        mock_from_env.return_value.ping.assert_called_once()
        assert client.client is mock_from_env.return_value

    def test_uses_configured_base_url(self, mock_config_manager):
        mock_config_manager.get_docker_base_url.return_value = "tcp://docker:2375"

        with patch("icleaner.docker_client.docker.DockerClient") as mock_docker_client:
            client = DockerImageClient(mock_config_manager)

        mock_docker_client.assert_called_once_with(base_url="tcp://docker:2375", timeout=60)
        assert client.base_url == "tcp://docker:2375"

    def test_unreachable_daemon_raises_actionable_error(self, mock_config_manager):
        with patch(
            "icleaner.docker_client.docker.from_env",
            side_effect=docker.errors.DockerException("Error while fetching server API version"),
        ):
            with pytest.raises(ActionableError) as exc_info:
                DockerImageClient(mock_config_manager)

        assert exc_info.value.category == ErrorCategory.CONNECTION
        assert "Failed to connect to Docker daemon" in str(exc_info.value)

    def test_failed_ping_raises_actionable_error(self, mock_config_manager):
        with patch("icleaner.docker_client.docker.from_env") as mock_from_env:
            mock_from_env.return_value.ping.side_effect = docker.errors.APIError("permission denied")
            with pytest.raises(ActionableError) as exc_info:
                DockerImageClient(mock_config_manager)

        assert exc_info.value.category == ErrorCategory.PERMISSION

    def test_docker_host_goes_through_from_env(self):
        """TLS settings from the environment are only honoured by docker.from_env"""
        env = {"DOCKER_HOST": "tcp://remote:2376", "DOCKER_TLS_VERIFY": "1", "DOCKER_CERT_PATH": "/certs"}
        with patch.dict(os.environ, env):
            config = ConfigManager(config_file="/nonexistent/config.yaml", validate=False)
            with patch("icleaner.docker_client.docker.from_env") as mock_from_env, \
                    patch("icleaner.docker_client.docker.DockerClient") as mock_docker_client:
                DockerImageClient(config)

        mock_from_env.assert_called_once_with(timeout=60)
        mock_docker_client.assert_not_called()

    def test_transport_error_on_ping_raises_actionable_error(self, mock_config_manager):
        with patch("icleaner.docker_client.docker.from_env") as mock_from_env:
            mock_from_env.return_value.ping.side_effect = requests.exceptions.ConnectionError("Connection refused")
            with pytest.raises(ActionableError) as exc_info:
                DockerImageClient(mock_config_manager)

        assert exc_info.value.category == ErrorCategory.CONNECTION

    def test_accepts_prebuilt_client(self, mock_config_manager):
        sdk_client = MagicMock()
        with patch("icleaner.docker_client.docker.from_env") as mock_from_env:
            client = DockerImageClient(mock_config_manager, client=sdk_client)

        mock_from_env.assert_not_called()
        assert client.client is sdk_client


class TestDockerImageClientOperations:
    """Tests for list/remove/prune"""

    @pytest.fixture
    def sdk_client(self):
        return MagicMock()

    @pytest.fixture
    def client(self, mock_config_manager, sdk_client):
        return DockerImageClient(mock_config_manager, client=sdk_client)

    def test_list_images_builds_records(self, client, sdk_client, mock_docker_image):
        sdk_client.images.list.return_value = [
            mock_docker_image("sha256:1", ["app:1.0", "app:latest"]),
            mock_docker_image("sha256:2", None),
        ]

        records = client.list_images()

        sdk_client.images.list.assert_called_once_with(filters=None)
        assert records == [
            ImageRecord("sha256:1", ["app:1.0", "app:latest"]),
            ImageRecord("sha256:2", []),
        ]

    def test_list_images_filters_by_reference(self, client, sdk_client):
        sdk_client.images.list.return_value = []

        client.list_images("hello*")

        sdk_client.images.list.assert_called_once_with(filters={"reference": "hello*"})

    def test_list_images_failure_raises_actionable_error(self, client, sdk_client):
        sdk_client.images.list.side_effect = docker.errors.APIError("server error")

        with pytest.raises(ActionableError) as exc_info:
            client.list_images("app*")

        assert exc_info.value.details["name_pattern"] == "app*"

    def test_remove_image_passes_force(self, client, sdk_client):
        client.remove_image("abc", force=True)
        sdk_client.images.remove.assert_called_once_with(image="abc", force=True)

    def test_remove_image_errors_propagate(self, client, sdk_client):
        sdk_client.images.remove.side_effect = docker.errors.ImageNotFound("No such image: abc")
        with pytest.raises(docker.errors.ImageNotFound):
            client.remove_image("abc")

    def test_prune_images_returns_report(self, client, sdk_client):
        sdk_client.images.prune.return_value = {"ImagesDeleted": None, "SpaceReclaimed": 0}
        assert client.prune_images() == {"ImagesDeleted": None, "SpaceReclaimed": 0}

    def test_close(self, client, sdk_client):
        client.close()
        sdk_client.close.assert_called_once()
