"""
Docker daemon client used by the image cleaner.

Wraps the docker SDK behind the three operations the cleaner needs:
listing the image inventory, removing an image by identifier and pruning
unused images. Everything else in the package talks to this class, so
tests can replace it with a mock.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import docker
import docker.errors
import requests.exceptions

from icleaner.config_manager import ConfigManager
from icleaner.error_utils import create_daemon_connection_error, create_image_list_error
from icleaner.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class ImageRecord:
    """One raw image from the daemon inventory"""

    id: str
    references: List[str] = field(default_factory=list)


class DockerImageClient:
    """Standardized Docker client for local image operations"""

    def __init__(self, config_manager: ConfigManager, client: Optional[docker.DockerClient] = None):
        """Initialize DockerImageClient.

        Args:
            config_manager: ConfigManager instance for accessing configuration
            client: Pre-built docker SDK client. When omitted, one is created from
                    docker.base_url (or the DOCKER_* environment) and pinged.

        Raises:
            ActionableError: If the daemon cannot be reached
        """
        self.config_manager = config_manager
        self.base_url = config_manager.get_docker_base_url()
        self.timeout = config_manager.get_docker_timeout()
        self.client = client or self._connect()

    def _connect(self) -> docker.DockerClient:
        try:
            if self.base_url:
                client = docker.DockerClient(base_url=self.base_url, timeout=self.timeout)
            else:
                client = docker.from_env(timeout=self.timeout)
            client.ping()
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            raise create_daemon_connection_error(self.base_url, e)
        logger.debug(f"Connected to Docker daemon at {self.base_url or 'DOCKER_HOST'}")
        return client

    def list_images(self, name_pattern: Optional[str] = None) -> List[ImageRecord]:
        """List the image inventory.

        When name_pattern is given the daemon filters by reference, which
        accepts glob patterns such as "hello*" or "*ll*".
        """
        filters = {"reference": name_pattern} if name_pattern else None
        try:
            images = self.client.images.list(filters=filters)
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            raise create_image_list_error(name_pattern, e)

        records = [ImageRecord(id=image.id, references=list(image.attrs.get("RepoTags") or [])) for image in images]
        logger.info(f"Found {len(records)} images" + (f" matching '{name_pattern}'" if name_pattern else ""))
        return records

    def remove_image(self, image_id: str, force: bool = False) -> None:
        """Remove an image by identifier. Daemon errors propagate to the caller."""
        self.client.images.remove(image=image_id, force=force)

    def prune_images(self) -> Dict[str, Any]:
        """Run the daemon's prune of unused images and return its report"""
        return self.client.images.prune() or {}

    def close(self) -> None:
        self.client.close()
