"""
Deletion and prune workflow for the image cleaner.

ImageCleaner consumes the identifier list produced by retention selection
and issues one removal per identifier, printing a status line for each.
A failed removal is reported and the loop moves on.
"""

from typing import Any, Dict, Iterable

import docker.errors
import requests.exceptions

from icleaner.docker_client import DockerImageClient
from icleaner.logging_utils import get_logger
from icleaner.report_utils import TEXT_GREEN, TEXT_RED, TEXT_YELLOW, print_status, sizeof_fmt

# Transport failures from docker-py surface as requests exceptions, not DockerException
DAEMON_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)


class ImageCleaner:
    """Removes selected images, or prunes unused ones, through a DockerImageClient"""

    def __init__(self, client: DockerImageClient, color: bool = True):
        self.client = client
        self.color = color
        self.logger = get_logger(self.__class__.__name__)

    def prune(self) -> bool:
        """Run the daemon's prune of unused images

        Returns:
            True if the prune succeeded, False otherwise
        """
        print("Run docker image prune ... ", end="", flush=True)
        try:
            report = self.client.prune_images()
        except DAEMON_ERRORS as e:
            print_status(f"Err {e}", TEXT_RED, self.color)
            return False

        print_status("success", TEXT_GREEN, self.color)
        deleted = report.get("ImagesDeleted") or []
        reclaimed = report.get("SpaceReclaimed") or 0
        self.logger.info(f"Pruned {len(deleted)} image layers, reclaimed {sizeof_fmt(reclaimed)}")
        return True

    def clean(self, image_ids: Iterable[str], force: bool = False) -> Dict[str, Any]:
        """Remove each image in turn

        In force mode an identifier that was already processed in this run
        is reported as skipped instead of being removed again.

        Args:
            image_ids: Identifiers to remove, duplicates allowed
            force: Remove images even if other tags reference them

        Returns:
            Summary with total, deleted, failed and skipped counts
        """
        summary = {"total": 0, "deleted": 0, "failed": 0, "skipped": 0}
        processed = set()

        for image_id in image_ids:
            summary["total"] += 1
            print(f"Delete image: {image_id} ... ", end="", flush=True)
            if force and image_id in processed:
                print_status("skip", TEXT_YELLOW, self.color)
                summary["skipped"] += 1
                continue

            try:
                self.client.remove_image(image_id, force=force)
            except DAEMON_ERRORS as e:
                print_status(f"Err {e}", TEXT_RED, self.color)
                summary["failed"] += 1
            else:
                print_status("success", TEXT_GREEN, self.color)
                summary["deleted"] += 1

            processed.add(image_id)

        self.log_summary(summary)
        return summary

    def log_summary(self, summary: Dict[str, Any], dry_run: bool = False) -> None:
        """Log a standardized deletion summary

        Args:
            summary: Dictionary with summary information
            dry_run: Whether this was a dry run
        """
        mode = "DRY RUN: " if dry_run else ""
        self.logger.info(f"📊 {mode}Deletion Summary:")

        if "total" in summary:
            self.logger.info(f"   Total images: {summary['total']}")
        if "deleted" in summary:
            self.logger.info(f"   {'Would delete' if dry_run else 'Successfully deleted'}: {summary['deleted']}")
        if "failed" in summary:
            self.logger.info(f"   Failed deletions: {summary['failed']}")
        if "skipped" in summary:
            self.logger.info(f"   Skipped (already processed): {summary['skipped']}")
