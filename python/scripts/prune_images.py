#!/usr/bin/env python3
"""
Prune local Docker images with retention filters.

Without filters this runs the daemon's own prune of unused images. With
any filter it groups the image inventory by repository, selects the images
that fall outside the retention rules and removes them one by one.

Filter priority: -i restricts which images are considered at all, then
-t is evaluated before -n for every tag of a repository.

Usage examples:
  # Prune unused (dangling) images
  python prune_images.py

  # Keep the 3 newest tags of every repository
  python prune_images.py -n 3

  # Keep tags at or after 2024-03 of repositories matching "myapp*"
  python prune_images.py -i 'myapp*' -t 2024-03

  # Delete every image matching "*test*", even if other tags reference it
  python prune_images.py -i '*test*' -f

  # Show what would be deleted without deleting anything
  python prune_images.py -n 3 --dry-run
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add parent directory to path for imports
_parent_dir = Path(__file__).parent.parent.absolute()
if str(_parent_dir) not in sys.path:
    sys.path.insert(0, str(_parent_dir))

from icleaner.cleanup import ImageCleaner
from icleaner.config_manager import ConfigManager, ConfigValidationError, RetentionFilters, get_config_manager
from icleaner.docker_client import DockerImageClient
from icleaner.error_utils import ActionableError
from icleaner.image_grouping import group_images
from icleaner.logging_utils import get_logger, log_exception, set_log_level
from icleaner.report_utils import format_deletion_plan
from icleaner.retention import build_deletion_plan, short_image_id

logger = get_logger(__name__)


def trim_images(
    client: DockerImageClient,
    filters: RetentionFilters,
    cleaner: Optional[ImageCleaner] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Prune or clean images according to filters

    Returns:
        Summary dictionary; "mode" is "prune", "dry_run" or "clean"
    """
    cleaner = cleaner or ImageCleaner(client)

    if not filters.is_active:
        if dry_run:
            logger.info("No filters given: a real run would prune unused images")
            return {"mode": "dry_run", "total": 0}
        return {"mode": "prune", "success": cleaner.prune()}

    groups = group_images(client, filters.name_pattern if filters.trim_by_name else None)
    plan = build_deletion_plan(groups, filters)

    if dry_run:
        print(format_deletion_plan(plan))
        summary = {"total": len(plan), "deleted": len(plan)}
        cleaner.log_summary(summary, dry_run=True)
        return {"mode": "dry_run", **summary}

    image_ids = [short_image_id(entry.id) for _, entry in plan]
    summary = cleaner.clean(image_ids, force=filters.force)
    return {"mode": "clean", **summary}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="icleaner",
        description="icleaner - clean docker images with filters",
        epilog=(
            "Supposed to keep the newest '-n' images whose name is like '-i' and whose tag is at or after '-t'. "
            "'-i' has the highest priority, '-t' the second and '-n' the last. "
            "With no filters, unused images are pruned instead."
        ),
    )
    parser.add_argument(
        "-n", dest="keep_count", type=int, default=0, metavar="number",
        help="Keep the newest n images of each repository"
    )
    parser.add_argument(
        "-t", dest="keep_since", default=None, metavar="time",
        help="Keep the images of each repository whose tag is at or after t"
    )
    parser.add_argument(
        "-i", dest="name_pattern", default=None, metavar="image",
        help="Only consider images whose name is like i, supports patterns like 'Hello*' or '*ll*'"
    )
    parser.add_argument(
        "-f", dest="force", action="store_true",
        help="Delete images by force, removing every tag that shares an image ID"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the images that would be deleted without deleting them"
    )
    parser.add_argument("--config", help="Path to config.yaml (default: CONFIG_FILE env var or ./config.yaml)")
    parser.add_argument("--print-config", action="store_true", help="Print the effective configuration and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main function"""
    args = parse_arguments(argv)

    try:
        config = ConfigManager(config_file=args.config) if args.config else get_config_manager()
        set_log_level("DEBUG" if args.verbose else config.get_log_level())
        if args.print_config:
            config.print_config()
            return
        filters = RetentionFilters(
            keep_count=args.keep_count,
            keep_since=args.keep_since,
            name_pattern=args.name_pattern,
            force=args.force,
        )
    except ConfigValidationError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    try:
        client = DockerImageClient(config)
    except ActionableError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if filters.is_active:
            logger.info(
                f"Cleaning images: keep_count={filters.keep_count or 'off'}, "
                f"keep_since={filters.keep_since or 'off'}, name={filters.name_pattern or 'any'}, "
                f"force={filters.force}"
            )
        trim_images(client, filters, ImageCleaner(client, color=config.is_color_enabled()), dry_run=args.dry_run)
    except ActionableError as e:
        log_exception(logger, str(e), e)
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
