#!/usr/bin/env python3
"""
Retention selection: decide which images of each repository get deleted.

Within a repository, entries are ordered newest first by tag ("latest"
pinned to the front, then plain descending string order). The walk then
applies the keep-since rule before the keep-count rule at every position.
As soon as either rule fires, every remaining entry of that repository is
selected. With neither rule enabled the whole repository is selected.
"""

from functools import cmp_to_key
from typing import List, Optional, Tuple

from icleaner.config_manager import RetentionFilters
from icleaner.image_grouping import ImageEntry, RepositoryGroups
from icleaner.logging_utils import get_logger

logger = get_logger(__name__)

LATEST_TAG = "latest"
ID_SEPARATOR = ":"


def compare_entries(a: ImageEntry, b: ImageEntry) -> int:
    """Ordering rule: "latest" first, then higher tags first (string order)"""
    if a.tag == LATEST_TAG:
        return 0 if b.tag == LATEST_TAG else -1
    if b.tag == LATEST_TAG:
        return 1
    if a.tag > b.tag:
        return -1
    if a.tag < b.tag:
        return 1
    return 0


def sort_entries(entries: List[ImageEntry]) -> None:
    """Reorder entries in place, newest first"""
    entries.sort(key=cmp_to_key(compare_entries))


def short_image_id(image_id: str) -> str:
    """Strip the digest algorithm prefix: "sha256:abc" -> "abc" """
    _, sep, digest = image_id.partition(ID_SEPARATOR)
    return digest if sep else image_id


def select_entries(
    entries: List[ImageEntry],
    keep_count: int = 0,
    keep_since: Optional[str] = None,
    trim_by_count: bool = False,
    trim_by_time: bool = False,
) -> List[ImageEntry]:
    """Select the entries of one repository that should be deleted.

    entries is sorted in place first. The returned list keeps that order.
    """
    sort_entries(entries)
    total = len(entries)
    selected = []

    keeping = trim_by_time or trim_by_count
    for idx, entry in enumerate(entries):
        if not keeping:
            selected.append(entry)
            continue
        if trim_by_time and entry.tag < keep_since:
            # keep-since wins over keep-count for this position
            selected.append(entry)
            keeping = False
            continue
        if trim_by_count and total > keep_count and idx == keep_count - 1:
            keeping = False

    return selected


def build_deletion_plan(groups: RepositoryGroups, filters: RetentionFilters) -> List[Tuple[str, ImageEntry]]:
    """Return (repository, entry) pairs selected for deletion across all repositories"""
    plan = []
    for repository, entries in groups.items():
        selected = select_entries(
            entries,
            keep_count=filters.keep_count,
            keep_since=filters.keep_since,
            trim_by_count=filters.trim_by_count,
            trim_by_time=filters.trim_by_time,
        )
        logger.debug(f"{repository}: {len(selected)} of {len(entries)} tags selected")
        plan.extend((repository, entry) for entry in selected)
    return plan


def select_images_for_deletion(groups: RepositoryGroups, filters: RetentionFilters) -> List[str]:
    """Flat list of short image identifiers to delete.

    An identifier appears once per selected tag, so images tagged several
    times may repeat; the cleanup loop handles duplicates.
    """
    return [short_image_id(entry.id) for _, entry in build_deletion_plan(groups, filters)]
