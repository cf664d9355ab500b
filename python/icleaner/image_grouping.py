#!/usr/bin/env python3
"""
Group the local image inventory by repository.

Each "repository:tag" reference of an image becomes one ImageEntry under
its repository, so an image tagged several times shows up once per tag,
always with the same identifier.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from icleaner.docker_client import DockerImageClient, ImageRecord
from icleaner.error_utils import MalformedReferenceError
from icleaner.logging_utils import get_logger

logger = get_logger(__name__)

TAG_SEPARATOR = ":"
UNTAGGED_REFERENCE = "<none>:<none>"


@dataclass(frozen=True)
class ImageEntry:
    """An (identifier, tag) pair within one repository"""

    id: str
    tag: str


RepositoryGroups = Dict[str, List[ImageEntry]]


def split_reference(reference: str, image_id: Optional[str] = None) -> Tuple[str, str]:
    """Split "repository:tag" into its parts.

    The split happens on the last separator so registry ports stay in the
    repository name ("localhost:5000/app:1.0" -> "localhost:5000/app", "1.0").

    Raises:
        MalformedReferenceError: If the reference has no tag component
    """
    repository, sep, tag = reference.rpartition(TAG_SEPARATOR)
    if not sep or not repository or not tag or "/" in tag:
        raise MalformedReferenceError(reference, image_id)
    return repository, tag


def group_image_records(records: Iterable[ImageRecord]) -> RepositoryGroups:
    """Partition image records into per-repository entry lists.

    Records are not modified. Images without references (untagged) contribute
    nothing; pruning handles those.
    """
    groups: RepositoryGroups = OrderedDict()
    for record in records:
        references = [r for r in record.references if r != UNTAGGED_REFERENCE]
        if not references:
            logger.debug(f"Skipping untagged image {record.id}")
            continue
        for reference in references:
            repository, tag = split_reference(reference, record.id)
            groups.setdefault(repository, []).append(ImageEntry(id=record.id, tag=tag))
    return groups


def group_images(client: DockerImageClient, name_pattern: Optional[str] = None) -> RepositoryGroups:
    """Fetch the inventory (restricted to name_pattern if given) and group it"""
    records = client.list_images(name_pattern)
    groups = group_image_records(records)
    logger.info(f"Grouped {sum(len(v) for v in groups.values())} tags into {len(groups)} repositories")
    return groups
