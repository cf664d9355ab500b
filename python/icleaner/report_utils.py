"""
Utility functions for terminal status output and report formatting.

This module provides functions to:
- Wrap status text in ANSI colors
- Format byte counts for humans
- Render the deletion plan as a table
"""
from typing import List, Optional, Tuple

from tabulate import tabulate

from icleaner.image_grouping import ImageEntry
from icleaner.retention import short_image_id

TEXT_RED = 31
TEXT_GREEN = 32
TEXT_YELLOW = 33


# ============================================================================
# Formatting Utilities
# ============================================================================

def sizeof_fmt(num: float, suffix: str = "B") -> str:
    """Format bytes into human-readable size.

    Args:
        num: Number of bytes
        suffix: Suffix to append (default: "B")

    Returns:
        Formatted string like "1.5GiB", "500MiB", etc.
    """
    for unit in ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi"):
        if abs(num) < 1024.0:
            return f"{num:3.1f}{unit}{suffix}"
        num /= 1024.0
    return f"{num:.1f}Yi{suffix}"


def color_text(text: str, color: int, enabled: bool = True) -> str:
    """Wrap text in an ANSI color escape, or return it unchanged when disabled"""
    if not enabled:
        return text
    return f"\033[{color}m{text}\033[0m"


def print_status(text: str, color: int, enabled: bool = True) -> None:
    """Finish the current status line with colored text"""
    print(color_text(text, color, enabled))


# ============================================================================
# Deletion Plan
# ============================================================================

def format_deletion_plan(plan: List[Tuple[str, ImageEntry]], tablefmt: Optional[str] = "grid") -> str:
    """Render (repository, entry) pairs as a table for dry runs"""
    if not plan:
        return "No images selected for deletion."
    headers = ["Repository", "Tag", "Image ID"]
    rows = [[repository, entry.tag, short_image_id(entry.id)[:12]] for repository, entry in plan]
    return tabulate(rows, headers=headers, tablefmt=tablefmt)
