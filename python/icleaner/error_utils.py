"""
Error message utilities for providing actionable guidance to users.

This module provides the exception types raised by the image cleaner and
factory functions that attach suggested fixes to daemon and inventory
failures.
"""

from typing import List, Optional, Dict, Any
from enum import Enum


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""
    CONNECTION = "connection"
    PERMISSION = "permission"
    INVENTORY = "inventory"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [f"❌ {self.message}"]

        if self.suggestions:
            lines.append("\n💡 Suggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\n📋 Additional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


class MalformedReferenceError(ActionableError):
    """Raised when an image reference has no tag component"""

    def __init__(self, reference: str, image_id: Optional[str] = None):
        self.reference = reference
        super().__init__(
            message=f"Malformed image reference '{reference}' (expected repository:tag)",
            category=ErrorCategory.INVENTORY,
            suggestions=[
                "Inspect the image with 'docker image inspect' and check its RepoTags",
                "Re-tag the image with an explicit tag (docker tag <id> <repository>:<tag>)",
            ],
            details={"reference": reference, "image_id": image_id},
        )


def create_daemon_connection_error(base_url: Optional[str], error: Exception) -> ActionableError:
    """Create actionable error for Docker daemon connection failures"""
    error_str = str(error).lower()
    target = base_url or "the Docker daemon from the environment (DOCKER_HOST)"

    suggestions = [
        f"Verify the daemon address is correct: {target}",
        "Check that the Docker daemon is running (docker info)",
        "Verify the DOCKER_HOST, DOCKER_TLS_VERIFY and DOCKER_CERT_PATH environment variables",
    ]

    if "permission denied" in error_str:
        suggestions.insert(0, "Add your user to the 'docker' group or run with sufficient privileges")

    if "timeout" in error_str or "timed out" in error_str:
        suggestions.insert(1, "Increase docker.timeout in config.yaml")

    if "no such file" in error_str or "filenotfounderror" in error_str:
        suggestions.insert(1, "Check that the daemon socket exists (usually /var/run/docker.sock)")

    return ActionableError(
        message=f"Failed to connect to Docker daemon at {target}",
        category=ErrorCategory.PERMISSION if "permission denied" in error_str else ErrorCategory.CONNECTION,
        suggestions=suggestions,
        details={
            "base_url": base_url,
            "error_type": type(error).__name__,
            "error_message": str(error)
        }
    )


def create_image_list_error(name_pattern: Optional[str], error: Exception) -> ActionableError:
    """Create actionable error for a failed image inventory listing"""
    suggestions = [
        "Check that the Docker daemon is responsive (docker image ls)",
        "Verify the daemon API version is supported by the installed docker SDK",
    ]

    if name_pattern:
        suggestions.insert(0, f"Verify the image name pattern is valid: {name_pattern}")

    return ActionableError(
        message="Failed to list images from the Docker daemon",
        category=ErrorCategory.CONNECTION,
        suggestions=suggestions,
        details={
            "name_pattern": name_pattern,
            "error_type": type(error).__name__,
            "error_message": str(error)
        }
    )
