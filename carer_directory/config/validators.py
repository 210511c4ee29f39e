"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    storage = config_dict.get("storage", {})
    if isinstance(storage, dict) and storage.get("enabled") is False:
        warning_messages.append(
            "Document store is disabled; the directory will be empty and reviews stay in memory"
        )

    directory = config_dict.get("directory", {})
    if isinstance(directory, dict):
        roles = directory.get("carer_roles", [])
        if isinstance(roles, list):
            normalized = [role.strip() for role in roles if isinstance(role, str)]
            duplicates = sorted({role for role in normalized if normalized.count(role) > 1})
            if duplicates:
                warning_messages.append(
                    f"Duplicate carer_roles will be deduplicated: {', '.join(duplicates)}"
                )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
