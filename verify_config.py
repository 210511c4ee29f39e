#!/usr/bin/env python3
"""Simple script to verify config.example.yaml and the sample seed file without installing the package."""

import sys
from pathlib import Path

import yaml

KNOWN_SECTIONS = {
    "directory": dict,
    "storage": dict,
    "logging": dict,
}
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_LOG_FORMATS = ["json", "key-value"]


def _load_yaml(path):
    if not path.exists():
        print(f"✗ {path} not found")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        print(f"✗ Failed to parse {path}: {e}")
        return None


def verify_config_structure(config_file=Path("config.example.yaml")):
    """Verify config.example.yaml has the expected structure."""
    config = _load_yaml(config_file)
    if config is None:
        return False

    errors = []
    if not isinstance(config, dict):
        errors.append("Top level must be a mapping")
        config = {}

    for key in config:
        if key not in KNOWN_SECTIONS:
            errors.append(f"Unknown section: {key}")

    for key, expected_type in KNOWN_SECTIONS.items():
        if key in config and not isinstance(config[key], expected_type):
            errors.append(f"'{key}' must be of type {expected_type.__name__}")

    directory = config.get("directory") or {}
    if isinstance(directory, dict):
        roles = directory.get("carer_roles", ["carer"])
        if not isinstance(roles, list) or not any(isinstance(r, str) and r.strip() for r in roles):
            errors.append("directory.carer_roles must list at least one role")

        batch_size = directory.get("review_batch_size", 10)
        if not isinstance(batch_size, int) or not 1 <= batch_size <= 10:
            errors.append("directory.review_batch_size must be an integer between 1 and 10")

    logging_section = config.get("logging") or {}
    if isinstance(logging_section, dict):
        if logging_section.get("level", "INFO") not in VALID_LOG_LEVELS:
            errors.append(f"logging.level must be one of: {', '.join(VALID_LOG_LEVELS)}")
        if logging_section.get("format", "key-value") not in VALID_LOG_FORMATS:
            errors.append(f"logging.format must be one of: {', '.join(VALID_LOG_FORMATS)}")

    if errors:
        print(f"✗ {config_file} validation failed:")
        for error in errors:
            print(f"  - {error}")
        return False

    storage = config.get("storage") or {}
    print(f"✓ {config_file} structure is valid")
    print(f"  - Profiles collection: {directory.get('profiles_collection', 'users')}")
    print(f"  - Carer roles: {', '.join(directory.get('carer_roles', ['carer']))}")
    print(f"  - Store enabled: {storage.get('enabled', True)}")
    return True


def verify_seed_structure(seed_file=Path("data/seed.example.yaml")):
    """Verify the sample seed file can be imported."""
    seed = _load_yaml(seed_file)
    if seed is None:
        return False

    collections = seed.get("collections") if isinstance(seed, dict) else None
    if not isinstance(collections, dict):
        print(f"✗ {seed_file} has no 'collections' mapping")
        return False

    bad = [name for name, docs in collections.items() if not isinstance(docs, (dict, list))]
    if bad:
        print(f"✗ Collections must be mappings or lists: {', '.join(map(str, bad))}")
        return False

    total = sum(len(docs) for docs in collections.values())
    print(f"✓ {seed_file} structure is valid ({total} documents in {len(collections)} collections)")
    return True


if __name__ == "__main__":
    config_ok = verify_config_structure()
    seed_ok = verify_seed_structure()
    sys.exit(0 if config_ok and seed_ok else 1)
