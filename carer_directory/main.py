"""Command-line entry point for the carer directory."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from carer_directory.config.environment import EnvironmentConfig
from carer_directory.config.exceptions import ConfigurationError
from carer_directory.config.loader import load_config
from carer_directory.config.models import AppConfig
from carer_directory.directory import CarerDirectory, build_directory, get_placeholder_photo
from carer_directory.domain.models import Carer
from carer_directory.logging import get_logger
from carer_directory.logging.config import configure_logging
from carer_directory.persistence.store import SqlDocumentStore

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def carer_to_dict(carer: Carer) -> Dict[str, Any]:
    """JSON-ready view of a carer, including rating summary fields."""
    payload = carer.model_dump()
    payload["photo"] = carer.photo or get_placeholder_photo()
    payload["average_rating"] = carer.average_rating
    payload["review_count"] = carer.review_count
    return payload


async def _list_carers(directory: CarerDirectory) -> int:
    await directory.fetch_carers()
    if directory.state.load_error:
        print(directory.state.load_error, file=sys.stderr)

    print(json.dumps([carer_to_dict(carer) for carer in directory.all_carers], indent=2))
    return EXIT_FAILURE if directory.state.load_error and not directory.all_carers else EXIT_OK


async def _show_carer(directory: CarerDirectory, carer_id: str) -> int:
    await directory.fetch_carers()
    carer = directory.get_carer_by_id(carer_id)
    if carer is None:
        print(f"Carer not found: {carer_id}", file=sys.stderr)
        return EXIT_FAILURE

    payload = carer_to_dict(carer)
    payload["description"] = directory.get_description(carer_id)
    print(json.dumps(payload, indent=2))
    return EXIT_OK


async def _add_review(directory: CarerDirectory, carer_id: str, rating: float) -> int:
    await directory.fetch_carers()
    if not await directory.add_review(carer_id, rating):
        print(f"Review was not recorded for carer: {carer_id}", file=sys.stderr)
        return EXIT_FAILURE

    print(
        json.dumps(
            {
                "carer_id": carer_id,
                "average_rating": directory.get_average_rating(carer_id),
                "review_count": directory.get_review_count(carer_id),
            },
            indent=2,
        )
    )
    return EXIT_OK


def _document_body(collection: Any, body: Any) -> Dict[str, Any]:
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ConfigurationError(
            f"Documents in collection '{collection}' must be mappings, got {type(body).__name__}"
        )
    return body


async def import_documents(store: SqlDocumentStore, fixture_path: Path) -> int:
    """
    Load documents from a YAML file into the store.

    The file maps collection names to either a mapping of
    ``document_id -> body`` (written under that id) or a list of bodies
    (written under generated ids).

    Returns:
        Number of documents written

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(fixture_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read import file {fixture_path}: {e}")

    collections = payload.get("collections") if isinstance(payload, dict) else None
    if not isinstance(collections, dict):
        raise ConfigurationError(
            f"Import file {fixture_path} has no 'collections' mapping",
            suggestions=["See data/seed.example.yaml for the expected layout"],
        )

    written = 0
    for collection, documents in collections.items():
        if isinstance(documents, dict):
            for document_id, body in documents.items():
                await store.set_document(
                    str(collection), str(document_id), _document_body(collection, body)
                )
                written += 1
        elif isinstance(documents, list):
            for body in documents:
                await store.add_document(str(collection), _document_body(collection, body))
                written += 1
        else:
            raise ConfigurationError(
                f"Collection '{collection}' must be a mapping or a list of documents"
            )

    logger.info(
        f"Imported {written} documents",
        extra={"event": "cli.import.completed", "document_count": written},
    )
    return written


async def _import(directory: CarerDirectory, fixture_path: Path) -> int:
    if not isinstance(directory.store, SqlDocumentStore):
        print("Import needs a configured database (set DATABASE_URL)", file=sys.stderr)
        return EXIT_FAILURE

    written = await import_documents(directory.store, fixture_path)
    print(f"Imported {written} documents")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carer-directory",
        description="Carer directory - normalized carer profiles and ratings from a document store",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="Print every carer as JSON")

    show = commands.add_parser("show", help="Print one carer with its introduction")
    show.add_argument("carer_id")

    review = commands.add_parser("review", help="Add a 1-5 rating for a carer")
    review.add_argument("carer_id")
    review.add_argument("rating", type=float)

    importer = commands.add_parser("import", help="Load documents from a YAML file")
    importer.add_argument("path", type=Path)

    return parser


async def run_command(args: argparse.Namespace, directory: CarerDirectory) -> int:
    """Dispatch a parsed command against a directory."""
    if args.command == "list":
        return await _list_carers(directory)
    if args.command == "show":
        return await _show_carer(directory, args.carer_id)
    if args.command == "review":
        return await _add_review(directory, args.carer_id, args.rating)
    if args.command == "import":
        return await _import(directory, args.path)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the carer directory CLI.

    Returns:
        Exit code (0 success, 1 failure, 2 configuration error)
    """
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        directory = build_directory(app_config, env_config)
        try:
            return asyncio.run(run_command(args, directory))
        finally:
            if isinstance(directory.store, SqlDocumentStore):
                directory.store.close()

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            exc_info=True,
            extra={"event": "cli.failed", "error_type": type(e).__name__},
        )
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
