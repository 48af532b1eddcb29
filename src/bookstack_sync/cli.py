"""Command-line entry point: publish one Markdown file to BookStack.

Reads the file, runs the sync decision, and rewrites the file's front
matter (``page_id``, ``checksum``) only after a successful write.
"""

import argparse
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from . import __version__, frontmatter
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config
from .core.client import BookStackClient
from .errors import BookStackSyncError, ConfigurationError
from .file_handler import (
    read_file_with_encoding,
    validate_file_path,
    write_file,
)
from .logger import setup_logging
from .sync import (
    SyncEngine,
    format_outcome,
    format_plan,
    outcome_to_json,
    plan_sync,
    plan_to_json,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bookstack-sync",
        description="Publish a Markdown file with YAML front matter to a BookStack page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Front matter keys:
  page_name    Page title (required when creating)
  book_id      Parent book id
  chapter_id   Parent chapter id (takes precedence over book_id)
  page_id      Existing page id, written back after the first publish
  checksum     Fingerprint of the last published body, written back

Examples:
  # Publish using BOOKSTACK_URL / BOOKSTACK_TOKEN_ID / BOOKSTACK_TOKEN_SECRET
  bookstack-sync notes/intro.md

  # Preview the request without sending it
  bookstack-sync notes/intro.md --dry-run
        """,
    )
    parser.add_argument("file", help="Markdown file to publish")
    parser.add_argument(
        "--url",
        help="Override BookStack URL (takes precedence over BOOKSTACK_URL and config files)",
    )
    parser.add_argument(
        "--token-id",
        help="Override API token id (takes precedence over BOOKSTACK_TOKEN_ID)",
    )
    parser.add_argument(
        "--token-secret",
        help="Override API token secret (takes precedence over BOOKSTACK_TOKEN_SECRET)"
        " (visible in process list -- prefer the env var)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be sent without contacting the server",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the result as JSON on stdout",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also append logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"bookstack-sync version {__version__}",
    )
    return parser


def _load_unified() -> UnifiedConfig:
    if not discover_config_files():
        return UnifiedConfig()
    return build_config(load_hierarchical_config())


def _resolve_config(args: argparse.Namespace, unified: UnifiedConfig) -> Config:
    yaml_fallbacks: dict[str, Any] = unified.bookstack.model_dump(
        exclude_none=True
    )
    return load_config(
        url=args.url,
        token_id=args.token_id,
        token_secret=args.token_secret,
        insecure=args.insecure,
        debug=args.debug,
        yaml_fallbacks=yaml_fallbacks,
    )


def _emit(args: argparse.Namespace, text: str, data: dict[str, Any]) -> None:
    if args.as_json:
        print(json.dumps(data))
    else:
        print(text)


def dry_run_file(args: argparse.Namespace) -> int:
    """Print the request that would be sent; needs no credentials."""
    path = validate_file_path(args.file)
    document, _ = read_file_with_encoding(path)
    metadata, body = frontmatter.parse(document)
    plan = plan_sync(body, metadata)
    _emit(args, format_plan(plan), plan_to_json(plan))
    return EXIT_OK


def sync_file(args: argparse.Namespace, config: Config) -> int:
    path = validate_file_path(args.file)
    document, encoding = read_file_with_encoding(path)
    logger.debug("Read %s (%s)", path, encoding)

    with BookStackClient(config) as client:
        result = SyncEngine(client).sync_document(document)

    if result.outcome.updated:
        write_file(path, result.document, encoding)
        logger.info("Updated front matter in %s", path)

    _emit(
        args,
        format_outcome(result.outcome, result.page_name),
        outcome_to_json(result.outcome),
    )
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    load_dotenv()

    try:
        unified = _load_unified()
    except (BookStackSyncError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    setup_logging(
        debug=args.debug or unified.bookstack.debug,
        log_file=args.log_file or unified.logging.file,
        level=unified.logging.level,
    )

    try:
        if args.dry_run:
            return dry_run_file(args)

        config = _resolve_config(args, unified)
        if config.debug:
            logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("BookStack URL: %s", config.server_url)
        return sync_file(args, config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG
    except BookStackSyncError as e:
        logger.error("%s", e)
        return EXIT_FAILURE
    except ValueError as e:
        # file path validation
        logger.error("%s", e)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
