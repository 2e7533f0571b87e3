"""
Entry point for the store-to-store blog migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from blog_migrator.migration_tool import BlogMigrationTool, ConfigError
from blog_migrator.migrators.shopify_client import BlogNotFoundError
from blog_migrator.utils.pre_flight_checks import PreFlightCheckError, run_pre_flight_checks

CONFIG_FILE = "config/migration_config.json"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="blog-migrator",
        description="Copy blog articles from one store to another, splitting oversized bodies.",
    )
    parser.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON configuration file")
    parser.add_argument("--only", default="", help="Comma-separated article IDs to migrate")
    parser.add_argument(
        "--pattern",
        default=None,
        help='Wildcard pattern to match article titles (e.g., "2024-*" or "*Tutorial*")',
    )
    parser.add_argument("--dry-run", action="store_true", help="Log what would be created without writing")
    parser.add_argument("--skip-preflight", action="store_true", help="Do not check the store APIs before migrating")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the blog migration tool.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)

    try:
        tool = BlogMigrationTool(config_file=args.config)
    except ConfigError as e:
        logging.error("%s", e)
        return 1

    if args.dry_run:
        tool.config["migration"]["dry_run"] = True

    try:
        run_pre_flight_checks(tool.config, check_api=not args.skip_preflight)
    except PreFlightCheckError as e:
        tool.log_message(str(e), level="ERROR")
        return 1

    only_ids = [s.strip() for s in args.only.split(",") if s.strip()]
    tool.log_message("Starting blog migration.")
    try:
        tool.migrate(only_ids=only_ids, pattern=args.pattern)
    except BlogNotFoundError as e:
        tool.log_message(str(e), level="ERROR")
        return 1

    tool.log_message("Migration process finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
