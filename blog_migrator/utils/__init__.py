"""
Utility helpers used by the migration tool.

This subpackage exposes convenience functions for structured logging,
migration map generation and the small text transforms applied to
articles.
"""

from .errors import ERRORS, report_error, report_ok
from .migration_map import write_migration_map
from .text import external_id_for, matches_pattern, part_title, rewrite_domains

__all__ = [
    "ERRORS",
    "report_error",
    "report_ok",
    "write_migration_map",
    "external_id_for",
    "matches_pattern",
    "part_title",
    "rewrite_domains",
]
