"""
High-level orchestration of the store-to-store blog migration.

This module defines a :class:`BlogMigrationTool` class that ties together
the extractors, the body splitter, the REST client and the reporting
utilities into a complete pipeline.  For every selected source article it
rewrites domains in the body, splits the body into parts that fit the
target's size limit, creates one target article per part, copies the
article metafields onto each part and records the outcome.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``source`` and ``target`` sections need ``shop`` and
``token``; behaviour switches (dry run, size limit, title suffix...) live
under ``migration``.  Missing values are taken from environment
variables.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import requests
from pydantic import ValidationError

from blog_migrator.extractors.shopify_extractor import extract_articles, load_full_article
from blog_migrator.migrators.shopify_client import (
    DEFAULT_API_VERSION,
    ShopifyStore,
    create_article,
    create_metafield_for_article,
    find_blog_id_by_handle,
)
from blog_migrator.models.article import ArticlePayload, MetafieldPayload
from blog_migrator.parsers.html_splitter import OVERSIZE_POLICIES, OversizedFragmentError, SplitWarning, split_html
from blog_migrator.utils.errors import report_error, report_ok
from blog_migrator.utils.migration_map import write_migration_map
from blog_migrator.utils.text import external_id_for, part_title, rewrite_domains

logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_CHARS = 240000
LOG_FILE = os.path.join("reports", "migration", "migration.log")


class ConfigError(ValueError):
    """Raised when the configuration holds an unusable value."""


def _env_bool(name: str, default: str) -> bool:
    return str(os.getenv(name, default)).strip().lower() == "true"


def parse_max_body_chars(value: Any) -> int:
    """Validate the body size limit; it must be a positive integer."""
    if isinstance(value, bool):
        raise ConfigError(f'Invalid max_body_chars: "{value}". Must be a positive integer, e.g. 240000.')
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f'Invalid max_body_chars: "{value}". Must be a positive integer, e.g. 240000.') from None
    if number <= 0:
        raise ConfigError(f'Invalid max_body_chars: "{value}". Must be a positive integer, e.g. 240000.')
    return number


class BlogMigrationTool:
    """
    Encapsulates all state and behavior required to copy the articles of
    one store's blog to another store's blog.  Detailed success and
    failure information is recorded using the
    :mod:`blog_migrator.utils.errors` module.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            config = {}

        for group, prefix in (("source", "SOURCE"), ("target", "TARGET")):
            section = config.setdefault(group, {})
            section.setdefault("shop", os.getenv(f"{prefix}_SHOP", ""))
            section.setdefault("token", os.getenv(f"{prefix}_TOKEN", ""))
            section.setdefault("api_version", os.getenv(f"{prefix}_API_VERSION", DEFAULT_API_VERSION))
            section.setdefault("blog_handle", os.getenv(f"{prefix}_BLOG_HANDLE", "blog"))

        migration = config.setdefault("migration", {})
        migration.setdefault("preserve_published_at", _env_bool("PRESERVE_PUBLISHED_AT", "true"))
        migration.setdefault("max_body_chars", os.getenv("MAX_BODY_CHARS", str(DEFAULT_MAX_BODY_CHARS)))
        migration.setdefault("title_part_suffix", os.getenv("TITLE_PART_SUFFIX", " (Part {n})"))
        migration.setdefault("rewrite_domain_from", os.getenv("REWRITE_DOMAIN_FROM", "").strip())
        migration.setdefault("rewrite_domain_to", os.getenv("REWRITE_DOMAIN_TO", "").strip())
        migration.setdefault("dry_run", _env_bool("DRY_RUN", "false"))
        migration.setdefault("oversize_policy", os.getenv("OVERSIZE_POLICY", "pass"))
        migration.setdefault("migration_map_file", os.path.join("reports", "migration_map.csv"))

        migration["max_body_chars"] = parse_max_body_chars(migration["max_body_chars"])
        if migration["oversize_policy"] not in OVERSIZE_POLICIES:
            raise ConfigError(
                f'Invalid oversize_policy: "{migration["oversize_policy"]}". Expected one of {", ".join(OVERSIZE_POLICIES)}.'
            )

        self.config = config

    def log_message(self, message: str, level: str = "INFO") -> None:
        logger.log(logging.getLevelName(level.upper()), message)
        os.makedirs(os.path.dirname(LOG_FILE), exist_ok=True)
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    def store(self, group: str) -> ShopifyStore:
        section = self.config[group]
        return ShopifyStore(section["shop"], section["token"], section.get("api_version") or DEFAULT_API_VERSION)

    def split_body(self, article: Dict[str, Any]) -> List[str]:
        """Rewrite domains in the article body and split it into parts."""
        migration = self.config["migration"]
        body = rewrite_domains(
            article.get("body_html") or "",
            migration["rewrite_domain_from"],
            migration["rewrite_domain_to"],
        )

        def on_warning(warning: SplitWarning) -> None:
            self.log_message(f"Article #{article.get('id')}: {warning}", level="WARNING")
            report_error("SPLIT_WARNING", article, detail=str(warning))

        return split_html(
            body,
            migration["max_body_chars"],
            on_warning=on_warning,
            oversize_policy=migration["oversize_policy"],
        )

    def build_payload(self, article: Dict[str, Any], body_html: str, part: int, total: int) -> ArticlePayload:
        migration = self.config["migration"]
        multi = total > 1
        title = article.get("title") or ""
        return ArticlePayload(
            title=part_title(title, part, migration["title_part_suffix"]) if multi else title,
            author=article.get("author"),
            tags=article.get("tags"),
            summary_html=article.get("summary_html"),
            body_html=body_html,
            external_id=external_id_for(article.get("id"), part if multi else None),
            published_at=article.get("published_at") if migration["preserve_published_at"] else None,
        )

    def copy_metafields(self, target: ShopifyStore, article: Dict[str, Any], created_id: Any, metafields: Iterable[Dict[str, Any]]) -> int:
        copied = 0
        for mf in metafields:
            label = f"{mf.get('namespace')}.{mf.get('key')}"
            try:
                payload = MetafieldPayload.from_source(mf)
                create_metafield_for_article(target, created_id, payload.to_api_payload())
                copied += 1
            except (requests.RequestException, ValidationError) as e:
                self.log_message(f"  (Metafield copy warn) {label}: {e}", level="WARNING")
                report_error("METAFIELD_COPY", article, e, detail=label)
        return copied

    def migrate(self, only_ids: Optional[Iterable[Any]] = None, pattern: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Migrate the selected articles of the source blog to the target blog.

        Each article is fetched in full, its body is split into parts that
        fit ``max_body_chars`` and one target article is created per part.
        Titles get the part suffix and external ids a ``:part:<n>`` suffix
        only when there is more than one part.  A failure on one article is
        reported and the run moves on to the next one.  If ``dry_run`` is
        enabled, parts are computed and logged but nothing is created.

        :param only_ids: Restrict the run to these source article ids.
        :param pattern: ``*`` wildcard applied to source article titles.
        :return: One row per created (or, in a dry run, planned) part.
        :raises BlogNotFoundError: if a blog handle does not exist.
        """
        migration = self.config["migration"]
        dry_run: bool = bool(migration["dry_run"])
        source = self.store("source")
        target = self.store("target")

        source_blog_id = find_blog_id_by_handle(source, self.config["source"]["blog_handle"])
        target_blog_id = find_blog_id_by_handle(target, self.config["target"]["blog_handle"])

        articles, selected = extract_articles(source, source_blog_id, only_ids=only_ids, pattern=pattern)
        self.log_message(f"Found {len(articles)} articles; processing {len(selected)}.")

        migrated: List[Dict[str, Any]] = []
        for summary in selected:
            self.log_message(f'Migrating article #{summary.get("id")} "{summary.get("title")}"')
            try:
                article, metafields = load_full_article(source, source_blog_id, summary.get("id"))
            except requests.RequestException as e:
                report_error("SOURCE_FETCH", summary, e)
                self.log_message(f"Could not read article #{summary.get('id')}: {e}", "ERROR")
                continue

            try:
                parts = self.split_body(article)
            except OversizedFragmentError as e:
                report_error("SPLIT_REJECTED", article, e)
                self.log_message(f"Skipping article #{article.get('id')}: {e}", "ERROR")
                continue

            for index, body_html in enumerate(parts, start=1):
                try:
                    payload = self.build_payload(article, body_html, index, len(parts))
                except ValidationError as e:
                    report_error("ARTICLE_CREATE", article, e)
                    self.log_message(f"Invalid payload for article #{article.get('id')}: {e}", "ERROR")
                    break
                row = {
                    "SourceArticleId": article.get("id"),
                    "Part": index,
                    "TargetArticleId": None,
                    "Title": payload.title,
                    "ExternalId": payload.external_id,
                }

                if dry_run:
                    self.log_message(f'[DRY_RUN] Would create article with title="{payload.title}" chars={len(body_html)}')
                    report_ok("ARTICLE_DRY_RUN", article, {"part": index, "chars": len(body_html)})
                    migrated.append(row)
                    continue

                try:
                    created = create_article(target, target_blog_id, payload.to_api_payload())
                except requests.RequestException as e:
                    error_details = e.response.text if getattr(e, "response", None) is not None else str(e)
                    report_error("ARTICLE_CREATE", article, e, detail=f"part {index}/{len(parts)}")
                    self.log_message(f"Failed to create part {index} of article #{article.get('id')}: {error_details}", "ERROR")
                    break

                row["TargetArticleId"] = created.get("id")
                self.log_message(f'Created article id={created.get("id")} title="{created.get("title")}"')
                report_ok("ARTICLE_CREATED", article, {"part": index, "target_id": created.get("id")})
                self.copy_metafields(target, article, created.get("id"), metafields)
                migrated.append(row)

        try:
            path = write_migration_map(migrated, out_path=migration["migration_map_file"])
            self.log_message(f"Migration map written to {path} with {len(migrated)} entries")
        except OSError as e:
            self.log_message(f"Failed to write migration map: {e}", "ERROR")

        self.log_message("Migration complete.")
        return migrated
