"""
Structured logging helpers for migration errors and successes.

The :mod:`blog_migrator.utils.errors` module centralizes the writing of log
entries for both failed and successful operations during the migration.
Each entry is appended to a JSON Lines file under ``reports/migration`` so
that the information can be reviewed or parsed after a run.

Two public functions are provided:

``report_error``
    Record an error or warning that occurred for an article.  An optional
    exception can be supplied and will be serialized to the log.

``report_ok``
    Record a successful step for an article.  Additional key/value
    information can be attached to the entry via the ``extra`` parameter.

The ``ERRORS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

# Mapping of event codes used throughout the migration to descriptive messages.
# The keys include both error and success codes as the same lookup is used by
# :func:`report_error` and :func:`report_ok`.
ERRORS: Dict[str, str] = {
    "SOURCE_FETCH": "Failed to read article from the source store",
    "ARTICLE_CREATE": "Failed to create article on the target store",
    "METAFIELD_COPY": "Failed to copy metafield",
    "SPLIT_WARNING": "Body split needed attention",
    "SPLIT_REJECTED": "Body contains an element larger than the size limit",
    "ARTICLE_CREATED": "Article created successfully",
    "ARTICLE_DRY_RUN": "Article would be created (dry run)",
}

_REPORT_DIR = os.path.join("reports", "migration")
_ERROR_LOG = os.path.join(_REPORT_DIR, "errors.jsonl")
_OK_LOG = os.path.join(_REPORT_DIR, "success.jsonl")


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _entry(code: str, article: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "article_id": article.get("id"),
        "title": article.get("title"),
    }


def report_error(code: str, article: Dict[str, Any], exc: Optional[Exception] = None, detail: Optional[str] = None) -> None:
    """Log an error event for ``article``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    article:
        The source article associated with the error.  Only the ``id`` and
        ``title`` keys are referenced if present.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    detail:
        Optional free-form text, e.g. the warning produced by the splitter.
    """
    entry = _entry(code, article)
    if exc is not None:
        entry["error"] = str(exc)
    if detail:
        entry["detail"] = detail
    print(f"[ERROR] {entry['message']} - {article.get('id', '')}")
    _write_jsonl(_ERROR_LOG, entry)


def report_ok(code: str, article: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``article``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    article:
        The source article associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    """
    entry = _entry(code, article)
    if extra:
        entry.update(extra)
    print(f"[OK] {entry['message']} - {article.get('id', '')}")
    _write_jsonl(_OK_LOG, entry)
