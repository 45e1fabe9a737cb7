"""
Structured reporting of per-record migration events.

The :mod:`contentful_migrator.utils.errors` module centralizes the writing of
report entries for both failed and successful operations during the migration.
Each entry is appended to a JSON Lines file under ``reports/migration`` so that
the outcome of a run can be reviewed or parsed afterwards, independently of
the plain-text log.

Two public functions are provided:

``report_error``
    Record an error that occurred for a record.  An optional exception can be
    supplied and will be serialized to the report.

``report_ok``
    Record a successful step for a record.  Additional key/value information
    can be attached to the entry via the ``extra`` parameter.

The ``ERRORS`` dictionary maps event codes to human readable messages.  Codes
not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from .logs import log_message

# Mapping of event codes used throughout the migration to descriptive messages.
# The same lookup serves :func:`report_error` and :func:`report_ok`.
ERRORS: Dict[str, str] = {
    "ASSET_NOT_FOUND": "No Contentful asset matches the image filename",
    "ASSET_LOOKUP": "Failed to look up or upload an image asset",
    "CHECKPOINT_WRITE": "Failed to save a checkpoint record",
    "LINKED_ENTRIES": "Failed to create linked entries for post",
    "MISSING_LINKED_ENTRIES": "Post has no linked entries and cannot be assembled",
    "REVIEW_POST": "Failed to create or publish review post",
    "SEO_IMAGE_UPDATE": "Failed to update SEO featured image",
    "NOTES_UPDATE": "Failed to convert score notes to Markdown",
    "ASSET_RESOLVED": "Asset bound to image filename",
    "LINKED_ENTRIES_CREATED": "Linked entries created and published",
    "REVIEW_POST_PUBLISHED": "Review post created and published",
    "SEO_IMAGE_UPDATED": "SEO featured image updated",
    "NOTES_CONVERTED": "Score notes converted to Markdown",
}

_REPORT_DIR = os.path.join("reports", "migration")
_ERROR_LOG = os.path.join(_REPORT_DIR, "errors.jsonl")
_OK_LOG = os.path.join(_REPORT_DIR, "success.jsonl")


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(_REPORT_DIR, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _describe(record: Any) -> Dict[str, Any]:
    if isinstance(record, dict):
        get = record.get
    else:
        get = lambda key: getattr(record, key, None)  # noqa: E731
    return {"id": get("id"), "slug": get("slug"), "title": get("title")}


def report_error(code: str, record: Any, exc: Optional[BaseException] = None) -> None:
    """Log an error event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    record:
        The source post, review post or plain dictionary associated with the
        error.  Only its ``id``, ``slug`` and ``title`` are referenced.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {"code": code, "message": message, **_describe(record)}
    if exc is not None:
        entry["error"] = str(exc)
    log_message(f"{message} - {entry['id'] or entry['slug'] or ''}", level="ERROR")
    _write_jsonl(_ERROR_LOG, entry)


def report_ok(code: str, record: Any, extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    record:
        The record associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {"code": code, "message": message, **_describe(record)}
    if extra:
        entry.update(extra)
    _write_jsonl(_OK_LOG, entry)
