"""
Conversion of ``scores`` notes from HTML to Markdown.

The notes fields were migrated verbatim from the export, which stored them
as HTML.  This pass rewrites them as Markdown in place.  Converted entry ids
are appended to a plain-text log, one per line, so a rerun skips them.
"""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Dict, List, Optional, Set

from contentful_migrator.migrators.base import PhaseResult
from contentful_migrator.migrators.contentful_api import ContentfulSession, RetryPolicy, update_with_retries
from contentful_migrator.parsers.markdown import contains_html, html_to_markdown
from contentful_migrator.utils.errors import report_error, report_ok
from contentful_migrator.utils.logs import log_message

SCORES_CONTENT_TYPE = "scores"
NOTES_FIELDS = ("strength_notes", "taste_notes", "quality_notes", "overall_notes")


def read_processed_ids(path: str) -> Set[str]:
    if not os.path.exists(path):
        return set()
    with open(path, "r", encoding="utf-8") as f:
        return {line.strip() for line in f if line.strip()}


def log_processed_id(path: str, entry_id: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{entry_id}\n")


def fetch_scores_entries(
    session: ContentfulSession,
    *,
    page_size: int = 100,
    policy: Optional[RetryPolicy] = None,
) -> List[Dict[str, Any]]:
    """All ``scores`` entries that have at least one notes field."""
    call: Callable[[Callable[[], Any]], Any] = policy.run if policy else (lambda fn: fn())
    entries: List[Dict[str, Any]] = []
    skip = 0
    while True:
        page = call(lambda: session.get_entries(content_type=SCORES_CONTENT_TYPE, skip=skip, limit=page_size))
        items = page.get("items", [])
        entries.extend(items)
        skip += len(items)
        if not items or skip >= page.get("total", 0):
            break
    return [
        entry for entry in entries
        if any(session.field_value(entry, name) for name in NOTES_FIELDS)
    ]


def html_notes(session: ContentfulSession, entry: Dict[str, Any]) -> Dict[str, str]:
    """The notes fields of ``entry`` that still hold HTML."""
    found: Dict[str, str] = {}
    for name in NOTES_FIELDS:
        value = session.field_value(entry, name)
        if isinstance(value, str) and contains_html(value):
            found[name] = value
    return found


def convert_score_notes(
    session: ContentfulSession,
    *,
    processed_log_path: str,
    max_attempts: int = 3,
    delay: float = 1.0,
    policy: Optional[RetryPolicy] = None,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> PhaseResult:
    """
    Rewrite the HTML notes of every ``scores`` entry as Markdown.

    Each entry is saved through :func:`update_with_retries`, converting the
    notes of the freshly fetched version so a retry never writes stale text.
    Entries listed in ``processed_log_path`` are skipped; converted ones are
    appended to it.  A failed entry is logged and the pass moves on.
    """
    result = PhaseResult(phase="notes_markdown").start()
    processed = read_processed_ids(processed_log_path)

    for entry in fetch_scores_entries(session, policy=policy):
        entry_id = entry["sys"]["id"]
        if entry_id in processed:
            log_message(f"Skipping entry {entry_id}, already processed.", level="DEBUG")
            result.total_skipped += 1
            continue

        if not html_notes(session, entry):
            log_message(f"No HTML to convert for entry {entry_id}")
            result.total_skipped += 1
            continue

        result.total_attempted += 1

        def convert(fresh: Dict[str, Any]) -> None:
            fields = fresh.setdefault("fields", {})
            for name, html in html_notes(session, fresh).items():
                fields[name][session.locale] = html_to_markdown(html)

        try:
            update_with_retries(session, entry_id, convert, max_attempts=max_attempts, policy=policy)
        except Exception as e:
            log_message(f"Error converting notes of entry {entry_id}: {e}", level="ERROR")
            report_error("NOTES_UPDATE", {"id": entry_id}, e)
            result.add_error(entry_id, "update_scores_entry", e)
        else:
            log_message(f"Updated entry {entry_id}")
            log_processed_id(processed_log_path, entry_id)
            report_ok("NOTES_CONVERTED", {"id": entry_id})
            result.total_succeeded += 1
        sleep_fn(delay)
    return result.finish()
