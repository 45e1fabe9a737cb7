#!/usr/bin/env python3
"""
Converts the HTML notes of every ``scores`` entry to Markdown.

Processed entry ids are appended to a plain-text log
(``migration.processed_ids_log``, default ``html-to-markdown.log``) so the
script can be stopped and started again without converting an entry twice.

Usage:
  python scripts/convert_notes_to_markdown.py [--config config/migration_config.json] [--log FILE]
"""

import argparse
import os
import sys

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from contentful_migrator.migration_tool import CONFIG_FILE, ContentfulMigrationTool  # noqa: E402
from contentful_migrator.updaters import convert_score_notes  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Convert HTML score notes to Markdown.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file")
    parser.add_argument("--log", default=None, help="Processed ids log (defaults to migration.processed_ids_log)")
    args = parser.parse_args()

    load_dotenv()
    tool = ContentfulMigrationTool(config_file=args.config)
    migration = tool.config["migration"]
    result = convert_score_notes(
        tool.session,
        processed_log_path=args.log or migration["processed_ids_log"],
        max_attempts=int(migration["version_conflict_retries"]),
        delay=float(migration["notes_update_delay"]),
        policy=tool.write_policy,
    )
    print(f"Converted {result.total_succeeded} entries, skipped {result.total_skipped}, failed {result.total_failed}.")


if __name__ == "__main__":
    main()
