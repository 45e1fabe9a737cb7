#!/usr/bin/env python3
"""
Unpublishes and deletes every entry of the configured Contentful environment.

CAUTION: this empties the environment.  The script does nothing unless
``--yes`` is given.

Usage:
  python scripts/delete_all_entries.py --yes [--content-type scores]
"""

import argparse
import os
import sys

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from contentful_migrator.migration_tool import CONFIG_FILE, ContentfulMigrationTool  # noqa: E402
from contentful_migrator.updaters import delete_all_entries  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Delete all entries of a Contentful environment.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file")
    parser.add_argument("--content-type", default=None, help="Only delete entries of this content type")
    parser.add_argument("--batch-size", type=int, default=1000, help="Entries fetched per request")
    parser.add_argument("--yes", action="store_true", help="Confirm the deletion")
    args = parser.parse_args()

    if not args.yes:
        print("Refusing to delete entries without --yes.", file=sys.stderr)
        sys.exit(1)

    load_dotenv()
    tool = ContentfulMigrationTool(config_file=args.config)
    try:
        deleted = delete_all_entries(
            tool.session,
            batch_size=args.batch_size,
            content_type=args.content_type,
            policy=tool.write_policy,
        )
    except Exception as e:
        print(f"Error deleting entries: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Deleted {deleted} entries.")


if __name__ == "__main__":
    main()
