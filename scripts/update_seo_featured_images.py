#!/usr/bin/env python3
"""
Links the ``seo`` entry of every migrated post to the asset of its featured
image.

Reads the export and the two checkpoint files written by the import
(``linked_entries_cache.json`` and ``asset_cache.json``), then updates and
republishes each SEO entry, retrying on version conflicts.

Usage:
  python scripts/update_seo_featured_images.py [--config config/migration_config.json]
"""

import argparse
import os
import sys

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from contentful_migrator.migration_tool import CONFIG_FILE, ContentfulMigrationTool  # noqa: E402
from contentful_migrator.updaters import update_seo_featured_images  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Set featured images on migrated SEO entries.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file")
    parser.add_argument("--input", default=None, help="Export file (defaults to migration.input_file)")
    args = parser.parse_args()

    load_dotenv()
    tool = ContentfulMigrationTool(config_file=args.config)
    try:
        posts = tool.extract_posts(args.input)
    except (OSError, ValueError) as e:
        print(f"Could not load the export file: {e}", file=sys.stderr)
        sys.exit(1)

    result = update_seo_featured_images(
        tool.session,
        posts,
        tool.checkpoints.load("linked_entries").data,
        tool.checkpoints.load("assets").data,
        max_attempts=int(tool.config["migration"]["version_conflict_retries"]),
        policy=tool.write_policy,
    )
    print(f"Updated {result.total_succeeded} SEO entries, skipped {result.total_skipped}, failed {result.total_failed}.")


if __name__ == "__main__":
    main()
