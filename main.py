"""
Entry point for the review-post → Contentful migration tool.
"""

import argparse

from dotenv import load_dotenv

from contentful_migrator.migration_tool import CONFIG_FILE, ContentfulMigrationTool
from contentful_migrator.utils.checkpoints import CheckpointError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import exported review posts into Contentful.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file")
    parser.add_argument("--input", default=None, help="Export file (defaults to migration.input_file)")
    parser.add_argument("--limit", type=int, default=None, help="Process at most N posts")
    return parser.parse_args()


def main():
    """
    Main function to run the migration tool.
    """
    args = parse_args()
    load_dotenv()

    tool = ContentfulMigrationTool(config_file=args.config)
    if args.limit is not None:
        tool.config["migration"]["limit"] = args.limit
    tool.log_message("Starting review post import into Contentful.")

    if not tool.config["contentful"]["management_token"] or not tool.config["contentful"]["space_id"]:
        tool.log_message(
            "CONTENTFUL_MANAGEMENT_TOKEN and CONTENTFUL_SPACE_ID must be set (environment, .env or config file).",
            level="ERROR",
        )
        return

    try:
        posts = tool.extract_posts(args.input)
    except (OSError, ValueError) as e:
        tool.log_message(f"Could not load the export file: {e}", level="ERROR")
        return

    if not posts:
        tool.log_message("No posts found in the export file.", level="ERROR")
        return

    try:
        summary = tool.migrate_posts(posts)
    except CheckpointError as e:
        tool.log_message(f"Error during import: {e}", level="ERROR")
        return

    if summary.total_failed:
        tool.log_message(f"{summary.total_failed} records failed; run the import again to retry them.", level="WARNING")
    tool.log_message("Migration process finished.")


if __name__ == "__main__":
    main()
