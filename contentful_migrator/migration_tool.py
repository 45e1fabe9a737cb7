"""
High-level orchestration of the export → Contentful migration.

This module defines a :class:`ContentfulMigrationTool` class that ties
together the extractor, the migrators and the checkpoint files into a
complete, resumable pipeline.  A run goes through four phases in a fixed
order:

1. ``AssetsResolved`` – bind every image URL of the export to an asset.
2. ``LinkedEntriesCreated`` – create the ``seo``, ``productInfo`` and
   ``scores`` entries of every post.
3. ``PostsAssembled`` – build ``reviewPost`` entries locally, without any
   remote call.
4. ``PostsPublished`` – create and publish the review posts.

Each phase consults its checkpoint file before doing remote work and
records every completed unit right away, so running the tool again resumes
where the previous run stopped and never creates an entity twice.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``contentful`` section holds the credentials and target
space; the ``migration`` section holds paths, delays and retry bounds.
Missing values are filled from ``CONTENTFUL_*`` environment variables.
"""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from contentful_migrator.extractors import extract_posts
from contentful_migrator.migrators import (
    ContentfulSession,
    PhaseResult,
    RetryPolicy,
    collect_images,
    create_linked_entries,
    create_review_posts,
    resolve_assets,
)
from contentful_migrator.models import ReviewPost, SourcePost
from contentful_migrator.parsers import transform_posts
from contentful_migrator.utils.checkpoints import CheckpointStore
from contentful_migrator.utils.errors import report_error
from contentful_migrator.utils.logs import log_message

CONFIG_FILE = os.path.join("config", "migration_config.json")


class MigrationPhase(Enum):
    ASSETS_RESOLVED = "AssetsResolved"
    LINKED_ENTRIES_CREATED = "LinkedEntriesCreated"
    POSTS_ASSEMBLED = "PostsAssembled"
    POSTS_PUBLISHED = "PostsPublished"


@dataclass
class MigrationSummary:
    completed_phases: List[MigrationPhase] = field(default_factory=list)
    results: Dict[str, PhaseResult] = field(default_factory=dict)
    unassembled_posts: List[str] = field(default_factory=list)
    review_posts: List[ReviewPost] = field(default_factory=list)

    @property
    def total_failed(self) -> int:
        return sum(result.total_failed for result in self.results.values())


def build_config(config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the configuration and fill every missing key with its default.

    :param config: An explicit configuration dictionary.
    :param config_file: Path of a JSON configuration file; used when it exists.
    :return: The completed configuration.
    """
    if config_file and os.path.exists(config_file):
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    elif config is None:
        config = {}

    config.setdefault("contentful", {})
    config["contentful"].setdefault("management_token", os.getenv("CONTENTFUL_MANAGEMENT_TOKEN", ""))
    config["contentful"].setdefault("space_id", os.getenv("CONTENTFUL_SPACE_ID", ""))
    config["contentful"].setdefault("environment", os.getenv("CONTENTFUL_ENVIRONMENT", "master"))
    config["contentful"].setdefault("locale", os.getenv("CONTENTFUL_LOCALE", "en-US"))
    config["contentful"].setdefault("base_url", "https://api.contentful.com")

    config.setdefault("migration", {})
    config["migration"].setdefault("input_file", os.path.join("data", "exported_posts.json"))
    config["migration"].setdefault("cache_dir", ".")
    config["migration"].setdefault("limit", None)
    config["migration"].setdefault("upload_missing_assets", False)
    config["migration"].setdefault("max_retries", 5)
    config["migration"].setdefault("lookup_retry_delay", 1.0)
    config["migration"].setdefault("write_retry_delay", 2.0)
    config["migration"].setdefault("version_conflict_retries", 3)
    config["migration"].setdefault("asset_lookup_delay", 0.1)
    config["migration"].setdefault("asset_upload_delay", 1.0)
    config["migration"].setdefault("post_delay", 2.0)
    config["migration"].setdefault("notes_update_delay", 1.0)
    config["migration"].setdefault("processed_ids_log", "html-to-markdown.log")
    return config


class ContentfulMigrationTool:
    """
    Encapsulates all state required to migrate the exported posts into one
    Contentful environment: the configuration, the session handle, the two
    retry policies and the checkpoint store.  Per-record outcomes are
    recorded with :mod:`contentful_migrator.utils.errors`.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        session: Optional[ContentfulSession] = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = build_config(config, config_file=config_file)
        migration = self.config["migration"]

        self.session = session or ContentfulSession(self.config["contentful"])
        self.sleep_fn = sleep_fn
        # Lookups and writes were tuned separately against the API limits.
        self.lookup_policy = RetryPolicy(
            base_delay=float(migration["lookup_retry_delay"]),
            max_attempts=int(migration["max_retries"]),
            sleep_fn=sleep_fn,
        )
        self.write_policy = RetryPolicy(
            base_delay=float(migration["write_retry_delay"]),
            max_attempts=int(migration["max_retries"]),
            sleep_fn=sleep_fn,
        )
        self.checkpoints = CheckpointStore(migration["cache_dir"])
        self.phase: Optional[MigrationPhase] = None

    def log_message(self, message: str, level: str = "INFO") -> None:
        log_message(message, level=level)

    def extract_posts(self, input_file: Optional[str] = None) -> List[SourcePost]:
        path = input_file or self.config["migration"]["input_file"]
        self.log_message(f"Extracting posts from {path}")
        posts = extract_posts(path)
        self.log_message(f"Posts data loaded successfully ({len(posts)} posts)")
        return posts

    def _complete(self, phase: MigrationPhase, summary: MigrationSummary) -> None:
        self.phase = phase
        summary.completed_phases.append(phase)
        self.log_message(f"Phase {phase.value} complete")

    def resolve_assets(self, posts: List[SourcePost]) -> PhaseResult:
        migration = self.config["migration"]
        checkpoint = self.checkpoints.load("assets")
        images = collect_images(posts)
        self.log_message(f"Resolving {len(images)} image URLs ({len(checkpoint)} already cached)")
        return resolve_assets(
            self.session,
            images,
            checkpoint,
            lookup_policy=self.lookup_policy,
            write_policy=self.write_policy,
            lookup_delay=float(migration["asset_lookup_delay"]),
            upload_delay=float(migration["asset_upload_delay"]),
            create_missing=bool(migration["upload_missing_assets"]),
            sleep_fn=self.sleep_fn,
        )

    def create_linked_entries(self, posts: List[SourcePost]) -> PhaseResult:
        asset_map = self.checkpoints.load("assets").data
        checkpoint = self.checkpoints.load("linked_entries")
        return create_linked_entries(
            self.session,
            posts,
            asset_map,
            checkpoint,
            write_policy=self.write_policy,
        )

    def assemble_posts(self, posts: List[SourcePost]) -> List[ReviewPost]:
        asset_map = self.checkpoints.load("assets").data
        linked_entries_map = self.checkpoints.load("linked_entries").data
        return transform_posts(posts, asset_map, linked_entries_map)

    def publish_posts(self, review_posts: List[ReviewPost]) -> PhaseResult:
        checkpoint = self.checkpoints.load("blog_posts")
        return create_review_posts(
            self.session,
            review_posts,
            checkpoint,
            write_policy=self.write_policy,
            post_delay=float(self.config["migration"]["post_delay"]),
            sleep_fn=self.sleep_fn,
        )

    def migrate_posts(self, posts: List[SourcePost]) -> MigrationSummary:
        """
        Run the four phases over ``posts``.

        Failures of individual records are logged and reported and do not stop
        the run.  Failing to prepare the checkpoint files does.

        :param posts: The source posts, typically from :meth:`extract_posts`.
        :return: Per-phase counters and the review posts that were assembled.
        :raises CheckpointError: if the checkpoint files cannot be created.
        """
        self.checkpoints.ensure_exists()

        limit: Optional[int] = self.config["migration"].get("limit")
        if limit is not None:
            posts = posts[:limit]
        summary = MigrationSummary()

        self.log_message("Retrieving existing asset IDs...")
        summary.results["assets"] = self.resolve_assets(posts)
        self._complete(MigrationPhase.ASSETS_RESOLVED, summary)

        self.log_message("Creating linked entries...")
        summary.results["linked_entries"] = self.create_linked_entries(posts)
        self._complete(MigrationPhase.LINKED_ENTRIES_CREATED, summary)

        summary.review_posts = self.assemble_posts(posts)
        assembled = {post.source_id for post in summary.review_posts}
        for post in posts:
            if post.id not in assembled:
                summary.unassembled_posts.append(post.id)
                self.log_message(f"Post {post.id} has no linked entries yet, not assembling it", level="WARNING")
                report_error("MISSING_LINKED_ENTRIES", post)
        self._complete(MigrationPhase.POSTS_ASSEMBLED, summary)

        self.log_message(f"Publishing {len(summary.review_posts)} blog posts...")
        summary.results["blog_posts"] = self.publish_posts(summary.review_posts)
        self._complete(MigrationPhase.POSTS_PUBLISHED, summary)

        for result in summary.results.values():
            self.log_message(
                f"{result.phase}: {result.total_succeeded} done, {result.total_skipped} cached, "
                f"{result.total_failed} failed"
            )
        return summary
