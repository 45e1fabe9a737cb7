from __future__ import annotations

import json
from typing import Any, List

from pydantic import ValidationError

from contentful_migrator.models import SourcePost
from contentful_migrator.utils.logs import log_message


def extract_posts(file_path: str) -> List[SourcePost]:
    """Read and validate the posts of a static export file.

    The export is a JSON object whose ``entries`` key holds the list of
    posts; a bare list of posts is accepted too.  Entries that do not
    validate are logged and skipped so one bad record does not block the
    rest of the export.

    Args:
        file_path (str): Path to the export, usually ``data/exported_posts.json``.

    Returns:
        list: The validated :class:`SourcePost` records, in export order.

    Raises:
        FileNotFoundError: If the export file does not exist.
        ValueError: If the file is not JSON or holds no list of entries.
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data: Any = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Export file {file_path} is not valid JSON: {e}") from e

    entries = data.get("entries") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"Export file {file_path} does not contain a list of entries")

    posts: List[SourcePost] = []
    for index, item in enumerate(entries):
        try:
            posts.append(SourcePost.model_validate(item))
        except ValidationError as e:
            log_message(f"Skipping export entry #{index}: {e.error_count()} invalid field(s): {e}", level="WARNING")
    return posts
