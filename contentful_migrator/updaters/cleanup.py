from __future__ import annotations

from typing import Optional

from contentful_migrator.migrators.contentful_api import ContentfulSession, RetryPolicy
from contentful_migrator.utils.logs import log_message


def delete_all_entries(
    session: ContentfulSession,
    *,
    batch_size: int = 1000,
    content_type: Optional[str] = None,
    policy: Optional[RetryPolicy] = None,
) -> int:
    """
    Unpublish and delete every entry of the environment, batch by batch.

    :param session: The Contentful session.
    :param batch_size: Entries fetched per request.
    :param content_type: Restrict the deletion to one content type.
    :param policy: Optional rate-limit policy for every API call.
    :return: Number of deleted entries.
    """
    call = policy.run if policy else (lambda fn: fn())
    params = {"limit": batch_size}
    if content_type:
        params["content_type"] = content_type

    deleted = 0
    while True:
        items = call(lambda: session.get_entries(**params)).get("items", [])
        if not items:
            log_message("All entries have been deleted.")
            return deleted

        log_message(f"Deleting batch of {len(items)} entries...")
        for entry in items:
            if session.is_published(entry):
                entry = call(lambda: session.unpublish_entry(entry))
            call(lambda: session.delete_entry(entry))
            deleted += 1
            log_message(f"Deleted entry: {entry['sys']['id']}")
