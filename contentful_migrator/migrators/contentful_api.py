"""
Contentful Content Management API helpers.

This module implements the low-level interactions with the Contentful
Management API (CMA) used by the migration.  A :class:`ContentfulSession` is
built once from configuration and passed explicitly to every component; it
performs asset lookups and uploads, creates entries, publishes them and
updates them under optimistic locking.

Failed responses are mapped to exceptions that mirror the CMA error ids:
:class:`RateLimitExceeded` (HTTP 429), :class:`VersionMismatch` (HTTP 409)
and the generic :class:`ContentfulError`.  All of them are
``requests.HTTPError`` subclasses and carry the response.

Two retry helpers are provided:

``with_retries`` / ``RetryPolicy``
    Repeat a single call on rate-limit errors with a doubling delay.
    Lookups and writes are run under separately configured policies.

``update_with_retries``
    Fetch, modify, update and publish an entry, re-fetching the latest
    version after each version conflict.

Usage example::

    session = ContentfulSession({"management_token": ..., "space_id": ...})
    write = RetryPolicy(base_delay=2.0, max_attempts=5)
    entry = write.run(lambda: session.create_entry("seo", {"title": session.localize("Hi")}))
    write.run(lambda: session.publish_entry(entry))
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from contentful_migrator.utils.logs import log_message

CONTENTFUL_CMA_URL = "https://api.contentful.com"
CMA_CONTENT_TYPE = "application/vnd.contentful.management.v1+json"
DEFAULT_LOCALE = "en-US"
DEFAULT_ENVIRONMENT = "master"

T = TypeVar("T")


###############################################################################
# Errors
###############################################################################

class ContentfulError(requests.HTTPError):
    """A request to the Content Management API did not succeed."""


class RateLimitExceeded(ContentfulError):
    """The API answered 429; the request may be repeated after a pause."""


class VersionMismatch(ContentfulError):
    """The entry changed since it was fetched; re-fetch and try again."""


def error_from_response(resp: requests.Response) -> ContentfulError:
    """Build the exception matching a failed CMA response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    error_id = None
    message = resp.text
    if isinstance(body, dict):
        error_id = (body.get("sys") or {}).get("id")
        message = body.get("message") or message
    text = f"{resp.status_code} {error_id or resp.reason}: {message}"

    if resp.status_code == 429 or error_id == "RateLimitExceeded":
        return RateLimitExceeded(text, response=resp)
    if resp.status_code == 409 or error_id == "VersionMismatch":
        return VersionMismatch(text, response=resp)
    return ContentfulError(text, response=resp)


###############################################################################
# Retry utilities
###############################################################################

def with_retries(
    fn: Callable[[], T],
    *,
    max_attempts: int = 5,
    base_delay: float = 1.0,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute a zero-argument remote call, retrying on rate-limit errors.

    The delay starts at ``base_delay`` and doubles after every retry.  Any
    error other than :class:`RateLimitExceeded` propagates immediately.

    :param fn: A zero-argument callable that performs the API call.
    :param max_attempts: Maximum number of calls before giving up.
    :param base_delay: Delay in seconds before the first retry.
    :param sleep_fn: Function used to wait between attempts.
    :return: Whatever ``fn`` returns.
    :raises RateLimitExceeded: the last rate-limit error once all attempts fail.
    """
    delay = base_delay
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except RateLimitExceeded:
            if attempt >= max_attempts:
                raise
            log_message(f"Rate limit exceeded. Retrying in {delay:.2f}s...", level="WARNING")
            sleep_fn(delay)
            delay *= 2


@dataclass
class RetryPolicy:
    """A named pairing of base delay and attempt bound for :func:`with_retries`."""

    base_delay: float
    max_attempts: int = 5
    sleep_fn: Callable[[float], None] = field(default=time.sleep, repr=False)

    def run(self, fn: Callable[[], T]) -> T:
        return with_retries(
            fn,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            sleep_fn=self.sleep_fn,
        )


def update_with_retries(
    session: "ContentfulSession",
    entry_id: str,
    mutate: Callable[[Dict[str, Any]], None],
    *,
    max_attempts: int = 3,
    publish: bool = True,
    policy: Optional[RetryPolicy] = None,
) -> Dict[str, Any]:
    """
    Fetch an entry, apply ``mutate`` to it, save it and optionally publish it.

    Each attempt starts from a fresh copy of the entry so the update carries
    the latest version.  A :class:`VersionMismatch` triggers another attempt
    until ``max_attempts`` is reached, after which it propagates.

    :param session: The Contentful session.
    :param entry_id: Id of the entry to update.
    :param mutate: Callable changing ``entry["fields"]`` in place.
    :param max_attempts: Number of fetch-modify-update cycles allowed.
    :param publish: Whether to publish the updated version.
    :param policy: Optional rate-limit policy wrapped around every call.
    :return: The updated (and published) entry.
    """
    call: Callable[[Callable[[], Any]], Any] = policy.run if policy else (lambda fn: fn())
    attempt = 0
    while True:
        attempt += 1
        entry = call(lambda: session.get_entry(entry_id))
        mutate(entry)
        try:
            updated = call(lambda: session.update_entry_fields(entry))
            if publish:
                updated = call(lambda: session.publish_entry(updated))
            return updated
        except VersionMismatch:
            if attempt >= max_attempts:
                raise
            log_message(f"Version conflict on entry {entry_id}, retrying...", level="WARNING")


###############################################################################
# Session
###############################################################################

def contentful_headers(cfg: Dict[str, Any]) -> Dict[str, str]:
    """
    Construct the default headers required for CMA requests.

    :param cfg: The ``contentful`` configuration with a ``management_token``.
    :return: A dictionary of headers including Authorization.
    """
    return {
        "Authorization": f"Bearer {cfg.get('management_token', '')}",
        "Content-Type": CMA_CONTENT_TYPE,
    }


def _version_header(resource: Dict[str, Any]) -> Dict[str, str]:
    return {"X-Contentful-Version": str(resource["sys"]["version"])}


class ContentfulSession:
    """
    Handle on one Contentful space environment.

    :param cfg: The ``contentful`` configuration section: ``management_token``,
        ``space_id``, ``environment`` (default ``master``), ``locale``
        (default ``en-US``) and ``base_url``.
    :param http: Optional pre-built ``requests.Session``.
    """

    def __init__(self, cfg: Dict[str, Any], *, http: Optional[requests.Session] = None) -> None:
        self.space_id = cfg.get("space_id", "")
        self.environment_id = cfg.get("environment") or DEFAULT_ENVIRONMENT
        self.locale = cfg.get("locale") or DEFAULT_LOCALE
        self.base_url = (cfg.get("base_url") or CONTENTFUL_CMA_URL).rstrip("/")
        self.http = http or requests.Session()
        self.http.headers.update(contentful_headers(cfg))

    @property
    def environment_url(self) -> str:
        return f"{self.base_url}/spaces/{self.space_id}/environments/{self.environment_id}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        resp = self.http.request(
            method,
            f"{self.environment_url}{path}",
            params=params,
            json=body,
            headers=headers,
        )
        if resp.status_code >= 400:
            raise error_from_response(resp)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    # Localization ------------------------------------------------------------

    def localize(self, value: Any) -> Dict[str, Any]:
        """Wrap ``value`` in the configured locale slot."""
        return {self.locale: value}

    def localize_fields(self, fields: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        return {name: self.localize(value) for name, value in fields.items()}

    def field_value(self, resource: Dict[str, Any], name: str) -> Any:
        """Read the configured locale slot of a field, or ``None``."""
        return ((resource.get("fields") or {}).get(name) or {}).get(self.locale)

    # Assets ------------------------------------------------------------------

    def lookup_assets_by_filename(self, filename: str, *, limit: int = 1) -> List[Dict[str, Any]]:
        """Return assets whose stored file name equals ``filename``."""
        data = self._request(
            "GET",
            "/assets",
            params={"fields.file.fileName": filename, "limit": limit},
        )
        return data.get("items", [])

    def create_asset(
        self,
        *,
        title: str,
        file_name: str,
        upload_url: str,
        content_type: str = "image/jpeg",
    ) -> Dict[str, Any]:
        """Create an (unprocessed) asset that Contentful will fetch from ``upload_url``."""
        body = {
            "fields": {
                "title": self.localize(title),
                "file": self.localize({
                    "contentType": content_type,
                    "fileName": file_name,
                    "upload": upload_url,
                }),
            }
        }
        return self._request("POST", "/assets", body=body)

    def process_and_publish_asset(
        self,
        asset: Dict[str, Any],
        *,
        poll_attempts: int = 10,
        poll_delay: float = 1.0,
        policy: Optional[RetryPolicy] = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> Dict[str, Any]:
        """
        Process the asset file for the configured locale, wait until the file
        has a URL and publish the asset.

        ``policy`` retries each request on its own, so a rate-limited publish
        is repeated with the version read by the last poll.

        :raises ContentfulError: if processing does not finish within
            ``poll_attempts`` checks.
        """
        run = policy.run if policy else (lambda fn: fn())
        asset_id = asset["sys"]["id"]
        run(lambda: self._request(
            "PUT",
            f"/assets/{asset_id}/files/{self.locale}/process",
            headers=_version_header(asset),
        ))
        for _ in range(poll_attempts):
            current = run(lambda: self._request("GET", f"/assets/{asset_id}"))
            file_info = self.field_value(current, "file") or {}
            if file_info.get("url"):
                return run(lambda: self._request(
                    "PUT",
                    f"/assets/{asset_id}/published",
                    headers=_version_header(current),
                ))
            sleep_fn(poll_delay)
        raise ContentfulError(f"Asset {asset_id} was not processed after {poll_attempts} checks")

    # Entries -----------------------------------------------------------------

    def create_entry(self, content_type: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create a draft entry of ``content_type`` with already localized ``fields``."""
        return self._request(
            "POST",
            "/entries",
            body={"fields": fields},
            headers={"X-Contentful-Content-Type": content_type},
        )

    def publish_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        entry_id = entry["sys"]["id"]
        return self._request("PUT", f"/entries/{entry_id}/published", headers=_version_header(entry))

    def get_entry(self, entry_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/entries/{entry_id}")

    def update_entry_fields(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        """Save ``entry["fields"]`` against the version the entry was fetched at."""
        entry_id = entry["sys"]["id"]
        return self._request(
            "PUT",
            f"/entries/{entry_id}",
            body={"fields": entry.get("fields", {})},
            headers=_version_header(entry),
        )

    def get_entries(self, **params: Any) -> Dict[str, Any]:
        """Return one page of entries (``items``, ``total``, ``skip``, ``limit``)."""
        return self._request("GET", "/entries", params=params)

    def unpublish_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        entry_id = entry["sys"]["id"]
        return self._request("DELETE", f"/entries/{entry_id}/published", headers=_version_header(entry))

    def delete_entry(self, entry: Dict[str, Any]) -> None:
        entry_id = entry["sys"]["id"]
        self._request("DELETE", f"/entries/{entry_id}")

    @staticmethod
    def is_published(entry: Dict[str, Any]) -> bool:
        return bool((entry.get("sys") or {}).get("publishedVersion"))
