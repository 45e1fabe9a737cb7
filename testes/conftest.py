import copy
import os
import sys
from typing import Any, Dict, List, Optional

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from contentful_migrator.migrators.contentful_api import ContentfulSession, VersionMismatch
from contentful_migrator.models import SourcePost


class FakeSession:
    """In-memory stand-in for :class:`ContentfulSession`.

    ``fail_on`` maps an operation name to a list of exceptions raised, in
    order, by the next calls of that operation.  ``fail_when`` maps an
    operation name to a predicate on its arguments that raises the returned
    exception when it is not ``None``.
    """

    localize = ContentfulSession.localize
    localize_fields = ContentfulSession.localize_fields
    field_value = ContentfulSession.field_value
    is_published = staticmethod(ContentfulSession.is_published)

    def __init__(self, locale: str = "en-US") -> None:
        self.locale = locale
        self.assets: Dict[str, Dict[str, Any]] = {}
        self.entries: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.fail_on: Dict[str, List[Exception]] = {}
        self.fail_when: Dict[str, Any] = {}
        self._counter = 0

    def _enter(self, op: str, *args: Any) -> None:
        self.calls.append(op)
        queue = self.fail_on.get(op)
        if queue:
            raise queue.pop(0)
        check = self.fail_when.get(op)
        if check:
            exc = check(*args)
            if exc is not None:
                raise exc

    def _new_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def count(self, op: str) -> int:
        return self.calls.count(op)

    # Assets

    def add_asset(self, file_name: str) -> str:
        asset_id = self._new_id("asset")
        self.assets[asset_id] = {
            "sys": {"id": asset_id, "version": 2, "publishedVersion": 1},
            "fields": {"file": {self.locale: {"fileName": file_name, "url": f"//images/{file_name}"}}},
        }
        return asset_id

    def lookup_assets_by_filename(self, filename: str, *, limit: int = 1) -> List[Dict[str, Any]]:
        self._enter("lookup_assets_by_filename", filename)
        found = [
            copy.deepcopy(asset) for asset in self.assets.values()
            if self.field_value(asset, "file").get("fileName") == filename
        ]
        return found[:limit]

    def create_asset(self, *, title: str, file_name: str, upload_url: str, content_type: str = "image/jpeg"):
        self._enter("create_asset", file_name)
        asset_id = self._new_id("asset")
        self.assets[asset_id] = {
            "sys": {"id": asset_id, "version": 1},
            "fields": {
                "title": self.localize(title),
                "file": self.localize({"fileName": file_name, "upload": upload_url, "contentType": content_type}),
            },
        }
        return copy.deepcopy(self.assets[asset_id])

    def process_and_publish_asset(self, asset: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self._enter("process_and_publish_asset", asset)
        stored = self.assets[asset["sys"]["id"]]
        file_info = self.field_value(stored, "file")
        file_info["url"] = f"//images/{file_info['fileName']}"
        stored["sys"]["version"] += 2
        stored["sys"]["publishedVersion"] = stored["sys"]["version"] - 1
        return copy.deepcopy(stored)

    # Entries

    def create_entry(self, content_type: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._enter("create_entry", content_type, fields)
        entry_id = self._new_id(content_type)
        self.entries[entry_id] = {
            "sys": {"id": entry_id, "version": 1, "contentType": {"sys": {"id": content_type}}},
            "fields": copy.deepcopy(fields),
        }
        return copy.deepcopy(self.entries[entry_id])

    def _check_version(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        stored = self.entries[entry["sys"]["id"]]
        if entry["sys"]["version"] != stored["sys"]["version"]:
            raise VersionMismatch("409 VersionMismatch")
        return stored

    def publish_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        self._enter("publish_entry", entry)
        stored = self._check_version(entry)
        stored["sys"]["publishedVersion"] = stored["sys"]["version"]
        stored["sys"]["version"] += 1
        return copy.deepcopy(stored)

    def get_entry(self, entry_id: str) -> Dict[str, Any]:
        self._enter("get_entry", entry_id)
        return copy.deepcopy(self.entries[entry_id])

    def update_entry_fields(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        self._enter("update_entry_fields", entry)
        stored = self._check_version(entry)
        stored["fields"] = copy.deepcopy(entry["fields"])
        stored["sys"]["version"] += 1
        return copy.deepcopy(stored)

    def get_entries(self, content_type: Optional[str] = None, skip: int = 0, limit: int = 100) -> Dict[str, Any]:
        self._enter("get_entries", content_type)
        items = [
            entry for entry in self.entries.values()
            if content_type is None or entry["sys"]["contentType"]["sys"]["id"] == content_type
        ]
        return {"items": copy.deepcopy(items[skip:skip + limit]), "total": len(items), "skip": skip, "limit": limit}

    def unpublish_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        self._enter("unpublish_entry", entry)
        stored = self.entries[entry["sys"]["id"]]
        stored["sys"].pop("publishedVersion", None)
        stored["sys"]["version"] += 1
        return copy.deepcopy(stored)

    def delete_entry(self, entry: Dict[str, Any]) -> None:
        self._enter("delete_entry", entry)
        del self.entries[entry["sys"]["id"]]


def make_post(post_id: str, title: str, *image_urls: str, **overrides: Any) -> SourcePost:
    data: Dict[str, Any] = {
        "id": post_id,
        "title": title,
        "date": "2023-03-09",
        "excerpt": f"Excerpt of {title}",
        "template_name": "review",
        "photos": [{"image": {"url": url, "title": f"Photo {i}"}} for i, url in enumerate(image_urls)],
        "seo": {"title": title, "og_title": title, "description": "desc", "link": f"https://blog.example/{post_id}"},
        "product_info": {
            "product_type": "Flower",
            "brand": "Acme",
            "cost": "35.50",
            "weight": "3.5g",
            "listed_thc_percentage": "abc",
            "package_date": "3/9/23",
            "purchase_date": "",
        },
        "scores": {"strength": "8", "taste": "7", "quality": "x", "overall_score": 9, "overall_notes": "<p>Good</p>"},
        "review": {"short_review": "Short", "long_review": "Long"},
        "navigation": {"previous_post": None, "next_post": None},
    }
    data.update(overrides)
    return SourcePost.model_validate(data)


@pytest.fixture(autouse=True)
def _work_in_tmp(tmp_path, monkeypatch):
    # Reports and logs are written relative to the working directory.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def sleep_fn(sleeps):
    return sleeps.append
