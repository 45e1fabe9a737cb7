import json

import pytest

from contentful_migrator.extractors import extract_posts


def write_export(tmp_path, data):
    path = tmp_path / "exported_posts.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_entries_are_validated_into_source_posts(tmp_path):
    path = write_export(tmp_path, {"entries": [
        {
            "id": 101,
            "title": "Blue Dream",
            "photos": [{"image": {"url": "https://cdn/a.jpg"}}, {"image": None}],
            "product_info": {"cost": 35, "package_date": "3/9/23"},
            "custom_field": "kept",
        },
    ]})

    [post] = extract_posts(path)

    assert post.id == "101"
    assert post.image_urls() == ["https://cdn/a.jpg"]
    assert post.product_info.cost == 35
    assert post.seo.title is None
    assert post.custom_field == "kept"


def test_missing_sections_default_to_empty(tmp_path):
    path = write_export(tmp_path, [{"id": "1", "title": None, "seo": None, "photos": None}])
    [post] = extract_posts(path)
    assert post.title == ""
    assert post.photos == []
    assert post.seo.featured_image is None


def test_invalid_entries_are_skipped(tmp_path):
    path = write_export(tmp_path, {"entries": [{"title": "no id"}, {"id": "2", "title": "ok"}]})
    assert [post.id for post in extract_posts(path)] == ["2"]


def test_unreadable_export_is_an_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_posts(str(tmp_path / "missing.json"))

    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    with pytest.raises(ValueError):
        extract_posts(str(bad))

    with pytest.raises(ValueError):
        extract_posts(write_export(tmp_path, {"posts": []}))


def test_numeric_title_is_kept_as_text(tmp_path):
    path = write_export(tmp_path, [{"id": 7, "title": 420}, {"id": 8, "title": 3.5}])
    posts = extract_posts(path)
    assert [post.title for post in posts] == ["420", "3.5"]
