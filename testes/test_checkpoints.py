import json

import pytest

from contentful_migrator.utils.checkpoints import PHASE_FILES, CheckpointError, CheckpointStore


def test_load_missing_file_gives_empty_map(tmp_path):
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")
    assert checkpoint.data == {}
    assert len(checkpoint) == 0


def test_ensure_exists_creates_empty_files_for_every_phase(tmp_path):
    store = CheckpointStore(str(tmp_path / "cache"))
    store.ensure_exists()
    for filename in PHASE_FILES.values():
        assert json.loads((tmp_path / "cache" / filename).read_text(encoding="utf-8")) == {}


def test_ensure_exists_keeps_existing_progress(tmp_path):
    (tmp_path / "asset_cache.json").write_text('{"https://x/a.jpg": "asset-1"}', encoding="utf-8")
    store = CheckpointStore(str(tmp_path))
    store.ensure_exists()
    assert store.load("assets").data == {"https://x/a.jpg": "asset-1"}


def test_ensure_exists_failure_is_fatal(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(CheckpointError):
        CheckpointStore(str(blocker)).ensure_exists()


def test_record_flushes_whole_map_before_returning(tmp_path):
    store = CheckpointStore(str(tmp_path))
    checkpoint = store.load("blog_posts")
    checkpoint.record("first-post", "entry-1")
    checkpoint.record("second-post", "entry-2")

    on_disk = json.loads((tmp_path / "blog_posts_cache.json").read_text(encoding="utf-8"))
    assert on_disk == {"first-post": "entry-1", "second-post": "entry-2"}
    assert store.load("blog_posts").has("first-post")


def test_put_without_flush_stays_in_memory(tmp_path):
    store = CheckpointStore(str(tmp_path))
    checkpoint = store.load("assets")
    checkpoint.put("u", "a")
    assert "u" in checkpoint
    assert store.load("assets").data == {}


def test_unreadable_or_non_object_file_gives_empty_map(tmp_path):
    (tmp_path / "asset_cache.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "linked_entries_cache.json").write_text("[1, 2]", encoding="utf-8")
    store = CheckpointStore(str(tmp_path))
    assert store.load("assets").data == {}
    assert store.load("linked_entries").data == {}


def test_unknown_phase_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        CheckpointStore(str(tmp_path)).load("nope")
