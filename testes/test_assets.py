import json

from conftest import make_post

from contentful_migrator.migrators.assets import (
    ImageDescriptor,
    collect_images,
    filename_key,
    find_asset_id,
    resolve_assets,
)
from contentful_migrator.migrators.contentful_api import ContentfulError, RetryPolicy
from contentful_migrator.utils.checkpoints import CheckpointStore


def run_resolve(session, urls, checkpoint, sleep_fn, **kwargs):
    policy = RetryPolicy(base_delay=1.0, sleep_fn=sleep_fn)
    return resolve_assets(
        session,
        [ImageDescriptor(url=url) for url in urls],
        checkpoint,
        lookup_policy=policy,
        write_policy=policy,
        sleep_fn=sleep_fn,
        **kwargs,
    )


def test_filename_key_ignores_directories_and_query():
    assert filename_key("https://cdn.example/a/x.jpg?w=300#top") == "x.jpg"
    assert filename_key("https://cdn.example/") == ""


def test_urls_sharing_a_filename_resolve_to_the_same_asset():
    asset_map = {"https://cdn.example/a/x.jpg": "asset-1"}
    assert find_asset_id(asset_map, "https://cdn.example/b/x.jpg") == "asset-1"
    assert find_asset_id(asset_map, "https://cdn.example/b/y.jpg") is None
    assert find_asset_id(asset_map, None) is None


def test_collect_images_deduplicates_and_includes_featured_image():
    first = make_post("1", "One", "https://cdn/a.jpg", "https://cdn/b.jpg")
    second = make_post(
        "2", "Two", "https://cdn/a.jpg",
        seo={"title": "Two", "featured_image": "https://cdn/cover.jpg"},
    )
    urls = [image.url for image in collect_images([first, second])]
    assert urls == ["https://cdn/a.jpg", "https://cdn/b.jpg", "https://cdn/cover.jpg"]


def test_existing_asset_is_bound_and_flushed_immediately(tmp_path, session, sleep_fn):
    asset_id = session.add_asset("x.jpg")
    store = CheckpointStore(str(tmp_path))
    checkpoint = store.load("assets")

    result = run_resolve(session, ["https://cdn/a/x.jpg"], checkpoint, sleep_fn)

    assert result.total_succeeded == 1
    on_disk = json.loads((tmp_path / "asset_cache.json").read_text(encoding="utf-8"))
    assert on_disk == {"https://cdn/a/x.jpg": asset_id}
    assert session.count("create_asset") == 0


def test_filename_collision_reuses_binding_without_lookup(tmp_path, session, sleep_fn):
    asset_id = session.add_asset("x.jpg")
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")

    run_resolve(session, [".../a/x.jpg", ".../b/x.jpg"], checkpoint, sleep_fn)

    assert checkpoint.data == {".../a/x.jpg": asset_id, ".../b/x.jpg": asset_id}
    assert session.count("lookup_assets_by_filename") == 1


def test_miss_without_upload_is_skipped_and_retried_next_run(tmp_path, session, sleep_fn):
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")
    result = run_resolve(session, ["https://cdn/missing.jpg"], checkpoint, sleep_fn)
    assert result.total_failed == 1
    assert "https://cdn/missing.jpg" not in checkpoint

    session.add_asset("missing.jpg")
    run_resolve(session, ["https://cdn/missing.jpg"], checkpoint, sleep_fn)
    assert "https://cdn/missing.jpg" in checkpoint


def test_miss_with_upload_creates_processes_and_publishes(tmp_path, session, sleep_fn):
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")
    run_resolve(session, ["https://cdn/new.png"], checkpoint, sleep_fn, create_missing=True)

    asset_id = checkpoint.get("https://cdn/new.png")
    assert asset_id in session.assets
    file_info = session.field_value(session.assets[asset_id], "file")
    assert file_info["fileName"] == "new.png"
    assert file_info["contentType"] == "image/png"
    assert session.count("process_and_publish_asset") == 1


def test_lookup_failure_does_not_stop_the_next_image(tmp_path, session, sleep_fn):
    good_id = session.add_asset("good.jpg")
    session.fail_on["lookup_assets_by_filename"] = [ContentfulError("500 ServerError")]
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")

    result = run_resolve(session, ["https://cdn/bad.jpg", "https://cdn/good.jpg"], checkpoint, sleep_fn)

    assert result.total_failed == 1
    assert checkpoint.data == {"https://cdn/good.jpg": good_id}


def test_second_run_makes_no_remote_calls(tmp_path, session, sleep_fn):
    session.add_asset("x.jpg")
    store = CheckpointStore(str(tmp_path))
    run_resolve(session, ["https://cdn/x.jpg"], store.load("assets"), sleep_fn)
    calls_after_first_run = len(session.calls)

    result = run_resolve(session, ["https://cdn/x.jpg"], store.load("assets"), sleep_fn)

    assert len(session.calls) == calls_after_first_run
    assert result.total_skipped == 1


def test_lookup_delay_follows_each_remote_lookup(tmp_path, session, sleeps, sleep_fn):
    session.add_asset("x.jpg")
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")
    run_resolve(session, ["https://cdn/x.jpg", "https://cdn/y/x.jpg"], checkpoint, sleep_fn, lookup_delay=0.1)
    assert sleeps == [0.1]


def test_miss_is_reported_as_asset_not_found(tmp_path, session, sleep_fn):
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")
    run_resolve(session, ["https://cdn/missing.jpg"], checkpoint, sleep_fn)

    lines = (tmp_path / "reports" / "migration" / "errors.jsonl").read_text(encoding="utf-8").splitlines()
    [entry] = [json.loads(line) for line in lines]
    assert entry["code"] == "ASSET_NOT_FOUND"
    assert entry["id"] == "https://cdn/missing.jpg"


def test_cache_write_failure_does_not_stop_the_next_image(tmp_path, session, sleep_fn):
    session.add_asset("one.jpg")
    session.add_asset("two.jpg")
    checkpoint = CheckpointStore(str(tmp_path)).load("assets")
    original_flush = checkpoint.flush
    failed = []

    def flush_failing_once():
        if not failed:
            failed.append(True)
            raise OSError("read-only file system")
        original_flush()

    checkpoint.flush = flush_failing_once

    result = run_resolve(session, ["https://cdn/one.jpg", "https://cdn/two.jpg"], checkpoint, sleep_fn)

    assert result.total_failed == 1
    assert result.total_succeeded == 1
    assert result.errors[0]["operation"] == "save_cache"
    assert session.count("lookup_assets_by_filename") == 2
    assert "https://cdn/two.jpg" in json.loads((tmp_path / "asset_cache.json").read_text(encoding="utf-8"))
