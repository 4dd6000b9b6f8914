import pytest

from app.content.save import put_binary, save_file
from app.errors import ConflictError, ContentStoreError

PATH = "public/updates/data/hello.json"

def test_insert_writes_without_sha(content_store):
    sha = save_file(content_store, PATH, b"{}", "create")

    assert content_store.writes == [(PATH, None)]
    assert content_store.files[PATH] == (b"{}", sha)

def test_update_presents_current_sha(content_store):
    old = content_store.seed(PATH, b"v1")

    new = save_file(content_store, PATH, b"v2", "update")

    assert content_store.writes == [(PATH, old)]
    assert new != old
    assert content_store.files[PATH][0] == b"v2"

def test_single_conflict_retries_once_with_fresh_read(content_store):
    content_store.seed(PATH, b"v1")
    content_store.inject_conflicts(1)

    save_file(content_store, PATH, b"v2", "update")

    assert content_store.reads == [PATH, PATH]
    assert len(content_store.writes) == 2
    stale, fresh = content_store.writes[0][1], content_store.writes[1][1]
    assert stale != fresh
    assert content_store.files[PATH][0] == b"v2"

def test_second_conflict_gives_up_without_third_attempt(content_store):
    content_store.seed(PATH, b"v1")
    content_store.inject_conflicts(2)

    with pytest.raises(ConflictError):
        save_file(content_store, PATH, b"v2", "update")

    assert len(content_store.writes) == 2
    assert content_store.files[PATH][0] == b"v1"

def test_other_write_failure_is_not_retried(content_store):
    content_store.fail_writes_with = 500

    with pytest.raises(ContentStoreError) as exc:
        save_file(content_store, PATH, b"v2", "update")

    assert not isinstance(exc.value, ConflictError)
    assert exc.value.status_code == 500
    assert len(content_store.writes) == 1

def test_read_failure_aborts_before_writing(content_store):
    content_store.fail_reads_with = 502

    with pytest.raises(ContentStoreError):
        save_file(content_store, PATH, b"v2", "update")

    assert content_store.writes == []

def test_attempts_are_configurable(content_store):
    content_store.inject_conflicts(2)
    save_file(content_store, PATH, b"v1", "create", max_attempts=3)
    assert len(content_store.writes) == 3

def test_binary_put_does_not_retry(content_store):
    img = "public/images/updates/hello/a.png"
    old = content_store.seed(img, b"old")

    put_binary(content_store, img, b"new", "replace")
    assert content_store.writes == [(img, old)]

    content_store.inject_conflicts(1)
    with pytest.raises(ConflictError):
        put_binary(content_store, img, b"newer", "replace")
    assert len(content_store.writes) == 2
