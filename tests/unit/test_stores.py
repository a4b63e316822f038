"""Unit tests for the in-memory and filesystem blob stores.

Both adapters are run through the same contract checks.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from blob_orm.components.local_store import LocalBlobStore
from blob_orm.components.memory_store import InMemoryBlobStore, blob_sha
from blob_orm.core.errors import BlobStoreError, ConflictError, NotFoundError


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture(params=["memory", "local"])
def store(request, temp_dir):
    """Each blob store implementation."""
    if request.param == "memory":
        return InMemoryBlobStore()
    return LocalBlobStore(temp_dir)


def test_blob_sha_matches_git():
    """Test that version tokens are git blob hashes."""
    assert blob_sha("hello") == "b6fc4c620b67d95f953a5c1c1230aaab5db5a1b0"
    assert blob_sha("") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"


def test_write_and_read(store):
    """Test creating a blob and reading it back with its version."""
    version = store.write_file("t/a", "hello")
    blob = store.read_file("t/a")

    assert blob.content == "hello"
    assert blob.version == version == blob_sha("hello")


def test_read_missing(store):
    """Test that reading an absent blob raises NotFoundError."""
    with pytest.raises(NotFoundError) as exc_info:
        store.read_file("t/missing")

    assert exc_info.value.path == "t/missing"


def test_create_over_existing_conflicts(store):
    """Test that a create (no version) over an existing blob conflicts."""
    store.write_file("t/a", "one")

    with pytest.raises(ConflictError):
        store.write_file("t/a", "two")


def test_update_with_matching_version(store):
    """Test update-if-matches."""
    version = store.write_file("t/a", "one")
    new_version = store.write_file("t/a", "two", version)

    assert new_version != version
    assert store.read_file("t/a").content == "two"


def test_update_with_stale_version_conflicts(store):
    """Test that a stale token is rejected and content is unchanged."""
    stale = store.write_file("t/a", "one")
    store.write_file("t/a", "two", stale)

    with pytest.raises(ConflictError):
        store.write_file("t/a", "three", stale)

    assert store.read_file("t/a").content == "two"


def test_update_of_vanished_blob_conflicts(store):
    """Test that updating a deleted blob conflicts."""
    version = store.write_file("t/a", "one")
    store.write_file("t/b", "keep")
    store.delete_file("t/a", version)

    with pytest.raises(ConflictError):
        store.write_file("t/a", "two", version)


def test_delete(store):
    """Test delete with the current version."""
    version = store.write_file("t/a", "one")
    store.write_file("t/b", "keep")
    store.delete_file("t/a", version)

    with pytest.raises(NotFoundError):
        store.read_file("t/a")


def test_delete_missing_and_stale(store):
    """Test delete failure modes."""
    with pytest.raises(NotFoundError):
        store.delete_file("t/a", blob_sha("x"))

    store.write_file("t/a", "one")
    with pytest.raises(ConflictError):
        store.delete_file("t/a", blob_sha("other"))


def test_create_folder_is_idempotent(store):
    """Test that creating a folder twice keeps a single placeholder."""
    assert not store.folder_exists("t")

    store.create_folder("t")
    store.create_folder("t")

    assert store.folder_exists("t")
    assert [e["name"] for e in store.list_folder("t")] == [".keep"]


def test_create_folder_keeps_existing_content(store):
    """Test that create_folder on a populated folder writes nothing."""
    store.write_file("t/a", "one")
    store.create_folder("t")

    assert [e["name"] for e in store.list_folder("t")] == ["a"]


def test_list_folder(store):
    """Test immediate children of a folder, with sub-folders as dirs."""
    store.write_file("t/b", "2")
    store.write_file("t/a", "1")
    store.write_file("t/sub/c", "3")

    entries = store.list_folder("t")

    assert [(e["path"], e["name"], e["kind"]) for e in entries] == [
        ("t/a", "a", "file"),
        ("t/b", "b", "file"),
        ("t/sub", "sub", "dir"),
    ]


def test_list_missing_folder(store):
    with pytest.raises(NotFoundError):
        store.list_folder("nope")


def test_list_root(store):
    """Test top-level listing of files and folders."""
    store.write_file("README", "x")
    store.write_file("users/a", "1")
    store.write_file("orders/b", "2")

    entries = store.list_root()

    assert [(e["path"], e["kind"]) for e in entries] == [
        ("README", "file"),
        ("orders", "dir"),
        ("users", "dir"),
    ]


def test_folder_disappears_when_emptied(store):
    """Test that a folder stops existing once its last blob is deleted."""
    version = store.write_file("t/a", "one")
    store.delete_file("t/a", version)

    assert not store.folder_exists("t")
    assert store.list_root() == []


def test_paths_are_normalized(store):
    """Test that leading and trailing slashes are ignored."""
    store.write_file("/t/a", "one")

    assert store.read_file("t/a/").content == "one"


def test_local_store_rejects_escaping_paths(temp_dir):
    """Test that relative segments cannot leave the repository root."""
    store = LocalBlobStore(temp_dir)

    with pytest.raises(BlobStoreError):
        store.write_file("../outside", "x")
    with pytest.raises(BlobStoreError):
        store.read_file("t/./a")


def test_local_store_wraps_undecodable_blobs(temp_dir):
    """Test that a blob which is not UTF-8 surfaces as a backend failure."""
    store = LocalBlobStore(temp_dir)
    (Path(temp_dir) / "users").mkdir()
    (Path(temp_dir) / "users" / "x").write_bytes(b"\xff\xfe")

    with pytest.raises(BlobStoreError):
        store.read_file("users/x")
    with pytest.raises(BlobStoreError):
        store.write_file("users/x", "new", blob_sha("old"))
    with pytest.raises(BlobStoreError):
        store.delete_file("users/x", blob_sha("old"))


def test_local_store_persists_across_instances(temp_dir):
    """Test that blobs survive reopening the store."""
    LocalBlobStore(temp_dir).write_file("t/a", "durable")

    reopened = LocalBlobStore(temp_dir)

    assert reopened.read_file("t/a").content == "durable"


def test_memory_store_custom_placeholder():
    store = InMemoryBlobStore(placeholder_name=".gitkeep")
    store.create_folder("t")

    assert store.paths() == ["t/.gitkeep"]
