import pytest

from enginecore.handle import Handle
from enginecore.manager import (
    MAX_MANAGER_REFERENCE_COUNT,
    AssetError,
    AssetManager,
    InvalidHandleError,
)
from enginecore.refcount import ReferenceCountedAsset


class FakeAsset(ReferenceCountedAsset):
    def __init__(self, path, *args, **kwargs):
        super().__init__()
        self.path = path
        self.args = args
        self.kwargs = kwargs
        self.destroyed = False

    def destroy(self):
        self.destroyed = True


class RecordingLoader:
    def __init__(self):
        self.calls = []
        self.assets = []

    def __call__(self, path, *args, **kwargs):
        self.calls.append(path)
        asset = FakeAsset(path, *args, **kwargs)
        self.assets.append(asset)
        return asset


@pytest.fixture
def loader():
    return RecordingLoader()


@pytest.fixture
def manager(loader):
    return AssetManager(loader)


def test_load_and_get(manager, loader):
    handle = manager.load("mesh.bin", 3, scale=2)
    assert handle.is_valid()
    asset = manager.get(handle)
    assert asset.path == "mesh.bin"
    assert asset.args == (3,)
    assert asset.kwargs == {"scale": 2}
    assert handle == Handle.from_parts(0, 0)


def test_same_path_loads_once(manager, loader):
    first = manager.load("a")
    second = manager.load("a")
    assert first == second
    assert loader.calls == ["a"]


def test_distinct_paths_get_distinct_handles(manager):
    first = manager.load("a")
    second = manager.load("b")
    assert first != second
    assert manager.get(first).path == "a"
    assert manager.get(second).path == "b"


def test_release_returns_invalid_handle(manager):
    handle = manager.load("a")
    released = manager.release(handle)
    assert not released
    assert released == Handle.invalid()


def test_asset_freed_only_after_last_release(manager, loader):
    handle = manager.load("a")
    manager.load("a")
    asset = loader.assets[0]
    manager.release(handle)
    assert not asset.destroyed
    assert manager.get(handle) is asset
    manager.release(handle)
    assert asset.destroyed
    with pytest.raises(InvalidHandleError):
        manager.get(handle)


def test_record_is_reused_with_new_id(manager):
    old = manager.load("a")
    manager.release(old)
    new = manager.load("b")
    assert new.index == old.index
    assert new.id == Handle.next_id(old.id)
    with pytest.raises(InvalidHandleError):
        manager.get(old)
    assert manager.get(new).path == "b"


def test_stale_path_entry_reloads(manager, loader):
    handle = manager.load("a")
    manager.release(handle)
    again = manager.load("a")
    assert loader.calls == ["a", "a"]
    assert manager.get(again) is loader.assets[1]


def test_release_stale_handle_raises(manager):
    handle = manager.load("a")
    manager.release(handle)
    with pytest.raises(InvalidHandleError):
        manager.release(handle)


def test_release_out_of_range_handle_raises(manager):
    manager.load("a")
    with pytest.raises(InvalidHandleError):
        manager.release(Handle.from_parts(5, 0))


def test_get_invalid_handle_raises(manager):
    with pytest.raises(InvalidHandleError):
        manager.get(Handle.invalid())


def test_get_out_of_range_handle_raises(manager):
    with pytest.raises(InvalidHandleError):
        manager.get(Handle.from_parts(0, 0))


def test_loader_failure_propagates(manager):
    def failing(path):
        raise OSError("missing")

    broken = AssetManager(failing)
    with pytest.raises(OSError):
        broken.load("a")
    broken.clean_up()
    with pytest.raises(InvalidHandleError):
        broken.get(Handle.from_parts(0, 0))


def test_reference_count_limit(manager, loader):
    handle = manager.load("a")
    for _ in range(MAX_MANAGER_REFERENCE_COUNT - 1):
        assert manager.load("a") == handle
    with pytest.raises(AssetError):
        manager.load("a")
    assert loader.calls == ["a"]


def test_record_limit_releases_new_asset(loader):
    class SmallManager(AssetManager):
        MAX_RECORDS = 2

    small = SmallManager(loader)
    assert AssetManager.load(small, "a") == Handle.from_parts(0, 0)
    assert AssetManager.load(small, "b") == Handle.from_parts(1, 0)
    with pytest.raises(AssetError):
        AssetManager.load(small, "c")
    assert loader.assets[2].destroyed
    assert loader.assets[2].reference_count == 0


def test_clean_up_with_outstanding_assets_raises(manager):
    handle = manager.load("a")
    with pytest.raises(AssetError):
        manager.clean_up()
    with pytest.raises(InvalidHandleError):
        manager.get(handle)


def test_clean_up_after_release_starts_fresh(manager):
    handle = manager.load("a")
    manager.release(handle)
    manager.clean_up()
    fresh = manager.load("b")
    assert fresh == Handle.from_parts(0, 0)


def test_context_manager_cleans_up(loader):
    with pytest.raises(AssetError):
        with AssetManager(loader) as scoped:
            scoped.load("a")
    assert len(loader.assets) == 1
    assert not loader.assets[0].destroyed