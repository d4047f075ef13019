import threading

import pytest

from enginecore.refcount import ReferenceCountError, ReferenceCountedAsset


class TrackedAsset(ReferenceCountedAsset):
    def __init__(self):
        super().__init__()
        self.destroyed = 0

    def destroy(self):
        self.destroyed += 1


def test_new_asset_has_one_reference():
    asset = TrackedAsset()
    assert asset.reference_count == 1
    assert ReferenceCountedAsset.increment_reference_count(asset) == 2


def test_increment_then_decrement_returns_counts():
    asset = TrackedAsset()
    assert ReferenceCountedAsset.increment_reference_count(asset) == 2
    assert ReferenceCountedAsset.decrement_reference_count(asset) == 1
    assert asset.destroyed == 0


def test_last_release_destroys_once():
    asset = TrackedAsset()
    ReferenceCountedAsset.increment_reference_count(asset)
    ReferenceCountedAsset.decrement_reference_count(asset)
    assert ReferenceCountedAsset.decrement_reference_count(asset) == 0
    assert asset.destroyed == 1


def test_use_after_destroy_is_an_error():
    asset = TrackedAsset()
    assert ReferenceCountedAsset.decrement_reference_count(asset) == 0
    with pytest.raises(ReferenceCountError):
        ReferenceCountedAsset.increment_reference_count(asset)
    with pytest.raises(ReferenceCountError):
        ReferenceCountedAsset.decrement_reference_count(asset)
    assert asset.destroyed == 1


def test_concurrent_counting_is_exact():
    asset = TrackedAsset()
    per_thread = 1000

    def work():
        for _ in range(per_thread):
            ReferenceCountedAsset.increment_reference_count(asset)
        for _ in range(per_thread):
            ReferenceCountedAsset.decrement_reference_count(asset)

    threads = [threading.Thread(target=work) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert asset.reference_count == 1
    assert asset.destroyed == 0
    assert ReferenceCountedAsset.decrement_reference_count(asset) == 0
    assert asset.destroyed == 1