from __future__ import annotations

import json

import pytest

from conftest import EPOCH, make_asset
from georeview.domain.models import FilterCriteria, GeoPoint
from georeview.errors import AssetNotFoundError, StoreError
from georeview.infrastructure.asset_store import (
    InMemoryAssetStore,
    JsonAssetStore,
    asset_from_dict,
    asset_to_dict,
)


@pytest.fixture
def store():
    return InMemoryAssetStore(
        [
            make_asset("late", 30, camera_model="X100"),
            make_asset("early", 0, tag_ids=frozenset({"t1", "t2"})),
            make_asset("mid", 10, album_ids=frozenset({"album"})),
            make_asset("located", 5, latitude=1.0, longitude=2.0),
        ]
    )


class TestSearch:
    def test_orders_by_creation_and_skips_located(self, store):
        page = store.search(FilterCriteria(), 1, 10)

        assert [a.id for a in page.items] == ["early", "mid", "late"]
        assert page.has_next_page is False

    def test_pagination(self, store):
        first = store.search(FilterCriteria(), 1, 2)
        second = store.search(FilterCriteria(), 2, 2)
        third = store.search(FilterCriteria(), 3, 2)

        assert [a.id for a in first.items] == ["early", "mid"]
        assert first.has_next_page is True
        assert [a.id for a in second.items] == ["late"]
        assert second.has_next_page is False
        assert third.items == []

    @pytest.mark.parametrize(
        "criteria, expected",
        [
            (FilterCriteria.create(tag_ids=["t1"]), ["early"]),
            (FilterCriteria.create(tag_ids=["t1", "t3"]), []),
            (FilterCriteria.create(is_not_in_album=True), ["early", "late"]),
            (FilterCriteria.create(camera_model="X100"), ["late"]),
        ],
    )
    def test_filters(self, store, criteria, expected):
        assert [a.id for a in store.search(criteria, 1, 10).items] == expected

    def test_invalid_pagination(self, store):
        with pytest.raises(StoreError):
            store.search(FilterCriteria(), 0, 10)


class TestUpdate:
    def test_update_sets_location_and_name(self):
        calls = []

        def geocoder(gps):
            calls.append(gps)
            return "Munich — Bavaria"

        store = InMemoryAssetStore([make_asset("A")], geocoder=geocoder)
        store.update("A", GeoPoint(48.1, 11.5))

        asset = store.get("A")
        assert (asset.latitude, asset.longitude) == (48.1, 11.5)
        assert asset.location_name == "Munich — Bavaria"
        assert calls == [GeoPoint(48.1, 11.5)]
        assert store.search(FilterCriteria(), 1, 10).items == []

    def test_unknown_asset(self, store):
        with pytest.raises(AssetNotFoundError):
            store.update("nope", GeoPoint(0.0, 0.0))


class TestJsonAssetStore:
    def test_load_update_and_persist(self, tmp_path):
        path = tmp_path / "assets.json"
        path.write_text(
            json.dumps(
                {
                    "assets": [
                        {
                            "id": "A",
                            "created_at": "2024-06-01T12:00:00+00:00",
                            "original_file_name": "IMG_A.jpg",
                            "tag_ids": ["t1"],
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )
        store = JsonAssetStore(path)
        store.load()
        assert store.get("A").created_at == EPOCH

        store.update("A", GeoPoint(1.0, 2.0))

        reloaded = JsonAssetStore(path)
        reloaded.load()
        assert reloaded.get("A").latitude == 1.0
        assert reloaded.get("A").tag_ids == frozenset({"t1"})

    def test_autosave_off(self, tmp_path):
        path = tmp_path / "assets.json"
        path.write_text(json.dumps({"assets": [asset_to_dict(make_asset("A"))]}), encoding="utf-8")
        store = JsonAssetStore(path, autosave=False)
        store.load()

        store.update("A", GeoPoint(1.0, 2.0))

        assert json.loads(path.read_text(encoding="utf-8"))["assets"][0]["latitude"] is None

    @pytest.mark.parametrize(
        "content",
        ["{", json.dumps([]), json.dumps({"assets": [{"created_at": "2024-06-01"}]})],
    )
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "assets.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(StoreError):
            JsonAssetStore(path).load()


def test_asset_dict_conversion_keeps_fields():
    asset = make_asset("A", 5, tag_ids=frozenset({"b", "a"}), camera_model="X100")
    row = asset_to_dict(asset)

    assert row["tag_ids"] == ["a", "b"]
    assert asset_from_dict(row) == asset
