from georeview.utils import geocoding


class _StubGeocoder:
    def __init__(self, result):
        self.result = result
        self.queries = []

    def query(self, coords):
        self.queries.append(coords)
        return self.result


def test_resolve_location_name_accepts_latitude_longitude_strings(monkeypatch):
    stub = _StubGeocoder([{"name": "London", "admin1": "England"}])
    monkeypatch.setattr(geocoding, "_geocoder", lambda: stub)

    result = geocoding.resolve_location_name({"latitude": "51.5074", "longitude": "-0.1278"})

    assert result == "London — England"
    assert stub.queries == [[(51.5074, -0.1278)]]


def test_resolve_location_name_prefers_admin2(monkeypatch):
    stub = _StubGeocoder([{"name": "Giesing", "admin1": "Bavaria", "admin2": "Upper Bavaria"}])
    monkeypatch.setattr(geocoding, "_geocoder", lambda: stub)

    assert geocoding.resolve_location_name({"lat": 48.1, "lng": 11.6}) == "Giesing — Upper Bavaria"


def test_missing_coordinate_skips_lookup(monkeypatch):
    stub = _StubGeocoder([{"name": "Nowhere"}])
    monkeypatch.setattr(geocoding, "_geocoder", lambda: stub)

    assert geocoding.resolve_location_name({"lat": 1.0}) is None
    assert geocoding.resolve_location_name({"lat": True, "lng": 1.0}) is None
    assert geocoding.resolve_location_name(None) is None
    assert stub.queries == []


def test_lookup_failure_returns_none(monkeypatch):
    class _Broken:
        def query(self, coords):
            raise OSError("no data file")

    monkeypatch.setattr(geocoding, "_geocoder", lambda: _Broken())

    assert geocoding.resolve_location_name({"lat": 1.0, "lon": 2.0}) is None


def test_empty_result_returns_none(monkeypatch):
    monkeypatch.setattr(geocoding, "_geocoder", lambda: _StubGeocoder([]))

    assert geocoding.resolve_location_name({"lat": 1.0, "lng": 2.0}) is None


def test_geo_point_is_accepted(monkeypatch):
    from georeview.domain.models import GeoPoint

    stub = _StubGeocoder({"name": b"Z\xc3\xbcrich", "admin1": "Zurich"})
    monkeypatch.setattr(geocoding, "_geocoder", lambda: stub)

    assert geocoding.resolve_location_name(GeoPoint(47.37, 8.54)) == "Zürich — Zurich"
    assert stub.queries == [[(47.37, 8.54)]]


def test_format_place():
    assert geocoding.format_place({"name": "", "admin1": "Bavaria"}) == "Bavaria"
    assert geocoding.format_place({}) is None
