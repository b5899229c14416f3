import json

import pytest

from app.crs.model import ABSENT, CRS84_URN, EpsgCrs, NamedCrs
from geodoc.errors import InvalidFeature, MalformedCrs, ParseError
from geodoc.model import GeometryType
from geodoc.reader import read

MIXED = (
    '{"type":"FeatureCollection","crs":{"type":"name","properties":{"name":"urn:ogc:def:crs:OGC:1.3:CRS84"}},'
    '"features":[{"type":"Feature","geometry":{"type":"Point","coordinates":[1,2]},"properties":{"id":1}},'
    '{"type":"Feature","geometry":{"type":"Polygon","coordinates":[[[0,0],[1,0],[1,1],[0,0]]]},"properties":{"id":2}}]}'
).encode("utf-8")


def make_collection(features, crs=None, **extra):
    obj = {"type": "FeatureCollection"}
    obj.update(extra)
    if crs is not None:
        obj["crs"] = crs
    obj["features"] = features
    return json.dumps(obj).encode("utf-8")


def point(x, y, **props):
    return {"type": "Feature", "geometry": {"type": "Point", "coordinates": [x, y]}, "properties": props}


def test_read_mixed_named_crs():
    doc = read(MIXED)
    assert doc.crs == NamedCrs(CRS84_URN)
    assert len(doc.features) == 2
    assert [f.geometry_type for f in doc.features] == [GeometryType.POINT, GeometryType.POLYGON]
    assert doc.features[0].properties == {"id": 1}
    assert doc.features[1].geometry["coordinates"][0][2] == [1, 1]


def test_read_epsg_crs_and_str_input():
    text = make_collection([point(150.1, -33.9)], crs={"type": "EPSG", "properties": {"code": 4283}})
    doc = read(text.decode("utf-8"))
    assert doc.crs == EpsgCrs(4283)


def test_read_without_crs_is_absent():
    doc = read(make_collection([point(0, 0)]))
    assert doc.crs is ABSENT or doc.crs == ABSENT
    assert doc.crs.is_absent


def test_read_keeps_property_order_and_name():
    props = {"zeta": 1, "alpha": "a", "mid": None, "flag": True, "ratio": 0.5}
    doc = read(make_collection([point(0, 0, **props)], name="sites"))
    assert list(doc.features[0].properties) == ["zeta", "alpha", "mid", "flag", "ratio"]
    assert doc.name == "sites"


def test_read_null_properties_become_empty_mapping():
    feat = {"type": "Feature", "geometry": {"type": "Point", "coordinates": [0, 0]}, "properties": None}
    doc = read(make_collection([feat]))
    assert doc.features[0].properties == {}


def test_read_feature_id_preserved():
    feat = point(0, 0)
    feat["id"] = "a-1"
    doc = read(make_collection([feat]))
    assert doc.features[0].feature_id == "a-1"


def test_read_utf8_bom():
    doc = read(b"\xef\xbb\xbf" + make_collection([point(0, 0, label="Zürich")]))
    assert doc.features[0].properties["label"] == "Zürich"


def test_read_malformed_json_reports_position():
    with pytest.raises(ParseError) as ei:
        read(b'{"type": "FeatureCollection", "features": [}')
    assert ei.value.position is not None
    assert ei.value.position > 0


def test_read_rejects_non_feature_collection():
    with pytest.raises(ParseError):
        read(b'{"type": "Feature", "geometry": null, "properties": {}}')
    with pytest.raises(ParseError):
        read(b"[1, 2, 3]")
    with pytest.raises(ParseError):
        read(b'{"type": "FeatureCollection"}')


def test_read_rejects_nan():
    with pytest.raises(ParseError):
        read(b'{"type":"FeatureCollection","features":[{"type":"Feature","geometry":{"type":"Point","coordinates":[NaN,0]},"properties":{}}]}')


def test_read_rejects_invalid_utf8():
    with pytest.raises(ParseError) as ei:
        read(b'{"type":"FeatureCollection","features":[],"name":"\xff"}')
    assert ei.value.position is not None


def test_read_malformed_crs_is_fatal():
    with pytest.raises(MalformedCrs):
        read(make_collection([point(0, 0)], crs={"type": "bogus"}))


def test_read_null_crs_is_absent():
    doc = read(b'{"type":"FeatureCollection","crs":null,"features":[]}')
    assert doc.crs == ABSENT
    assert doc.features == ()


def test_read_collects_every_invalid_feature():
    features = [
        point(0, 0),
        {"type": "Feature", "geometry": {"type": "Circle", "coordinates": [0, 0]}, "properties": {}},
        point(1, 1, nested={"a": 1}),
        "not a feature",
        {"type": "Feature", "geometry": None, "properties": {}},
    ]
    with pytest.raises(InvalidFeature) as ei:
        read(make_collection(features))
    errors = ei.value.errors
    assert [e.index for e in errors] == [1, 2, 3, 4]
    assert "Circle" in errors[0].reasons[0]
    assert "nested" in errors[1].reasons[0]


def test_read_duplicate_property_keys_rejected():
    text = (
        b'{"type":"FeatureCollection","features":[{"type":"Feature",'
        b'"geometry":{"type":"Point","coordinates":[0,0]},"properties":{"a":1,"a":2}}]}'
    )
    with pytest.raises(InvalidFeature) as ei:
        read(text)
    assert "duplicate property key 'a'" in ei.value.errors[0].reasons


def test_read_rejects_overflowing_number():
    with pytest.raises(ParseError):
        read(b'{"type":"FeatureCollection","features":[{"type":"Feature","geometry":{"type":"Point","coordinates":[1e999,0]},"properties":{}}]}')


def test_read_deep_nesting_is_parse_error():
    text = b'{"type":"FeatureCollection","features":' + b"[" * 100000 + b"]" * 100000 + b"}"
    with pytest.raises(ParseError):
        read(text)


def test_read_huge_integer_is_parse_error():
    big = "9" * 5000
    text = '{"type":"FeatureCollection","features":[{"type":"Feature","geometry":{"type":"Point","coordinates":[0,0]},"properties":{"n":%s}}]}' % big
    with pytest.raises(ParseError):
        read(text)


def test_read_duplicate_crs_member_rejected():
    text = (
        b'{"type":"FeatureCollection",'
        b'"crs":{"type":"EPSG","properties":{"code":4283}},'
        b'"crs":{"type":"EPSG","properties":{"code":4326}},"features":[]}'
    )
    with pytest.raises(ParseError) as ei:
        read(text)
    assert "crs" in ei.value.reason


def test_read_malformed_crs_cannot_hide_behind_duplicate():
    text = (
        b'{"type":"FeatureCollection","crs":{"type":"bogus"},'
        b'"crs":{"type":"EPSG","properties":{"code":4326}},"features":[]}'
    )
    with pytest.raises(ParseError):
        read(text)


def test_read_duplicate_features_member_rejected():
    with pytest.raises(ParseError):
        read(b'{"type":"FeatureCollection","features":[],"features":[]}')
