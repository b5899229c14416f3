from app.crs.model import CRS84_URN, EpsgCrs, NamedCrs
from geodoc.model import GeometryType
from geodoc.reader import read
from geodoc.splitter import select_geometry_type, split_by_geometry_type
from tests.test_reader import MIXED, make_collection, point


def _line(i):
    return {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[0, 0], [i, i]]}, "properties": {"i": i}}


def _mixed_doc():
    features = [point(0, 0, i=0), _line(1), point(2, 2, i=2), _line(3), point(4, 4, i=4)]
    return read(make_collection(features, crs={"type": "EPSG", "properties": {"code": 4283}}))


def test_split_example_document():
    parts = split_by_geometry_type(read(MIXED))
    assert list(parts) == [GeometryType.POINT, GeometryType.POLYGON]
    assert len(parts[GeometryType.POINT].features) == 1
    assert len(parts[GeometryType.POLYGON].features) == 1
    for d in parts.values():
        assert d.crs == NamedCrs(CRS84_URN)


def test_split_is_complete_and_ordered():
    doc = _mixed_doc()
    parts = split_by_geometry_type(doc)
    assert sum(len(d.features) for d in parts.values()) == len(doc.features)
    assert [f.properties["i"] for f in parts[GeometryType.POINT].features] == [0, 2, 4]
    assert [f.properties["i"] for f in parts[GeometryType.LINE_STRING].features] == [1, 3]

    expected = []
    for t in doc.geometry_types():
        expected.extend(f for f in doc.features if f.geometry_type == t)
    concatenated = [f for d in parts.values() for f in d.features]
    assert concatenated == expected


def test_split_does_not_touch_source():
    doc = _mixed_doc()
    before = doc.features
    split_by_geometry_type(doc)
    assert doc.features is before
    assert len(doc.features) == 5


def test_select_absent_type_yields_empty_document():
    doc = _mixed_doc()
    polys = select_geometry_type(doc, GeometryType.POLYGON)
    assert polys.features == ()
    assert polys.crs == EpsgCrs(4283)


def test_split_with_requested_types():
    doc = _mixed_doc()
    parts = split_by_geometry_type(doc, types=[GeometryType.POLYGON, GeometryType.POINT])
    assert list(parts) == [GeometryType.POLYGON, GeometryType.POINT]
    assert parts[GeometryType.POLYGON].features == ()
    assert parts[GeometryType.POLYGON].crs == EpsgCrs(4283)
    assert len(parts[GeometryType.POINT].features) == 3


def test_split_empty_document():
    doc = read(make_collection([]))
    assert split_by_geometry_type(doc) == {}


def test_split_outputs_do_not_share_payloads():
    doc = _mixed_doc()
    parts = split_by_geometry_type(doc)
    out = parts[GeometryType.POINT].features[0]
    out.properties["i"] = 99
    out.geometry["coordinates"][0] = 99
    assert doc.features[0].properties["i"] == 0
    assert doc.features[0].geometry["coordinates"] == [0, 0]

    lines = select_geometry_type(doc, GeometryType.LINE_STRING)
    lines.features[0].properties["i"] = -1
    assert doc.features[1].properties["i"] == 1
