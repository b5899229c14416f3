from geodoc.reader import read
from qc.sanity import property_keys, summarize_document
from tests.test_reader import MIXED, make_collection, point


def test_summarize_mixed_document():
    s = summarize_document(read(MIXED))
    assert s["feature_count"] == 2
    assert s["geometry_types"] == {"Point": 1, "Polygon": 1}
    assert s["multi_geometry"] is True
    assert s["property_keys"] == ["id"]
    assert s["crs"]["kind"] == "name"
    assert s["crs"]["epsg"] == 4326


def test_property_keys_first_seen_order():
    doc = read(make_collection([point(0, 0, b=1, a=2), point(1, 1, c=3, a=4)]))
    assert property_keys(doc) == ["b", "a", "c"]


def test_summarize_empty_document():
    s = summarize_document(read(make_collection([])))
    assert s["feature_count"] == 0
    assert s["multi_geometry"] is False
    assert s["crs"]["is_default"] is True
