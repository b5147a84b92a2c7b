import json
from pathlib import Path

from cadastral_exporter.services.geojson_export import (
    build_properties,
    group_features,
    group_value,
    grouped_filename,
    grouped_output_dir,
    write_feature_collection,
    write_grouped,
)


def test_build_properties_from_row(make_row):
    props = build_properties(make_row(code=7, right_type=None))
    assert props["code"] == 7
    assert props["quarter_code"] == 16500
    assert props["load_status"] == "SUCCESS"
    assert props["area"] == 1200
    assert props["cost_value"] == 350000.5
    assert props["right_type"] is None
    assert props["update_date"] == "2024-03-07"


def test_update_date_omitted_when_absent(make_row):
    assert "update_date" not in build_properties(make_row(update_date=None))


def test_existing_properties_are_merged_without_overriding(make_row):
    props = build_properties(make_row(code=7), {"code": 999, "cad_num": "16:50:011105:91", "status": "old"})
    assert props["code"] == 7
    assert props["status"] == "Учтенный"
    assert props["cad_num"] == "16:50:011105:91"


def test_group_value():
    props = {"quarter_code": 16500, "cost_value": 10.4, "status": None, "right_type": ""}
    assert group_value(props, "quarter_code") == "16500"
    assert group_value(props, "cost_value") == "10"
    assert group_value(props, "status") == "null"
    assert group_value(props, "right_type") == "unknown"
    assert group_value(props, "missing") == "unknown"


def test_group_features():
    features = [
        {"properties": {"status": "a"}},
        {"properties": {"status": "b"}},
        {"properties": {"status": "a"}},
        {"properties": None},
    ]
    groups = group_features(features, "status")
    assert {key: len(value) for key, value in groups.items()} == {"a": 2, "b": 1, "unknown": 1}


def test_grouped_output_dir():
    assert grouped_output_dir("out/cadastral.geojson") == Path("out")
    assert grouped_output_dir("cadastral.geojson") == Path("cadastral")
    assert grouped_output_dir("exports") == Path("exports")


def test_grouped_filename():
    assert grouped_filename("out/kazan.geojson", "status", "Ранее учтенный") == "kazan_status_Ранее_учтенный.geojson"
    assert grouped_filename("exports", "quarter_code", "16500") == "cadastral_quarter_code_16500.geojson"


def test_write_feature_collection(tmp_path):
    path = write_feature_collection(tmp_path / "out.geojson", [{"type": "Feature", "properties": {"name": "Казань"}}])
    text = path.read_text(encoding="utf-8")
    assert "Казань" in text
    assert json.loads(text) == {
        "type": "FeatureCollection",
        "features": [{"type": "Feature", "properties": {"name": "Казань"}}],
    }


def test_write_grouped(tmp_path):
    output = tmp_path / "result" / "cadastral.geojson"
    groups = {"a/b": [{"type": "Feature"}], "c": [{"type": "Feature"}, {"type": "Feature"}]}
    written = write_grouped(output, "status", groups)
    assert sorted(p.name for p in written) == ["cadastral_status_a_b.geojson", "cadastral_status_c.geojson"]
    data = json.loads((tmp_path / "result" / "cadastral_status_c.geojson").read_text(encoding="utf-8"))
    assert len(data["features"]) == 2
