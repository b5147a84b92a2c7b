import pytest
from sqlalchemy import create_engine, text

from cadastral_exporter.exceptions import DestinationError, RowRejected
from cadastral_exporter.services.envelope import Envelope
from cadastral_exporter.services.geopackage import GPKG_APPLICATION_ID, GeoPackageWriter
from cadastral_exporter.services.wkb import encode_gpkg


def _query(path, sql):
    engine = create_engine(f"sqlite:///{path}")
    try:
        with engine.connect() as conn:
            return conn.execute(text(sql)).fetchall()
    finally:
        engine.dispose()


def test_schema_is_initialised(tmp_path):
    path = tmp_path / "out.gpkg"
    with GeoPackageWriter(path, description="test export"):
        pass

    srs = _query(path, "SELECT srs_id, organization FROM gpkg_spatial_ref_sys ORDER BY srs_id")
    assert srs == [(3857, "EPSG"), (4326, "EPSG")]

    contents = _query(path, "SELECT table_name, data_type, identifier, description, srs_id FROM gpkg_contents")
    assert contents == [("cadastral_objects", "features", "Cadastral Objects", "test export", 3857)]

    columns = _query(path, "SELECT table_name, column_name, geometry_type_name, srs_id, z, m FROM gpkg_geometry_columns")
    assert columns == [("cadastral_objects", "geometry", "POLYGON", 3857, 0, 0)]

    assert _query(path, "PRAGMA application_id") == [(GPKG_APPLICATION_ID,)]
    assert _query(path, "PRAGMA user_version") == [(10200,)]


def test_wkt_definitions_are_complete(tmp_path):
    path = tmp_path / "out.gpkg"
    with GeoPackageWriter(path):
        pass
    definitions = dict(_query(path, "SELECT srs_id, definition FROM gpkg_spatial_ref_sys"))
    assert definitions[3857].startswith('PROJCS["WGS 84 / Pseudo-Mercator"')
    assert definitions[3857].endswith('AUTHORITY["EPSG","3857"]]')
    assert definitions[4326].startswith('GEOGCS["WGS 84"')


def test_geometry_type_name_is_polygon_for_any_geometry(tmp_path, make_row):
    path = tmp_path / "out.gpkg"
    point = {"type": "Point", "coordinates": [1, 2]}
    with GeoPackageWriter(path) as writer:
        writer.insert(make_row(geometry=point), encode_gpkg(point))
    assert _query(path, "SELECT geometry_type_name FROM gpkg_geometry_columns") == [("POLYGON",)]


def test_insert_and_extent(tmp_path, make_row, square_polygon):
    path = tmp_path / "out.gpkg"
    blob = encode_gpkg(square_polygon)
    with GeoPackageWriter(path, table_name="parcels") as writer:
        writer.insert(make_row(code=42, area=None), blob)
        writer.update_extent(Envelope(min_x=0, max_x=10, min_y=0, max_y=10))

    rows = _query(path, "SELECT code, quarter_code, load_status, update_date, area, cost_value, status, geometry FROM parcels")
    assert rows == [(42, 16500, "SUCCESS", "2024-03-07", None, 350000.5, "Учтенный", blob)]

    extent = _query(path, "SELECT min_x, min_y, max_x, max_y FROM gpkg_contents WHERE table_name = 'parcels'")
    assert extent == [(0.0, 0.0, 10.0, 10.0)]


def test_extent_is_null_until_updated(tmp_path):
    path = tmp_path / "out.gpkg"
    with GeoPackageWriter(path):
        pass
    assert _query(path, "SELECT min_x, min_y, max_x, max_y FROM gpkg_contents") == [(None, None, None, None)]


def test_duplicate_code_is_rejected_and_writer_stays_usable(tmp_path, make_row, square_polygon):
    path = tmp_path / "out.gpkg"
    blob = encode_gpkg(square_polygon)
    with GeoPackageWriter(path) as writer:
        writer.insert(make_row(code=1), blob)
        with pytest.raises(RowRejected):
            writer.insert(make_row(code=1), blob)
        writer.insert(make_row(code=2), blob)
    assert _query(path, "SELECT code FROM cadastral_objects ORDER BY code") == [(1,), (2,)]


def test_existing_file_is_replaced(tmp_path):
    path = tmp_path / "out.gpkg"
    path.write_bytes(b"not a database")
    with GeoPackageWriter(path):
        pass
    assert _query(path, "SELECT count(*) FROM cadastral_objects") == [(0,)]


def test_invalid_table_name():
    with pytest.raises(ValueError):
        GeoPackageWriter("out.gpkg", table_name="objects; DROP TABLE x")


def test_unwritable_destination(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(DestinationError):
        GeoPackageWriter(blocker / "out.gpkg").create()


def test_insert_requires_open_writer(make_row):
    with pytest.raises(DestinationError):
        GeoPackageWriter("unused.gpkg").insert(make_row(), b"")
