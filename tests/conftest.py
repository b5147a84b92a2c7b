import json
from datetime import date

import pytest

from cadastral_exporter.schemas.cadastral import CadastralRow


SQUARE = [[[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]]]


def make_payload(geometry, properties=None):
    feature = {"type": "Feature", "geometry": geometry}
    if properties is not None:
        feature["properties"] = properties
    return json.dumps({"data": {"type": "FeatureCollection", "features": [feature]}})


@pytest.fixture
def square_polygon():
    return {"type": "Polygon", "coordinates": SQUARE}


@pytest.fixture
def make_row():
    def _make_row(code=1, geometry=None, data=None, properties=None, **columns):
        if data is None:
            geometry = geometry or {"type": "Polygon", "coordinates": SQUARE}
            data = make_payload(geometry, properties)
        values = {
            "code": code,
            "quarter_code": 16500,
            "load_status": "SUCCESS",
            "update_date": date(2024, 3, 7),
            "data": data,
            "area": 1200,
            "cost_value": 350000.5,
            "status": "Учтенный",
        }
        values.update(columns)
        return CadastralRow(**values)

    return _make_row
