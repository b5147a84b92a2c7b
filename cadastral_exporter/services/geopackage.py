"""GeoPackage destination written through SQLAlchemy's SQLite dialect."""
import logging
import os
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cadastral_exporter.exceptions import DestinationError, RowRejected
from cadastral_exporter.schemas.cadastral import CadastralRow
from cadastral_exporter.services.envelope import Envelope
from cadastral_exporter.services.wkb import WEB_MERCATOR_SRS_ID
from cadastral_exporter.utils.formatting import format_date

logger = logging.getLogger(__name__)

# "GPKG" as a big-endian int32
GPKG_APPLICATION_ID = 0x47504B47
GPKG_USER_VERSION = 10200

# Registered for every table regardless of the geometry types stored in it;
# downstream consumers rely on this value.
GEOMETRY_TYPE_NAME = "POLYGON"

WEB_MERCATOR_WKT = (
    'PROJCS["WGS 84 / Pseudo-Mercator",GEOGCS["WGS 84",DATUM["WGS_1984",'
    'SPHEROID["WGS 84",6378137,298.257223563,AUTHORITY["EPSG","7030"]],AUTHORITY["EPSG","6326"]],'
    'PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],'
    'AUTHORITY["EPSG","4326"]],PROJECTION["Mercator_1SP"],PARAMETER["central_meridian",0],'
    'PARAMETER["scale_factor",1],PARAMETER["false_easting",0],PARAMETER["false_northing",0],'
    'UNIT["metre",1,AUTHORITY["EPSG","9001"]],AXIS["X",EAST],AXIS["Y",NORTH],'
    'EXTENSION["PROJ4","+proj=merc +a=6378137 +b=6378137 +lat_ts=0.0 +lon_0=0.0 +x_0=0.0 +y_0=0 '
    '+k=1.0 +units=m +nadgrids=@null +wktext +no_defs"],AUTHORITY["EPSG","3857"]]'
)

WGS84_WKT = (
    'GEOGCS["WGS 84",DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563,'
    'AUTHORITY["EPSG","7030"]],AUTHORITY["EPSG","6326"]],PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG","4326"]]'
)

SPATIAL_REF_SYSTEMS = [
    {
        "srs_name": "WGS 84 / Pseudo-Mercator",
        "srs_id": 3857,
        "organization": "EPSG",
        "organization_coordsys_id": 3857,
        "definition": WEB_MERCATOR_WKT,
        "description": "Popular Visualisation CRS / Mercator",
    },
    {
        "srs_name": "WGS 84",
        "srs_id": 4326,
        "organization": "EPSG",
        "organization_coordsys_id": 4326,
        "definition": WGS84_WKT,
        "description": "WGS 84",
    },
]

ATTRIBUTE_COLUMNS = [
    "code",
    "quarter_code",
    "load_status",
    "update_date",
    "area",
    "cost_value",
    "permitted_use_established_by_document",
    "right_type",
    "status",
    "land_record_type",
    "land_record_subtype",
    "land_record_category_type",
]


class GeoPackageWriter:
    """Creates a GeoPackage with one feature table and fills it row by row.

    Usage:
        with GeoPackageWriter("cadastral.gpkg") as writer:
            writer.insert(row, blob)
            writer.update_extent(extent)
    """

    def __init__(
        self,
        path: Union[str, Path],
        table_name: str = "cadastral_objects",
        identifier: str = "Cadastral Objects",
        description: Optional[str] = None,
        srs_id: int = WEB_MERCATOR_SRS_ID,
    ):
        if not table_name.isidentifier():
            raise ValueError(f"Invalid table name: {table_name!r}")
        self.path = Path(path)
        self.table_name = table_name
        self.identifier = identifier
        self.description = description
        self.srs_id = srs_id
        self.engine: Optional[Engine] = None
        self.conn: Optional[Connection] = None

    def __enter__(self) -> "GeoPackageWriter":
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(commit=exc_type is None)

    def create(self) -> None:
        """Replace any existing file and initialise the GeoPackage schema."""
        try:
            if self.path.exists():
                os.remove(self.path)
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationError(f"failed to prepare {self.path}: {e}") from e

        try:
            self.engine = create_engine(f"sqlite:///{self.path}")
            self.conn = self.engine.connect()
            self._init_schema()
            self.conn.commit()
        except SQLAlchemyError as e:
            self.close(commit=False)
            raise DestinationError(f"failed to initialize GeoPackage {self.path}: {e}") from e
        logger.info("Created GeoPackage %s (table %s)", self.path, self.table_name)

    def _init_schema(self) -> None:
        conn = self.conn
        conn.execute(text(f"PRAGMA application_id = {GPKG_APPLICATION_ID}"))
        conn.execute(text(f"PRAGMA user_version = {GPKG_USER_VERSION}"))
        conn.execute(text("PRAGMA foreign_keys = ON"))

        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS gpkg_spatial_ref_sys (
                srs_name TEXT NOT NULL,
                srs_id INTEGER NOT NULL PRIMARY KEY,
                organization TEXT NOT NULL,
                organization_coordsys_id INTEGER NOT NULL,
                definition TEXT NOT NULL,
                description TEXT
            )
        """))
        conn.execute(
            text("""
                INSERT OR REPLACE INTO gpkg_spatial_ref_sys
                (srs_name, srs_id, organization, organization_coordsys_id, definition, description)
                VALUES (:srs_name, :srs_id, :organization, :organization_coordsys_id, :definition, :description)
            """),
            SPATIAL_REF_SYSTEMS,
        )

        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS gpkg_contents (
                table_name TEXT NOT NULL PRIMARY KEY,
                data_type TEXT NOT NULL,
                identifier TEXT UNIQUE,
                description TEXT,
                last_change DATETIME NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now')),
                min_x DOUBLE,
                min_y DOUBLE,
                max_x DOUBLE,
                max_y DOUBLE,
                srs_id INTEGER,
                CONSTRAINT fk_gc_srs FOREIGN KEY (srs_id) REFERENCES gpkg_spatial_ref_sys(srs_id)
            )
        """))
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS gpkg_geometry_columns (
                table_name TEXT NOT NULL,
                column_name TEXT NOT NULL,
                geometry_type_name TEXT NOT NULL,
                srs_id INTEGER NOT NULL,
                z TINYINT NOT NULL,
                m TINYINT NOT NULL,
                CONSTRAINT pk_geom_cols PRIMARY KEY (table_name, column_name),
                CONSTRAINT fk_gc_tn FOREIGN KEY (table_name) REFERENCES gpkg_contents(table_name),
                CONSTRAINT fk_gc_srs FOREIGN KEY (srs_id) REFERENCES gpkg_spatial_ref_sys(srs_id)
            )
        """))

        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS {self.table_name} (
                code INTEGER NOT NULL PRIMARY KEY,
                quarter_code INTEGER NOT NULL,
                load_status TEXT,
                update_date DATE,
                area INTEGER,
                cost_value REAL,
                permitted_use_established_by_document TEXT,
                right_type TEXT,
                status TEXT,
                land_record_type TEXT,
                land_record_subtype TEXT,
                land_record_category_type TEXT,
                geometry BLOB NOT NULL
            )
        """))

        conn.execute(
            text("""
                INSERT OR REPLACE INTO gpkg_contents
                (table_name, data_type, identifier, description, srs_id)
                VALUES (:table_name, 'features', :identifier, :description, :srs_id)
            """),
            {
                "table_name": self.table_name,
                "identifier": self.identifier,
                "description": self.description,
                "srs_id": self.srs_id,
            },
        )
        conn.execute(
            text("""
                INSERT OR REPLACE INTO gpkg_geometry_columns
                (table_name, column_name, geometry_type_name, srs_id, z, m)
                VALUES (:table_name, 'geometry', :geometry_type_name, :srs_id, 0, 0)
            """),
            {
                "table_name": self.table_name,
                "geometry_type_name": GEOMETRY_TYPE_NAME,
                "srs_id": self.srs_id,
            },
        )

    def _require_connection(self) -> Connection:
        if self.conn is None:
            raise DestinationError("GeoPackage is not open")
        return self.conn

    def insert(self, row: CadastralRow, blob: bytes) -> None:
        """Insert one attribute row with its GeoPackage geometry blob.

        Raises RowRejected when the row violates a table constraint
        (e.g. duplicate code); other database failures are fatal.
        """
        conn = self._require_connection()
        params = {column: getattr(row, column) for column in ATTRIBUTE_COLUMNS}
        params["update_date"] = format_date(row.update_date)
        params["geometry"] = blob

        columns = ", ".join(ATTRIBUTE_COLUMNS + ["geometry"])
        placeholders = ", ".join(f":{column}" for column in ATTRIBUTE_COLUMNS + ["geometry"])
        try:
            conn.execute(
                text(f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders})"),
                params,
            )
        except IntegrityError as e:
            raise RowRejected(f"failed to insert object {row.code}: {e.orig}") from e
        except SQLAlchemyError as e:
            raise DestinationError(f"failed to write object {row.code}: {e}") from e

    def update_extent(self, envelope: Envelope) -> None:
        """Store the overall bounds of the table in gpkg_contents."""
        conn = self._require_connection()
        try:
            conn.execute(
                text("""
                    UPDATE gpkg_contents
                    SET min_x = :min_x, min_y = :min_y, max_x = :max_x, max_y = :max_y
                    WHERE table_name = :table_name
                """),
                {
                    "min_x": envelope.min_x,
                    "min_y": envelope.min_y,
                    "max_x": envelope.max_x,
                    "max_y": envelope.max_y,
                    "table_name": self.table_name,
                },
            )
            conn.commit()
        except SQLAlchemyError as e:
            raise DestinationError(f"failed to update envelope: {e}") from e

    def close(self, commit: bool = True) -> None:
        """Commit pending rows and release the connection."""
        try:
            if self.conn is not None:
                if commit:
                    self.conn.commit()
                else:
                    self.conn.rollback()
                self.conn.close()
        except SQLAlchemyError as e:
            raise DestinationError(f"failed to finalize GeoPackage {self.path}: {e}") from e
        finally:
            self.conn = None
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None
