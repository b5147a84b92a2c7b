"""Command line entry point.

    cadastral-export gpkg --output cadastral.gpkg
    cadastral-export geojson --output cadastral.geojson --group-by quarter_code
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from cadastral_exporter.config import Settings, get_settings
from cadastral_exporter.database import source_session
from cadastral_exporter.exceptions import StructuralError
from cadastral_exporter.services.exporter import ExportStats, export_geojson, export_geopackage
from cadastral_exporter.services.geopackage import GeoPackageWriter
from cadastral_exporter.services.source import iter_source_rows

logger = logging.getLogger("cadastral_exporter")


def _add_source_arguments(parser: argparse.ArgumentParser, settings: Settings) -> None:
    parser.add_argument("--pg-host", default=settings.POSTGRES_HOST, help="PostgreSQL host")
    parser.add_argument("--pg-port", type=int, default=settings.POSTGRES_PORT, help="PostgreSQL port")
    parser.add_argument("--pg-user", default=settings.POSTGRES_USER, help="PostgreSQL user")
    parser.add_argument("--pg-password", default=settings.POSTGRES_PASSWORD, help="PostgreSQL password")
    parser.add_argument("--pg-db", default=settings.POSTGRES_DB, help="PostgreSQL database name")
    parser.add_argument(
        "--database-url",
        default=settings.DATABASE_URL,
        help="Full SQLAlchemy URL of the source database (overrides the --pg-* options)",
    )
    parser.add_argument(
        "--load-status",
        default=settings.LOAD_STATUS,
        help="Only export objects with this load status. Default is '%(default)s'.",
    )


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadastral-export",
        description="Export cadastral objects to GeoPackage (EPSG:3857) or GeoJSON (EPSG:4326).",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gpkg = subparsers.add_parser("gpkg", help="Export to a GeoPackage file")
    _add_source_arguments(gpkg, settings)
    gpkg.add_argument("--output", default=settings.GPKG_OUTPUT, help="Output GeoPackage file path")
    gpkg.add_argument("--table", default=settings.GPKG_TABLE_NAME, help="Feature table name")

    geojson = subparsers.add_parser("geojson", help="Export to GeoJSON")
    _add_source_arguments(geojson, settings)
    geojson.add_argument("--output", default=settings.GEOJSON_OUTPUT, help="Output GeoJSON file path")
    geojson.add_argument(
        "--group-by",
        default=None,
        help=(
            "Group features by property (e.g. 'quarter_code', 'status'). "
            "Writes one FeatureCollection file per unique value."
        ),
    )
    return parser


def resolve_database_url(args: argparse.Namespace) -> str:
    if args.database_url:
        return args.database_url
    overrides = Settings(
        POSTGRES_HOST=args.pg_host,
        POSTGRES_PORT=args.pg_port,
        POSTGRES_USER=args.pg_user,
        POSTGRES_PASSWORD=args.pg_password,
        POSTGRES_DB=args.pg_db,
        DATABASE_URL=None,
    )
    return overrides.database_url


def run(args: argparse.Namespace, settings: Settings) -> ExportStats:
    """Run the export selected by ``args.command``."""
    with source_session(resolve_database_url(args)) as db:
        rows = iter_source_rows(db, load_status=args.load_status)
        if args.command == "gpkg":
            writer = GeoPackageWriter(
                args.output,
                table_name=args.table,
                identifier=settings.GPKG_IDENTIFIER,
                description=settings.GPKG_DESCRIPTION,
            )
            with writer:
                return export_geopackage(rows, writer, progress_interval=settings.PROGRESS_INTERVAL)
        return export_geojson(
            rows,
            args.output,
            group_by=args.group_by,
            progress_interval=settings.PROGRESS_INTERVAL,
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        stats = run(args, settings)
    except StructuralError as e:
        logger.error("Export failed: %s", e)
        return 1

    logger.info("Successfully exported %d objects to %s", stats.exported, ", ".join(stats.files))
    return 0


if __name__ == "__main__":
    sys.exit(main())
