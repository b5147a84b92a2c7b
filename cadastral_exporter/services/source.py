"""Row source: successfully imported cadastral objects."""
import logging
from typing import Iterator

from pydantic import ValidationError
from sqlalchemy import Select, Text, cast, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cadastral_exporter.exceptions import SourceUnavailable
from cadastral_exporter.models.cadastral import CadastralObject
from cadastral_exporter.schemas.cadastral import CadastralRow

logger = logging.getLogger(__name__)


def build_source_query(load_status: str = "SUCCESS") -> Select:
    """Select exportable objects, payload and status read as text."""
    obj = CadastralObject
    return (
        select(
            obj.code,
            obj.quarter_code,
            cast(obj.load_status, Text).label("load_status"),
            obj.update_date,
            cast(obj.data, Text).label("data"),
            obj.area,
            obj.cost_value,
            obj.permitted_use_established_by_document,
            obj.right_type,
            obj.status,
            obj.land_record_type,
            obj.land_record_subtype,
            obj.land_record_category_type,
        )
        .where(obj.data.is_not(None))
        .where(cast(obj.load_status, Text) == load_status)
        .order_by(obj.code)
    )


def iter_source_rows(
    db: Session,
    load_status: str = "SUCCESS",
    batch_size: int = 1000,
) -> Iterator[CadastralRow]:
    """Stream exportable rows as CadastralRow objects.

    Rows that do not fit CadastralRow are logged and skipped.
    Raises SourceUnavailable if the query fails.
    """
    stmt = build_source_query(load_status).execution_options(yield_per=batch_size)
    try:
        result = db.execute(stmt)
        for record in result:
            try:
                yield CadastralRow.model_validate(record._asdict())
            except ValidationError as e:
                logger.warning("Failed to read row %s: %s", record.code, e)
    except SQLAlchemyError as e:
        raise SourceUnavailable(f"failed to query objects: {e}") from e
