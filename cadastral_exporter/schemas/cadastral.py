"""Pydantic schema for rows read from the source database."""
from datetime import date
from typing import Optional
from pydantic import BaseModel


class CadastralRow(BaseModel):
    """One source row as read from the ``object`` table."""
    code: int
    quarter_code: int
    load_status: str
    update_date: Optional[date] = None
    data: str  # raw JSON payload, see services.extractor
    area: Optional[int] = None
    cost_value: Optional[float] = None
    permitted_use_established_by_document: Optional[str] = None
    right_type: Optional[str] = None
    status: Optional[str] = None
    land_record_type: Optional[str] = None
    land_record_subtype: Optional[str] = None
    land_record_category_type: Optional[str] = None

    class Config:
        from_attributes = True
