"""Cadastral object model (source table populated by the importer)."""
from datetime import date
from sqlalchemy import Date, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cadastral_exporter.database import Base


class CadastralObject(Base):
    """Cadastral parcel row with the raw NSPD payload in ``data``."""

    __tablename__ = "object"

    code: Mapped[int] = mapped_column(Integer, primary_key=True)
    quarter_code: Mapped[int] = mapped_column(Integer, nullable=False)
    load_status: Mapped[str] = mapped_column(String(20), nullable=False)  # NEW, SUCCESS, ...
    update_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # FeatureCollection wrapped in {"data": {...}}, geometry in EPSG:3857
    data: Mapped[str | None] = mapped_column(Text, nullable=True)

    area: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    permitted_use_established_by_document: Mapped[str | None] = mapped_column(Text, nullable=True)
    right_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str | None] = mapped_column(Text, nullable=True)
    land_record_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    land_record_subtype: Mapped[str | None] = mapped_column(Text, nullable=True)
    land_record_category_type: Mapped[str | None] = mapped_column(Text, nullable=True)
