"""
CsvUpload model — one row per import attempt, with outcome and row count.
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from claimdesk.database import Base


class CsvUpload(Base):
    __tablename__ = "csv_uploads"

    id: Mapped[int] = mapped_column(primary_key=True)
    file_name: Mapped[str] = mapped_column(String(300))
    source_kind: Mapped[str] = mapped_column(String(20), default="csv")  # csv | records
    uploaded_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    upload_date: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, processing, completed, failed
    records_imported: Mapped[int] = mapped_column(Integer, default=0)
    column_mapping: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    errors: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
