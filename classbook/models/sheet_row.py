from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from classbook.db.base import Base


class SheetRow(Base):
    """One positional row of a sheet. ``cells`` keeps the column order of the sheet layout.

    ``record_id`` mirrors the first cell; blank ids are stored as NULL so the
    per-sheet uniqueness only applies to rows that carry an id.
    """

    __tablename__ = "sheet_rows"
    __table_args__ = (
        UniqueConstraint("sheet", "record_id", name="uq_sheet_rows_sheet_record_id"),
        Index("ix_sheet_rows_sheet_position", "sheet", "position"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    sheet: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    record_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    cells: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
