import logging
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from classbook.core.sheets import SHEETS, SheetLayout, get_layout
from classbook.models.sheet_row import SheetRow

logger = logging.getLogger(__name__)

Row = Sequence[object]


class SheetStoreError(Exception):
    pass


_sheet_locks: dict[str, threading.Lock] = {name: threading.Lock() for name in SHEETS}


@contextmanager
def sheet_write_lock(*sheets: str) -> Iterator[None]:
    """Hold the in-process write locks of ``sheets`` for a read, allocate, write sequence.

    Locks are taken in name order so overlapping callers cannot deadlock.
    """
    with ExitStack() as stack:
        for name in sorted({get_layout(sheet).name for sheet in sheets}):
            stack.enter_context(_sheet_locks[name])
        yield


def _to_cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_row(layout: SheetLayout, row: Row) -> list[str]:
    cells = [_to_cell(value) for value in row[: layout.width]]
    if len(row) > layout.width:
        logger.warning("Dropping %d extra cell(s) for sheet %s.", len(row) - layout.width, layout.name)
    cells.extend([""] * (layout.width - len(cells)))
    return cells


class SheetBatch:
    """Writes staged on one session; committed together by ``SheetStore.batch``."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._next_position: dict[str, int] = {}
        self.appended = 0
        self.updated = 0
        self.deleted = 0

    def _tail_position(self, sheet: str) -> int:
        if sheet not in self._next_position:
            current = self.db.scalar(select(func.max(SheetRow.position)).where(SheetRow.sheet == sheet))
            self._next_position[sheet] = (current or 0) + 1
        return self._next_position[sheet]

    def _find(self, sheet: str, record_id: str) -> SheetRow | None:
        return self.db.scalar(
            select(SheetRow)
            .where(SheetRow.sheet == sheet, SheetRow.record_id == record_id)
            .order_by(SheetRow.position)
            .limit(1)
        )

    def append_rows(self, sheet: str, rows: Sequence[Row]) -> int:
        layout = get_layout(sheet)
        position = self._tail_position(layout.name)
        for row in rows:
            cells = normalize_row(layout, row)
            self.db.add(SheetRow(sheet=layout.name, position=position, record_id=cells[0] or None, cells=cells))
            position += 1
        self._next_position[layout.name] = position
        self.appended += len(rows)
        return len(rows)

    def update_row(self, sheet: str, record_id: str, values: Row | Mapping[str, object]) -> bool:
        """Overwrite the first row whose id matches.

        ``values`` is either a full row or a mapping of column name to new value;
        with a mapping, columns not named keep their current cells.
        """
        layout = get_layout(sheet)
        existing = self._find(layout.name, record_id)
        if existing is None:
            return False

        if isinstance(values, Mapping):
            cells = normalize_row(layout, existing.cells)
            for column, value in values.items():
                if column not in layout.columns:
                    raise ValueError(f"Unknown column {column!r} for sheet {layout.name}")
                cells[layout.columns.index(column)] = _to_cell(value)
        else:
            cells = normalize_row(layout, values)
        cells[0] = record_id

        existing.cells = cells
        self.db.add(existing)
        self.updated += 1
        return True

    def delete_row(self, sheet: str, record_id: str) -> bool:
        layout = get_layout(sheet)
        existing = self._find(layout.name, record_id)
        if existing is None:
            return False
        self.db.delete(existing)
        self.deleted += 1
        return True


class SheetStore:
    """Positional row tables, one per sheet, persisted through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load_list(self, sheet: str) -> list[list[str]]:
        layout = get_layout(sheet)
        try:
            with self._session_factory() as db:
                rows = db.scalars(
                    select(SheetRow).where(SheetRow.sheet == layout.name).order_by(SheetRow.position)
                ).all()
                return [list(row.cells) for row in rows]
        except SQLAlchemyError as exc:
            logger.error("Failed to load sheet %s: %s", layout.name, exc)
            raise SheetStoreError(f"Failed to load {layout.name}") from exc

    def count_rows(self) -> dict[str, int]:
        try:
            with self._session_factory() as db:
                rows = db.execute(select(SheetRow.sheet, func.count()).group_by(SheetRow.sheet)).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to count sheet rows: %s", exc)
            raise SheetStoreError("Failed to count sheet rows") from exc
        return {sheet: count for sheet, count in rows}

    @contextmanager
    def batch(self) -> Iterator[SheetBatch]:
        with self._session_factory() as db:
            writer = SheetBatch(db)
            try:
                yield writer
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("Sheet write batch failed and was rolled back: %s", exc)
                raise SheetStoreError("Failed to write to the sheet store") from exc
            except Exception:
                db.rollback()
                raise
        logger.info(
            "Sheet batch committed: appended=%d updated=%d deleted=%d",
            writer.appended,
            writer.updated,
            writer.deleted,
        )

    def append_rows(self, sheet: str, rows: Sequence[Row]) -> int:
        with self.batch() as batch:
            appended = batch.append_rows(sheet, rows)
        return appended

    def update_row(self, sheet: str, record_id: str, values: Row | Mapping[str, object]) -> bool:
        with self.batch() as batch:
            updated = batch.update_row(sheet, record_id, values)
        return updated

    def delete_row(self, sheet: str, record_id: str) -> bool:
        with self.batch() as batch:
            deleted = batch.delete_row(sheet, record_id)
        return deleted
