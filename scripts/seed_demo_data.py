from __future__ import annotations

from pathlib import Path
import sys

from sqlalchemy import delete

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from classbook.db.session import get_session_factory
from classbook.models.sheet_row import SheetRow
from classbook.services.sheet_store import SheetStore


DEMO_PREFIX = "DEMO-"

DEMO_SHEETS: dict[str, list[list[object]]] = {
    "student": [
        [f"{DEMO_PREFIX}S1", "Minji Kim", "Hanbit High", "G10", "010-1111-2222", "2026-03-02", "active"],
        [f"{DEMO_PREFIX}S2", "Jiho Lee", "Hanbit High", "G10", "010-3333-4444", "2026-03-02", "active"],
        [f"{DEMO_PREFIX}S3", "Seoyeon Park", "Daehan Middle", "G9", "010-5555-6666", "2025-09-01", "inactive"],
    ],
    "class": [
        [f"{DEMO_PREFIX}C1", "Hanbit High", "2026", "1", "G10", "Mon/Wed 18:00", "active"],
    ],
    "lecture": [
        [f"{DEMO_PREFIX}L1", f"{DEMO_PREFIX}C1", "2026-03-04", "18:00", "Linear equations"],
        [f"{DEMO_PREFIX}L2", f"{DEMO_PREFIX}C1", "2026-03-09", "18:00", "Quadratic functions"],
    ],
    "enrollment": [
        [f"{DEMO_PREFIX}EN1", f"{DEMO_PREFIX}S1", f"{DEMO_PREFIX}C1", "2026-03-02", "active"],
        [f"{DEMO_PREFIX}EN2", f"{DEMO_PREFIX}S2", f"{DEMO_PREFIX}C1", "2026-03-02", "active"],
    ],
    "exam": [
        [f"{DEMO_PREFIX}E1", "March diagnostic", "Algebra review", "2026-03-16", f"{DEMO_PREFIX}C1", "active"],
    ],
    "problem": [
        [f"{DEMO_PREFIX}P1", "Solve the system", ""],
        [f"{DEMO_PREFIX}P2", "Vertex form", ""],
    ],
    "exam_problem": [
        [f"{DEMO_PREFIX}EP1", f"{DEMO_PREFIX}E1", f"{DEMO_PREFIX}P1", 10, 1, "2026-03-16", f"{DEMO_PREFIX}C1", "active"],
        [f"{DEMO_PREFIX}EP2", f"{DEMO_PREFIX}E1", f"{DEMO_PREFIX}P2", 15, 2, "2026-03-16", f"{DEMO_PREFIX}C1", "active"],
    ],
    "score": [
        [f"{DEMO_PREFIX}SC1", f"{DEMO_PREFIX}E1", f"{DEMO_PREFIX}S1", f"{DEMO_PREFIX}P1", 8, "", "2026-03-17", "graded", ""],
        [f"{DEMO_PREFIX}SC2", f"{DEMO_PREFIX}E1", f"{DEMO_PREFIX}S1", f"{DEMO_PREFIX}P2", 12, "", "2026-03-17", "graded", ""],
    ],
}


def main() -> None:
    session_factory = get_session_factory()
    with session_factory() as db:
        db.execute(delete(SheetRow).where(SheetRow.record_id.like(f"{DEMO_PREFIX}%")))
        db.commit()

    store = SheetStore(session_factory)
    with store.batch() as batch:
        for sheet, rows in DEMO_SHEETS.items():
            batch.append_rows(sheet, rows)

    total = sum(len(rows) for rows in DEMO_SHEETS.values())
    print(f"Demo data seeded: {total} rows across {len(DEMO_SHEETS)} sheets.")


if __name__ == "__main__":
    main()
