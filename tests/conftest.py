from pathlib import Path

import pytest
from fastapi.testclient import TestClient

SEED_SHEETS: dict[str, list[list[object]]] = {
    "student": [
        ["S1", "Minji Kim", "Hanbit High", "G10", "010-1111-2222", "2025-03-01", "active"],
        ["S2", "Jiho Lee", "Hanbit High", "G10", "010-3333-4444", "2025-03-01", "active"],
        ["S3", "Seoyeon Park", "Daehan Middle", "G9", "010-5555-6666", "2024-09-01", "inactive"],
    ],
    "class": [
        ["C1", "Hanbit High", "2025", "1", "G10", "Mon/Wed 18:00", "active"],
        ["C2", "Daehan Middle", "2025", "1", "G9", "Tue 17:00", "inactive"],
    ],
    "lecture": [
        ["L1", "C1", "2025-03-03", "18:00", "Linear equations"],
        ["L2", "C1", "2025-03-05", "18:00", "Quadratics"],
        ["L3", "C2", "2025-03-04", "17:00", "Fractions"],
    ],
    "enrollment": [
        ["EN1", "S1", "C1", "2025-03-01", "active"],
        ["EN2", "S2", "C1", "2025-03-01", "active"],
    ],
    "attendance": [
        ["AT1", "L1", "S1", "present", "C1", "2025-03-03"],
    ],
    "homework": [
        ["HW1", "L1", "S1", 10, 8, "good", "", "2025-03-03T20:00:00+00:00"],
    ],
    # E1 predates exam-level metadata: date, class and status live on its exam_problem rows only.
    "exam": [
        ["E1", "Midterm", "Algebra midterm"],
        ["E2", "Pop quiz", ""],
    ],
    "problem": [
        ["P1", "Linear equations", "Solve for x"],
        ["P2", "Quadratics", ""],
    ],
    "exam_problem": [
        ["EP1", "E1", "P1", 10, 1, "2025-04-01", "C1", "active"],
        ["EP2", "E1", "P2", 15, 2, "2025-04-01", "C1", "active"],
    ],
    "score": [
        ["SC1", "E1", "S1", "P1", 8, "", "2025-04-02", "graded", "2025-04-02T09:00:00+00:00"],
        ["SC2", "E1", "S1", "P2", 12, "", "2025-04-02", "graded", "2025-04-02T09:00:00+00:00"],
    ],
}


@pytest.fixture()
def app_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_file.as_posix()}")
    monkeypatch.setenv("AUTO_CREATE_SCHEMA", "true")
    monkeypatch.setenv("LOADER_MAX_WORKERS", "4")

    from classbook.core.config import clear_settings_cache
    from classbook.db.base import Base
    from classbook.db.session import get_engine, get_session_factory, reset_engine
    from classbook.main import create_app
    from classbook.services.sheet_store import SheetStore

    clear_settings_cache()
    reset_engine()
    Base.metadata.create_all(bind=get_engine())

    store = SheetStore(get_session_factory())
    with store.batch() as batch:
        for sheet, rows in SEED_SHEETS.items():
            batch.append_rows(sheet, rows)

    app = create_app()
    with TestClient(app) as client:
        yield client

    Base.metadata.drop_all(bind=get_engine())
    reset_engine()


@pytest.fixture()
def sheet_store(app_client: TestClient):
    from classbook.db.session import get_session_factory
    from classbook.services.sheet_store import SheetStore

    return SheetStore(get_session_factory())
