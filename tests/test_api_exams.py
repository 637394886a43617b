import threading
import time
from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient


def test_exam_detail_aggregates_scores(app_client: TestClient):
    response = app_client.get("/exams/E1")
    assert response.status_code == 200, response.text
    payload = response.json()

    assert payload["title"] == "Midterm"
    assert payload["date"] == "2025-04-01"
    assert payload["status"] == "active"
    assert payload["class_name"] == "Hanbit High - 2025 1"
    assert payload["max_score"] == 25
    assert [problem["problem_number"] for problem in payload["problems"]] == [1, 2]

    students = {item["id"]: item for item in payload["students"]}
    assert list(students) == ["S1", "S2"]
    assert students["S1"]["total_score"] == 20
    assert students["S1"]["percentage"] == 80
    assert len(students["S1"]["scores"]) == 2
    assert students["S2"]["percentage"] == 0
    assert students["S2"]["scores"] == []
    assert payload["average_percentage"] == 40


def test_exam_without_problems(app_client: TestClient):
    payload = app_client.get("/exams/E2").json()

    assert payload["problems"] == []
    assert payload["date"] == "Not scheduled"
    assert payload["status"] == "pending"
    assert payload["class_name"] == "Unknown class"
    assert [item["id"] for item in payload["students"]] == ["S1", "S2"]
    assert payload["average_percentage"] == 0


def test_unknown_exam_is_404(app_client: TestClient):
    response = app_client.get("/exams/E404")
    assert response.status_code == 404
    assert response.json()["detail"] == "Exam not found"


def test_exam_list_and_statistics(app_client: TestClient):
    exams = app_client.get("/exams").json()
    assert [item["id"] for item in exams] == ["E1", "E2"]
    assert exams[0]["total_problems"] == 2
    assert exams[0]["total_score"] == 25

    stats = app_client.get("/exams/statistics").json()
    assert stats == {"total_exams": 2, "active_exams": 1, "average_percentage": 80}


def test_add_exam_writes_exam_problems_and_rows(app_client: TestClient):
    response = app_client.post(
        "/add-exam",
        json={
            "title": "Final",
            "date": "2025-06-20",
            "class_id": "C1",
            "status": "active",
            "problems": [
                {"title": "Systems", "max_score": 20, "problem_number": 2},
                {"title": "Inequalities", "max_score": 30, "problem_number": 1},
            ],
        },
    )
    assert response.status_code == 200, response.text
    assert response.json()["exam_id"] == "E3"

    detail = app_client.get("/exams/E3").json()
    assert [problem["title"] for problem in detail["problems"]] == ["Inequalities", "Systems"]
    assert [problem["id"] for problem in detail["problems"]] == ["P3", "P4"]
    assert detail["max_score"] == 50
    assert detail["date"] == "2025-06-20"

    exam_rows = app_client.get("/load-list/exam_problem").json()["data"]
    assert [row[0] for row in exam_rows] == ["EP1", "EP2", "EP3", "EP4"]
    assert exam_rows[-1][1:] == ["E3", "P4", "20", "2", "2025-06-20", "C1", "active"]

    stats = app_client.get("/exams/statistics").json()
    assert stats["total_exams"] == 3
    assert stats["active_exams"] == 2


def test_add_exam_requires_core_fields(app_client: TestClient):
    response = app_client.post("/add-exam", json={"title": "Final", "date": "2025-06-20", "problems": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required exam information"


def test_add_exam_rejects_duplicate_id(app_client: TestClient):
    response = app_client.post(
        "/add-exam",
        json={
            "exam_id": "E1",
            "title": "Again",
            "date": "2025-06-20",
            "class_id": "C1",
            "problems": [{"title": "Q", "max_score": 5, "problem_number": 1}],
        },
    )
    assert response.status_code == 409


def test_add_exam_rejects_repeated_problem_numbers(app_client: TestClient):
    response = app_client.post(
        "/add-exam",
        json={
            "title": "Final",
            "date": "2025-06-20",
            "class_id": "C1",
            "problems": [
                {"title": "A", "max_score": 5, "problem_number": 1},
                {"title": "B", "max_score": 5, "problem_number": 1},
            ],
        },
    )
    assert response.status_code == 422


def test_save_exam_scores_updates_and_inserts(app_client: TestClient):
    body = {
        "exam_id": "E1",
        "scores": [
            {"student_id": "S1", "problem_id": "P1", "score": 9, "comment": "redo"},
            {"student_id": "S2", "problem_id": "P1", "score": 7},
        ],
    }
    response = app_client.post("/save-exam-scores", json=body)
    assert response.status_code == 200, response.text
    assert response.json()["updated"] == 1
    assert response.json()["inserted"] == 1

    detail = app_client.get("/exams/E1").json()
    students = {item["id"]: item for item in detail["students"]}
    assert students["S1"]["percentage"] == 84
    assert students["S2"]["percentage"] == 28
    assert detail["average_percentage"] == 56

    s1_p1 = next(score for score in students["S1"]["scores"] if score["problem_id"] == "P1")
    assert s1_p1["id"] == "SC1"
    assert s1_p1["comment"] == "redo"
    assert s1_p1["date"] == "2025-04-02"

    again = app_client.post("/save-exam-scores", json=body)
    assert again.json()["inserted"] == 0
    assert len(app_client.get("/load-list/score").json()["data"]) == 3


def test_save_exam_scores_validation(app_client: TestClient):
    missing = app_client.post("/save-exam-scores", json={"exam_id": "E1", "scores": []})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Missing required score information"

    unknown = app_client.post(
        "/save-exam-scores",
        json={"exam_id": "E404", "scores": [{"student_id": "S1", "problem_id": "P1", "score": 1}]},
    )
    assert unknown.status_code == 404

    negative = app_client.post(
        "/save-exam-scores",
        json={"exam_id": "E1", "scores": [{"student_id": "S1", "problem_id": "P1", "score": -1}]},
    )
    assert negative.status_code == 422


def test_store_failure_is_reported_as_unavailable(app_client: TestClient, monkeypatch):
    from classbook.services.sheet_store import SheetStore, SheetStoreError

    original = SheetStore.load_list

    def failing(self, sheet):
        if sheet == "exam":
            raise SheetStoreError("Failed to load exam")
        return original(self, sheet)

    monkeypatch.setattr(SheetStore, "load_list", failing)
    response = app_client.get("/exams/E1")

    assert response.status_code == 503
    assert response.json() == {"success": False, "error": "Failed to load exam"}


def test_failed_score_save_leaves_sheet_unchanged(app_client: TestClient, monkeypatch):
    from sqlalchemy.exc import SQLAlchemyError

    from classbook.services.sheet_store import SheetBatch

    original_append = SheetBatch.append_rows

    def failing_append(self, sheet, rows):
        if sheet == "score":
            raise SQLAlchemyError("disk I/O error")
        return original_append(self, sheet, rows)

    monkeypatch.setattr(SheetBatch, "append_rows", failing_append)
    response = app_client.post(
        "/save-exam-scores",
        json={
            "exam_id": "E1",
            "scores": [
                {"student_id": "S1", "problem_id": "P1", "score": 9, "comment": "redo"},
                {"student_id": "S2", "problem_id": "P1", "score": 7},
            ],
        },
    )

    assert response.status_code == 503
    assert response.json()["success"] is False

    rows = app_client.get("/load-list/score").json()["data"]
    assert [row[0] for row in rows] == ["SC1", "SC2"]
    assert rows[0][4] == "8"
    assert rows[0][5] == ""
    assert rows[0][8] == "2025-04-02T09:00:00+00:00"


def test_concurrent_saves_on_different_exams_get_distinct_ids(sheet_store, monkeypatch):
    from classbook.api import exams as exams_api
    from classbook.schemas.exams import ScoreEdit, ScoreSaveRequest

    guard = threading.Lock()
    active = 0
    peak = 0
    original_reconcile = exams_api.reconcile_scores

    def slow_reconcile(*args, **kwargs):
        nonlocal active, peak
        with guard:
            active += 1
            peak = max(peak, active)
        try:
            time.sleep(0.05)
            return original_reconcile(*args, **kwargs)
        finally:
            with guard:
                active -= 1

    monkeypatch.setattr(exams_api, "reconcile_scores", slow_reconcile)
    payloads = [
        ScoreSaveRequest(exam_id="E1", scores=[ScoreEdit(student_id="S2", problem_id="P1", score=5)]),
        ScoreSaveRequest(exam_id="E2", scores=[ScoreEdit(student_id="S1", problem_id="P1", score=5)]),
    ]
    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(lambda payload: exams_api.save_exam_scores(payload, store=sheet_store), payloads))

    assert peak == 1
    assert [result.inserted for result in results] == [1, 1]
    rows = sheet_store.load_list("score")
    assert sorted(row[0] for row in rows) == ["SC1", "SC2", "SC3", "SC4"]

    exams_api.save_exam_scores(
        ScoreSaveRequest(exam_id="E1", scores=[ScoreEdit(student_id="S2", problem_id="P1", score=9)]),
        store=sheet_store,
    )
    by_key = {(row[1], row[2], row[3]): row[4] for row in sheet_store.load_list("score")}
    assert by_key[("E1", "S2", "P1")] == "9"
    assert by_key[("E2", "S1", "P1")] == "5"


def test_add_exam_reuses_existing_problem(app_client: TestClient):
    response = app_client.post(
        "/add-exam",
        json={
            "title": "Retake",
            "date": "2025-05-01",
            "class_id": "C1",
            "problems": [
                {"problem_id": "P1", "title": "Ignored copy", "max_score": 10, "problem_number": 1},
                {"problem_id": "P50", "title": "Brand new", "max_score": 5, "problem_number": 2},
            ],
        },
    )
    assert response.status_code == 200, response.text
    exam_id = response.json()["exam_id"]

    problems = app_client.get("/load-list/problem").json()["data"]
    assert [row[0] for row in problems] == ["P1", "P2", "P50"]

    detail = app_client.get(f"/exams/{exam_id}").json()
    assert [problem["id"] for problem in detail["problems"]] == ["P1", "P50"]
    assert detail["problems"][0]["title"] == "Linear equations"
