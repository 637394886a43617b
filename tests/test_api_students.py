from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import Workbook


def _workbook_bytes(rows: list[list[object]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_list_students(app_client: TestClient):
    response = app_client.get("/students")
    assert response.status_code == 200
    payload = response.json()
    assert [item["id"] for item in payload] == ["S1", "S2", "S3"]
    assert payload[0]["name"] == "Minji Kim"


def test_add_single_and_many_students(app_client: TestClient):
    single = app_client.post("/add-student", json={"name": "Hana Choi", "school": "Hanbit High"})
    assert single.status_code == 200, single.text
    assert single.json()["student_ids"] == ["S4"]

    many = app_client.post("/add-student", json=[{"name": "Yuna"}, {"name": "Dae", "student_id": "S20"}])
    assert many.status_code == 200, many.text
    assert many.json()["updated_rows"] == 2
    assert many.json()["student_ids"] == ["S5", "S20"]

    students = app_client.get("/students").json()
    assert students[-1]["status"] == "active"


def test_add_student_validation(app_client: TestClient):
    assert app_client.post("/add-student", json=[]).status_code == 400
    assert app_client.post("/add-student", json={"name": "Again", "student_id": "S1"}).status_code == 409
    assert app_client.post("/add-student", json={"school": "No name"}).status_code == 422


def test_upload_student_file(app_client: TestClient):
    content = _workbook_bytes(
        [
            ["Name", "Phone", "School"],
            ["Hana Choi", "010-7777-8888", ""],
            [None, "010-0000-0000", "Skipped"],
            ["Yuna Jang", 1012345678, "Daehan Middle"],
        ]
    )
    response = app_client.post(
        "/upload-student-file",
        files={"file": ("students.xlsx", content, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
        data={"commonSchool": "Hanbit High", "commonGeneration": "G10", "commonEnrollmentDate": "2025-03-10"},
    )
    assert response.status_code == 200, response.text
    assert response.json()["student_ids"] == ["S4", "S5"]

    imported = {item["id"]: item for item in app_client.get("/students").json()}
    assert imported["S4"]["school"] == "Hanbit High"
    assert imported["S4"]["number"] == "010-7777-8888"
    assert imported["S4"]["generation"] == "G10"
    assert imported["S4"]["enrollment_date"] == "2025-03-10"
    assert imported["S5"]["school"] == "Daehan Middle"
    assert imported["S5"]["number"] == "1012345678"


def test_upload_rejects_bad_files(app_client: TestClient):
    garbage = app_client.post("/upload-student-file", files={"file": ("students.xlsx", b"not a workbook")})
    assert garbage.status_code == 400

    no_name = app_client.post(
        "/upload-student-file",
        files={"file": ("students.xlsx", _workbook_bytes([["School"], ["Hanbit High"]]))},
    )
    assert no_name.status_code == 400
    assert "Name" in no_name.json()["detail"]

    empty = app_client.post(
        "/upload-student-file",
        files={"file": ("students.xlsx", _workbook_bytes([["Name"]]))},
    )
    assert empty.status_code == 400


def test_update_student_status(app_client: TestClient):
    response = app_client.post("/update-student-status/S2", json={"status": "inactive"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    student = next(item for item in app_client.get("/students").json() if item["id"] == "S2")
    assert student["status"] == "inactive"

    assert app_client.post("/update-student-status/S99", json={"status": "inactive"}).status_code == 404
    assert app_client.post("/update-student-status/S2", json={"status": "gone"}).status_code == 422


def test_delete_student(app_client: TestClient):
    assert app_client.delete("/students/S3").status_code == 200
    assert [item["id"] for item in app_client.get("/students").json()] == ["S1", "S2"]
    assert app_client.delete("/students/S3").status_code == 404


def test_student_scores(app_client: TestClient):
    scores = app_client.get("/students/S1/scores").json()
    assert [score["id"] for score in scores] == ["SC1", "SC2"]
    assert app_client.get("/students/S2/scores").json() == []
    assert app_client.get("/students/S99/scores").status_code == 404
