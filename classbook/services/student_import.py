import logging
import zipfile
from datetime import date, datetime
from io import BytesIO

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from classbook.schemas.records import STUDENT_STATUS_ACTIVE

logger = logging.getLogger(__name__)

# Spreadsheet header -> student field
COLUMN_MAPPING = {
    "Name": "name",
    "School": "school",
    "Generation": "generation",
    "Phone": "number",
    "EnrollmentDate": "enrollment_date",
}


class StudentImportError(Exception):
    pass


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_student_workbook(
    content: bytes,
    *,
    common_school: str = "",
    common_generation: str = "",
    common_enrollment_date: str = "",
) -> list[dict[str, str]]:
    """Read students from the first worksheet of an ``.xlsx`` file.

    The first row is the header. Rows without a name are skipped. School,
    generation and enrollment date fall back to the common values.
    """
    if not content:
        raise StudentImportError("Uploaded file is empty")

    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise StudentImportError(f"Unreadable spreadsheet: {exc}") from exc

    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []

        columns: dict[str, int] = {}
        for index, title in enumerate(header):
            field_name = COLUMN_MAPPING.get(_cell_text(title))
            if field_name and field_name not in columns:
                columns[field_name] = index

        if "name" not in columns:
            raise StudentImportError("Spreadsheet has no 'Name' column")

        fallbacks = {
            "school": common_school,
            "generation": common_generation,
            "enrollment_date": common_enrollment_date,
        }
        students: list[dict[str, str]] = []
        for values in rows:
            record = {field_name: "" for field_name in COLUMN_MAPPING.values()}
            for field_name, index in columns.items():
                if index < len(values):
                    record[field_name] = _cell_text(values[index])
            if not record["name"]:
                continue
            for field_name, fallback in fallbacks.items():
                record[field_name] = record[field_name] or fallback
            record["status"] = STUDENT_STATUS_ACTIVE
            students.append(record)
    finally:
        workbook.close()

    logger.info("Read %d student(s) from uploaded workbook.", len(students))
    return students
