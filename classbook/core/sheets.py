from dataclasses import dataclass


class UnknownSheetError(KeyError):
    pass


@dataclass(frozen=True)
class SheetLayout:
    name: str
    columns: tuple[str, ...]
    id_prefix: str

    @property
    def width(self) -> int:
        return len(self.columns)


# Column order is part of the stored format: new columns are only ever appended.
SHEETS: dict[str, SheetLayout] = {
    layout.name: layout
    for layout in (
        SheetLayout(
            "student",
            ("student_id", "name", "school", "generation", "number", "enrollment_date", "status"),
            "S",
        ),
        SheetLayout(
            "class",
            ("class_id", "school", "year", "semester", "generation", "schedule", "status"),
            "C",
        ),
        SheetLayout(
            "lecture",
            ("lecture_id", "class_id", "lecture_date", "lecture_time", "lecture_topic"),
            "L",
        ),
        SheetLayout(
            "enrollment",
            ("enrollment_id", "student_id", "class_id", "enrollment_date", "status"),
            "EN",
        ),
        SheetLayout(
            "attendance",
            ("attendance_id", "lecture_id", "student_id", "status", "class_id", "date"),
            "AT",
        ),
        SheetLayout(
            "homework",
            (
                "homework_id",
                "lecture_id",
                "student_id",
                "total_problems",
                "completed_problems",
                "classification",
                "comments",
                "last_updated",
            ),
            "HW",
        ),
        SheetLayout("exam", ("exam_id", "title", "description", "date", "class_id", "status"), "E"),
        SheetLayout("problem", ("problem_id", "title", "description"), "P"),
        SheetLayout(
            "exam_problem",
            ("exam_problem_id", "exam_id", "problem_id", "max_score", "problem_number", "date", "class_id", "status"),
            "EP",
        ),
        SheetLayout(
            "score",
            (
                "score_id",
                "exam_id",
                "student_id",
                "problem_id",
                "score",
                "comment",
                "date",
                "status",
                "last_updated",
            ),
            "SC",
        ),
    )
}


def get_layout(sheet: str) -> SheetLayout:
    try:
        return SHEETS[sheet]
    except KeyError as exc:
        raise UnknownSheetError(sheet) from exc
