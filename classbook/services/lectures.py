from collections.abc import Sequence
from datetime import date, datetime

from classbook.schemas.records import Lecture


def parse_sheet_date(value: str) -> date | None:
    """Calendar date of an ISO date or timestamp cell; ``None`` when blank or unparseable."""
    text = (value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def lectures_for_class(lectures: Sequence[Lecture], class_id: str) -> list[Lecture]:
    return [lecture for lecture in lectures if lecture.class_id == class_id]


def upcoming_lectures(lectures: Sequence[Lecture], today: date) -> list[Lecture]:
    """Lectures dated today or later, soonest first. Undated lectures are left out."""
    dated = [(parse_sheet_date(lecture.date), lecture) for lecture in lectures]
    upcoming = [(day, lecture) for day, lecture in dated if day is not None and day >= today]
    return [lecture for _, lecture in sorted(upcoming, key=lambda item: item[0])]
