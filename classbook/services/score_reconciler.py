from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from classbook.schemas.exams import ScoreEdit
from classbook.schemas.records import SCORE_STATUS_GRADED, Score
from classbook.services.ids import IdAllocator

SCORE_ID_PREFIX = "SC"


@dataclass
class ReconcilePlan:
    scores: list[Score] = field(default_factory=list)
    updated: list[Score] = field(default_factory=list)
    inserted: list[Score] = field(default_factory=list)


def reconcile_scores(
    scores: Sequence[Score],
    exam_id: str,
    edits: Iterable[ScoreEdit],
    *,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> ReconcilePlan:
    """Merge score edits into ``scores`` keyed on (exam_id, student_id, problem_id).

    Matching records get the new score and comment and a fresh ``last_updated``;
    id, date and status are kept. Unmatched edits become new graded records.
    The input sequence is not modified.
    """
    now = now or datetime.now(UTC)
    stamp = now.isoformat()
    today = now.date().isoformat()

    merged = [score.model_copy() for score in scores]
    positions: dict[tuple[str, str, str], int] = {}
    for position, score in enumerate(merged):
        positions.setdefault(score.key, position)

    allocator = IdAllocator(SCORE_ID_PREFIX, (score.id for score in merged))
    next_id = id_factory or allocator.next

    updated: dict[int, None] = {}
    inserted: dict[int, None] = {}
    for edit in edits:
        key = (exam_id, edit.student_id, edit.problem_id)
        position = positions.get(key)
        if position is None:
            score_id = edit.id if edit.id and allocator.reserve(edit.id) else next_id()
            merged.append(
                Score(
                    id=score_id,
                    exam_id=exam_id,
                    student_id=edit.student_id,
                    problem_id=edit.problem_id,
                    score=edit.score,
                    comment=edit.comment,
                    date=today,
                    status=SCORE_STATUS_GRADED,
                    last_updated=stamp,
                )
            )
            position = len(merged) - 1
            positions[key] = position
            inserted[position] = None
            continue

        merged[position] = merged[position].model_copy(
            update={"score": edit.score, "comment": edit.comment, "last_updated": stamp}
        )
        if position not in inserted:
            updated[position] = None

    return ReconcilePlan(
        scores=merged,
        updated=[merged[position] for position in updated],
        inserted=[merged[position] for position in inserted],
    )
