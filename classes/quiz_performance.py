import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

UnitMark = namedtuple("UnitMark", ["unit_id", "unit_title", "percentage", "passed", "attempted", "attempts"])
QuizSummary = namedtuple("QuizSummary", ["unit_marks", "course_marks", "total_taken", "total_passed", "total_units"])


def _key(value):
    return str(value) if value is not None else None


def _get(record, name, default=None):
    if record is None:
        return default
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def attempt_percentage(attempt):
    percentage = _get(attempt, "percentage")
    if percentage is None:
        percentage = _get(attempt, "score")
    try:
        return float(percentage or 0)
    except (TypeError, ValueError):
        return 0.0


class QuizPerformance:
    @staticmethod
    def best_attempt(attempts):
        """Return `(best, passed)` for one unit's attempts.

        The best attempt has the highest percentage, the earliest one winning
        ties. `passed` is true when any attempt passed, whichever one is best.
        """
        best = None
        passed = False
        for attempt in attempts:
            percentage = attempt_percentage(attempt)
            if best is None or percentage > best["percentage"]:
                best = {
                    "percentage": percentage,
                    "passed": bool(_get(attempt, "passed")),
                    "completedAt": _get(attempt, "completed_at"),
                }
            if _get(attempt, "passed"):
                passed = True
        return best, passed

    @staticmethod
    def aggregate(units, progress=None, fallback_attempts=(), quiz_units=None):
        """Per-unit best marks and the course average for one student.

        `units` is the course's ordered unit list. Quiz summaries stored on the
        progress record are authoritative; raw `fallback_attempts` are only
        used for units the progress record has no quiz data for.
        """
        quiz_units = {_key(k): _key(v) for k, v in (quiz_units or {}).items()}
        unit_keys = [_key(_get(u, "id")) for u in units]
        known = set(unit_keys)

        resolved = {}
        for unit_progress in _get(progress, "units") or []:
            uid = _key(_get(unit_progress, "unit_id"))
            attempts = _get(unit_progress, "quiz_attempts") or []
            if uid in known and attempts:
                resolved.setdefault(uid, []).extend(attempts)

        pending = {}
        for attempt in fallback_attempts or ():
            uid = _key(_get(attempt, "unit_id")) or quiz_units.get(_key(_get(attempt, "quiz_id")))
            if uid in known and uid not in resolved:
                pending.setdefault(uid, []).append(attempt)

        if pending:
            logger.debug("Using raw quiz attempts for %d unresolved units", len(pending))

        unit_marks = []
        total_marks = 0.0
        total_taken = 0
        total_passed = 0

        for unit, uid in zip(units, unit_keys):
            attempts = resolved.get(uid) or pending.get(uid) or []
            best, passed = QuizPerformance.best_attempt(attempts)
            if best is not None:
                total_marks += best["percentage"]
                total_taken += 1
                if passed:
                    total_passed += 1

            unit_marks.append(UnitMark(
                unit_id=_get(unit, "id"),
                unit_title=_get(unit, "title"),
                percentage=round(best["percentage"], 2) if best else 0,
                passed=passed,
                attempted=best is not None,
                attempts=[best] if best else [],
            ))

        course_marks = round(total_marks / total_taken, 2) if total_taken else 0

        return QuizSummary(
            unit_marks=unit_marks,
            course_marks=course_marks,
            total_taken=total_taken,
            total_passed=total_passed,
            total_units=len(units),
        )

    @staticmethod
    def unit_marks_json(summary):
        return [{
            "unitId": mark.unit_id,
            "unitTitle": mark.unit_title,
            "percentage": mark.percentage,
            "passed": mark.passed,
            "attempted": mark.attempted,
            "quizzes": mark.attempts,
        } for mark in summary.unit_marks]
