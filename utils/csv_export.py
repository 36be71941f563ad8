import csv
import io
from datetime import date

from utils.helpers import format_datetime

QUESTION_COLUMNS = [
    "Q#", "Question", "Option A", "Option B", "Option C", "Option D",
    "Student Answer", "Correct Answer", "Status", "Points Earned", "Max Points",
]

OPTION_LETTERS = "ABCDEF"


def option_letter(index):
    if index is not None and 0 <= index < len(OPTION_LETTERS):
        return OPTION_LETTERS[index]
    return f"Option {(index or 0) + 1}"


def _option_text(options, index):
    if index is None or not 0 <= index < len(options):
        return "N/A"
    return options[index] if options[index] not in (None, "") else "N/A"


def _answers_by_question(attempt):
    return {str(a.get("question_id")): a for a in attempt.answers or []}


def question_rows(attempt):
    """One row per question of the attempt, in the fixed column order."""
    answers = _answers_by_question(attempt)
    rows = []
    for index, question in enumerate(attempt.questions or [], start=1):
        answer = answers.get(str(question.get("question_id")))
        options = list(question.get("options") or [])
        selected = answer.get("selected_option") if answer else None
        correct_option = question.get("correct_option")
        is_correct = bool(answer and answer.get("is_correct"))

        if selected is not None:
            student_answer = f"{option_letter(selected)}: {_option_text(options, selected)}"
        else:
            student_answer = "Not Answered"

        if is_correct:
            status = "CORRECT"
        elif selected is None:
            status = "UNANSWERED"
        else:
            status = "WRONG"

        padded = options + [""] * (4 - len(options))
        rows.append([
            index,
            question.get("question_text") or "",
            *padded[:4],
            student_answer,
            f"{option_letter(correct_option)}: {_option_text(options, correct_option)}",
            status,
            (answer.get("points") or 0) if answer else 0,
            question.get("points") or 1,
        ])
    return rows


def answer_summary(attempt):
    answers = attempt.answers or []
    correct = sum(1 for a in answers if a.get("is_correct"))
    wrong = sum(1 for a in answers if not a.get("is_correct") and a.get("selected_option") is not None)
    total = len(attempt.questions or [])
    return {
        "total": total,
        "correct": correct,
        "wrong": wrong,
        "unanswered": total - correct - wrong,
    }


def quiz_attempt_csv(attempt):
    """Render a quiz attempt as an RFC 4180 CSV report."""
    student = attempt.student
    course = attempt.course
    unit = attempt.unit
    percentage = round(attempt.percentage or 0, 2)
    time_spent = int(attempt.time_spent or 0)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["QUIZ ATTEMPT REPORT"])
    writer.writerow([])
    writer.writerow(["Student Name", student.name if student else "N/A"])
    writer.writerow(["Registration No", (student.reg_no if student else None) or "N/A"])
    writer.writerow(["Email", student.email if student else "N/A"])
    writer.writerow(["Course", f"{course.title if course else 'N/A'} ({(course.course_code if course else '') or ''})"])
    writer.writerow(["Unit", unit.title if unit else "N/A"])
    writer.writerow(["Date", format_datetime(attempt.completed_at) or "N/A"])
    writer.writerow(["Score", f"{attempt.score or 0}/{attempt.max_score or 0} ({percentage}%)"])
    writer.writerow(["Result", "PASSED" if attempt.passed else "FAILED"])
    writer.writerow(["Passing Score", f"{attempt.passing_score or 70}%"])
    writer.writerow(["Time Spent", f"{time_spent // 60} min {time_spent % 60} sec"])
    if attempt.auto_submitted:
        writer.writerow(["Note", "Auto-submitted due to time limit or security violation"])
    writer.writerow([])

    writer.writerow(QUESTION_COLUMNS)
    writer.writerows(question_rows(attempt))

    summary = answer_summary(attempt)
    writer.writerow([])
    writer.writerow(["Summary"])
    writer.writerow(["Total Questions", summary["total"]])
    writer.writerow(["Correct Answers", summary["correct"]])
    writer.writerow(["Wrong Answers", summary["wrong"]])
    writer.writerow(["Unanswered", summary["unanswered"]])

    return buffer.getvalue()


def quiz_attempt_filename(attempt, today=None):
    today = today or date.today()
    reg_no = (attempt.student.reg_no if attempt.student else None) or "unknown"
    code = (attempt.course.course_code if attempt.course else None) or "course"
    return f"Quiz_Report_{reg_no}_{code}_{today.isoformat()}.csv"
