from enum import Enum

CONTENT_WEIGHT = 0.6
QUIZ_WEIGHT = 0.4


class BlendStrategy(str, Enum):
    """How a report turns content completion and quiz results into one number."""

    CONTENT_ONLY = "content_only"
    # quiz progress = attempted units / total units
    CONTENT_PLUS_ATTEMPT_RATE = "content_plus_attempt_rate"
    # quiz progress = average best percentage over attempted units
    CONTENT_PLUS_AVERAGE_SCORE = "content_plus_average_score"


def quiz_progress(strategy, quiz):
    strategy = BlendStrategy(strategy)
    if quiz is None or strategy is BlendStrategy.CONTENT_ONLY:
        return 0
    if strategy is BlendStrategy.CONTENT_PLUS_ATTEMPT_RATE:
        if not quiz.total_units:
            return 0
        return min(quiz.total_taken / quiz.total_units * 100, 100)
    return quiz.course_marks


def blend_progress(strategy, content_percent, quiz=None):
    strategy = BlendStrategy(strategy)
    if strategy is BlendStrategy.CONTENT_ONLY:
        return round(content_percent, 2)
    value = content_percent * CONTENT_WEIGHT + quiz_progress(strategy, quiz) * QUIZ_WEIGHT
    return round(value, 2)


def progress_color(value):
    value = value or 0
    if value > 75:
        return "green"
    if value >= 50:
        return "yellow"
    return "red"
