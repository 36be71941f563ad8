from classes.progress_manager import ProgressManager, percent_of
from classes.snapshots import CourseContent


def course(video_ids=(1, 2), reading_ids=(10,)):
    return CourseContent(
        course_id=1, units=[], video_ids=frozenset(video_ids), reading_ids=frozenset(reading_ids),
        quiz_units={}, total_quizzes=0,
    )


def test_two_videos_one_watched_and_reading_done():
    completion = ProgressManager.content_completion(
        course(),
        {"completed_reading_materials": [10]},
        [{"video_id": 1, "time_spent": 120}],
    )

    assert completion.videos_watched == 1
    assert completion.reading_completed == 1
    assert completion.total_videos + completion.total_reading == 3
    assert completion.percent == 66.67
    assert completion.watch_time == 120


def test_zero_time_watch_is_not_counted():
    completion = ProgressManager.content_completion(
        course(video_ids=(1,), reading_ids=()), None, [{"video_id": 1, "time_spent": 0}],
    )

    assert completion.videos_watched == 0
    assert completion.percent == 0


def test_no_content_means_zero_percent():
    completion = ProgressManager.content_completion(course(video_ids=(), reading_ids=()))

    assert completion.percent == 0
    assert completion.completed_percent == 0


def test_progress_record_wins_over_watch_history():
    progress = {"units": [{"unit_id": 1, "videos_watched": [{"video_id": 1, "time_spent": 30}]}]}
    history = [{"video_id": 1, "time_spent": 500}, {"video_id": 2, "time_spent": 45}]

    spent = ProgressManager.video_time_spent({1, 2}, progress, history)

    assert spent == {"1": 30.0, "2": 45.0}


def test_videos_outside_the_course_are_ignored():
    completion = ProgressManager.content_completion(
        course(video_ids=(1,), reading_ids=()),
        None,
        [{"video_id": 99, "time_spent": 300}],
    )

    assert completion.videos_watched == 0
    assert completion.watch_time == 0


def test_completed_flag_beats_started_when_higher():
    progress = {
        "units": [{"unit_id": 1, "videos_watched": [{"video_id": 1, "time_spent": 0, "completed": True}]}],
        "completed_videos": [2],
    }
    completion = ProgressManager.content_completion(course(reading_ids=()), progress)

    assert completion.completed_percent == 100
    assert completion.started_percent == 0
    assert completion.percent == 100


def test_unapproved_or_removed_reading_is_not_counted():
    completion = ProgressManager.content_completion(
        course(video_ids=(), reading_ids=(10,)),
        {"completed_reading_materials": [10, 11, 12]},
    )

    assert completion.reading_completed == 1
    assert completion.percent == 100


def test_percent_stays_within_bounds():
    history = [{"video_id": v, "time_spent": 10} for v in (1, 1, 2, 2, 3)]
    completion = ProgressManager.content_completion(
        course(video_ids=(1, 2), reading_ids=(10,)),
        {"completed_videos": [1, 2, 3], "completed_reading_materials": [10, 10]},
        history,
    )

    assert 0 <= completion.percent <= 100


def test_percent_of():
    assert percent_of(1, 3) == 33.33
    assert percent_of(5, 0) == 0
