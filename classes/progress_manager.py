from collections import namedtuple


ContentCompletion = namedtuple("ContentCompletion", [
    "videos_watched",
    "total_videos",
    "reading_completed",
    "total_reading",
    "percent",
    "completed_percent",
    "started_percent",
    "watch_time",
])


def _key(value):
    return str(value) if value is not None else None


def _seconds(value):
    try:
        return max(float(value or 0), 0.0)
    except (TypeError, ValueError):
        return 0.0


def _get(record, name, default=None):
    if record is None:
        return default
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def percent_of(done, total):
    return round(done / total * 100, 2) if total > 0 else 0


class ProgressManager:
    @staticmethod
    def video_time_spent(video_ids, progress=None, watch_history=None):
        """Seconds spent per course video.

        The progress record is read first; watch-history entries only fill in
        videos the progress record never mentions, so a view tracked in both
        places is counted once.
        """
        course_videos = {_key(v) for v in video_ids}
        spent = {}

        for unit in _get(progress, "units") or []:
            for watched in _get(unit, "videos_watched") or []:
                vid = _key(_get(watched, "video_id"))
                if vid in course_videos:
                    spent[vid] = spent.get(vid, 0.0) + _seconds(_get(watched, "time_spent"))

        from_history = {}
        for entry in watch_history or []:
            vid = _key(_get(entry, "video_id"))
            if vid in course_videos and vid not in spent:
                from_history[vid] = from_history.get(vid, 0.0) + _seconds(_get(entry, "time_spent"))

        spent.update(from_history)
        return spent

    @staticmethod
    def completed_videos(video_ids, progress=None):
        course_videos = {_key(v) for v in video_ids}
        done = {_key(v) for v in _get(progress, "completed_videos") or []}

        for unit in _get(progress, "units") or []:
            for watched in _get(unit, "videos_watched") or []:
                if _get(watched, "completed"):
                    done.add(_key(_get(watched, "video_id")))

        return done & course_videos

    @staticmethod
    def content_completion(content, progress=None, watch_history=None):
        """Completion of a course's videos and approved reading materials.

        `content` needs `video_ids` and `reading_ids` (approved materials
        only). A missing progress record means zero progress.
        """
        spent = ProgressManager.video_time_spent(content.video_ids, progress, watch_history)
        started = {vid for vid, seconds in spent.items() if seconds > 0}
        completed = ProgressManager.completed_videos(content.video_ids, progress)

        approved = {_key(r) for r in content.reading_ids}
        reading_done = {_key(r) for r in _get(progress, "completed_reading_materials") or []} & approved

        total_videos = len(content.video_ids)
        total_reading = len(approved)
        total_content = total_videos + total_reading

        completed_percent = percent_of(len(completed) + len(reading_done), total_content)
        started_percent = percent_of(len(started) + len(reading_done), total_content)

        return ContentCompletion(
            videos_watched=len(started),
            total_videos=total_videos,
            reading_completed=len(reading_done),
            total_reading=total_reading,
            percent=max(completed_percent, started_percent),
            completed_percent=completed_percent,
            started_percent=started_percent,
            watch_time=round(sum(spent.values()), 2),
        )
