import math


def format_datetime(datetime_obj):
    """Format datetime to a readable string."""
    if not datetime_obj:
        return None
    return datetime_obj.strftime('%Y-%m-%d %H:%M:%S')


def format_duration(seconds):
    """`3725` -> `1h 2m 5s`, `125` -> `2m 5s`, `42` -> `42s`."""
    seconds = max(float(seconds or 0), 0)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(math.floor(seconds % 60))

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def parse_id(value, field_name, required=True):
    """Turn a query/body value into an integer id or raise ValidationFailed."""
    from classes.errors import ValidationFailed

    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationFailed(f"{field_name} is required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field_name} must be a valid id")
