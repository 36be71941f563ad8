import pytest

from classes.errors import ValidationFailed
from utils.helpers import format_duration, parse_id


@pytest.mark.parametrize("seconds, text", [
    (3725, "1h 2m 5s"),
    (125, "2m 5s"),
    (42, "42s"),
    (0, "0s"),
    (None, "0s"),
    (59.9, "59s"),
])
def test_format_duration(seconds, text):
    assert format_duration(seconds) == text


def test_parse_id():
    assert parse_id("12", "courseId") == 12
    assert parse_id("", "sectionId", required=False) is None

    with pytest.raises(ValidationFailed, match="courseId is required"):
        parse_id(None, "courseId")
    with pytest.raises(ValidationFailed, match="must be a valid id"):
        parse_id("abc", "courseId")
