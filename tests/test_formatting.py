import pytest

from song_splitter.utils.formatting import (
    format_duration,
    format_seconds_arg,
    format_timestamp,
)


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0s"), (59.9, "59s"), (3600, "1h"), (3723, "1h 2m 3s"), (125, "2m 5s")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_format_timestamp() -> None:
    assert format_timestamp(3723.4) == "1:02:03"
    assert format_timestamp(0) == "0:00:00"
    assert format_timestamp(None) == "?"


def test_format_seconds_arg() -> None:
    assert format_seconds_arg(300) == "300.000000"
    assert format_seconds_arg(0.5) == "0.500000"
