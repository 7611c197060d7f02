import datetime

import pytest

from humidity_logger import clock


def test_now_is_local_time_at_second_resolution():
    before = datetime.datetime.now().replace(microsecond=0)
    value = clock.now()
    after = datetime.datetime.now()

    parsed = datetime.datetime.strptime(value, '%Y-%m-%d %H:%M:%S')
    assert len(value) == 19
    assert before <= parsed <= after


def test_parse_timestamp_round_trips_and_rejects_other_formats():
    assert clock.parse_timestamp(' 2024-01-01 00:00:00\n') == datetime.datetime(2024, 1, 1)
    with pytest.raises(ValueError):
        clock.parse_timestamp('2024-01-01T00:00:00')
