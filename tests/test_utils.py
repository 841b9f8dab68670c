# tests/test_utils.py
import re
import pytest
from datetime import datetime, timedelta, timezone
from ..utils import as_value_list, camel_to_snake, is_iterable, params_to_values, system_timezone


@pytest.mark.parametrize("value, expected", [
    ([1], True), ((1,), True), ({1}, True), ("abc", False), (b"abc", False), ({"a": 1}, False), (5, False),
])
def test_is_iterable(value, expected):
    assert is_iterable(value) is expected


@pytest.mark.parametrize("value, expected", [(None, []), ([1, 2], [1, 2]), ((1, 2), [1, 2]), ("a", ["a"]), (0, [0])])
def test_as_value_list(value, expected):
    assert as_value_list(value) == expected


class TestParamsToValues:
    """Tests for turning execute parameters into bound values."""

    def test_no_params(self):
        assert params_to_values(()) == []

    def test_single_list(self):
        assert params_to_values(([1, 2],)) == [1, 2]

    def test_single_scalar(self):
        assert params_to_values((1,)) == [1]

    def test_several_params(self):
        assert params_to_values((1, "a")) == [1, "a"]

    def test_list_among_several(self):
        assert params_to_values(([1, 2], 3)) == [[1, 2], 3]


@pytest.mark.parametrize("name, expected", [
    ("logQueryParameters", "log_query_parameters"), ("maxUses", "max_uses"), ("host", "host"), ("max_uses", "max_uses"),
])
def test_camel_to_snake(name, expected):
    assert camel_to_snake(name) == expected


class TestSystemTimezone:
    """Tests for the UTC offset string."""

    @pytest.mark.parametrize("offset, expected", [
        (timedelta(hours=5, minutes=30), "+05:30"),
        (timedelta(hours=-8), "-08:00"),
        (timedelta(hours=-3, minutes=-30), "-03:30"),
        (timedelta(0), "+00:00"),
    ])
    def test_aware_moment(self, offset, expected):
        assert system_timezone(datetime(2024, 6, 1, 12, tzinfo=timezone(offset))) == expected

    def test_current_time_format(self):
        assert re.fullmatch(r"[+-]\d\d:\d\d", system_timezone())
