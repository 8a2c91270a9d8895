"""Tests for shared time helpers and the request-ID logging context."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from slot_engine.logging_context import (
    RequestIdFilter,
    get_request_id,
    get_request_logger,
    new_request_id,
    set_request_id,
)
from slot_engine.utils import (
    format_hhmm,
    local_date,
    local_day_bounds,
    local_instant,
    parse_hhmm,
)

LONDON = ZoneInfo("Europe/London")


class TestParseHhmm:
    def test_plain(self):
        assert parse_hhmm("09:30") == time(9, 30)

    def test_single_digit_hour(self):
        assert parse_hhmm("9:05") == time(9, 5)

    def test_seconds_ignored(self):
        assert parse_hhmm("17:00:00") == time(17, 0)

    def test_surrounding_whitespace(self):
        assert parse_hhmm(" 12:00 ") == time(12, 0)

    @pytest.mark.parametrize("raw", ["24:00", "12:60", "noon", "", "9"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError, match="Invalid HH:MM"):
            parse_hhmm(raw)


class TestLocalTime:
    def test_local_instant_is_utc(self):
        moment = local_instant(date(2025, 7, 1), time(9, 0), LONDON)
        assert moment.tzinfo == timezone.utc
        assert moment.hour == 8  # BST

    def test_format_hhmm_in_zone(self):
        moment = datetime(2025, 7, 1, 8, 0, tzinfo=timezone.utc)
        assert format_hhmm(moment, LONDON) == "09:00"
        assert format_hhmm(moment, ZoneInfo("Asia/Tokyo")) == "17:00"

    def test_day_bounds_regular_day(self):
        start, end = local_day_bounds(date(2025, 7, 1), LONDON)
        assert end - start == timedelta(hours=24)

    def test_day_bounds_dst_start(self):
        start, end = local_day_bounds(date(2025, 3, 30), LONDON)
        assert end - start == timedelta(hours=23)

    def test_day_bounds_dst_end(self):
        start, end = local_day_bounds(date(2025, 10, 26), LONDON)
        assert end - start == timedelta(hours=25)

    def test_local_date_crosses_midnight(self):
        moment = datetime(2025, 3, 17, 23, 30, tzinfo=timezone.utc)
        assert local_date(moment, LONDON) == date(2025, 3, 17)
        assert local_date(moment, ZoneInfo("Asia/Tokyo")) == date(2025, 3, 18)


class TestRequestIdContext:
    def test_set_and_get(self):
        set_request_id("REQ-test0001")
        assert get_request_id() == "REQ-test0001"

    def test_new_request_id_format(self):
        request_id = new_request_id()
        assert request_id.startswith("REQ-")
        assert len(request_id) == 12
        assert get_request_id() == request_id

    def test_filter_attaches_request_id(self):
        set_request_id("REQ-filter01")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
        assert RequestIdFilter().filter(record)
        assert record.request_id == "REQ-filter01"

    def test_filter_added_once(self):
        logger = get_request_logger("slot_engine.tests.once")
        get_request_logger("slot_engine.tests.once")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1
