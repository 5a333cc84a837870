import base64
import re
from datetime import datetime, timedelta, tzinfo
from ipaddress import IPv4Address, IPv6Address
from urllib.parse import SplitResult

import pytest

from cacik.convert import (
    ConversionError,
    CustomTypeInfo,
    convert_argument,
    extract_timezone,
    parse_bool,
    parse_date,
    parse_datetime,
    parse_duration,
    parse_time,
    parse_timezone,
)


class Color(str):
    pass


class Priority(int):
    pass


COLORS = {"Color": CustomTypeInfo("Color", "string", {"red": "red", "blue": "blue", "green": "green"})}
PRIORITIES = {
    "Priority": CustomTypeInfo(
        "Priority", "int",
        {"low": "1", "medium": "2", "high": "3", "1": "1", "2": "2", "3": "3"},
    )
}


@pytest.mark.parametrize(
    "text,expected",
    [
        ("true", True), ("false", False), ("TRUE", True), ("FALSE", False),
        ("True", True), ("False", False), ("yes", True), ("no", False),
        ("YES", True), ("NO", False), ("on", True), ("off", False),
        ("ON", True), ("OFF", False), ("enabled", True), ("disabled", False),
        ("ENABLED", True), ("DISABLED", False), ("t", True), ("f", False),
        ("T", True), ("F", False), ("1", True), ("0", False),
    ],
)
def test_parse_bool(text, expected):
    assert parse_bool(text) is expected
    assert convert_argument(text, bool) is expected


def test_invalid_bool():
    with pytest.raises(ConversionError, match="cannot parse"):
        convert_argument("maybe", bool)


def test_primitives():
    assert convert_argument("5", int) == 5
    assert convert_argument("John", str) == "John"
    assert convert_argument("19.99", float) == 19.99
    with pytest.raises(ConversionError):
        convert_argument("many", int)


@pytest.mark.parametrize("text,expected", [("0xFF", 255), ("0X1A2B", 0x1A2B), ("0xDEAD", 0xDEAD)])
def test_hex_ints(text, expected):
    assert convert_argument(text, int) == expected


@pytest.mark.parametrize("text,expected", [("50%", 0.50), ("99.9%", 0.999), ("-10%", -0.10), ("100%", 1.0)])
def test_percent(text, expected):
    assert convert_argument(text, float) == pytest.approx(expected, abs=0.0001)


@pytest.mark.parametrize("text", ["12345678901234567890", "-99999999999999999999", "0"])
def test_big_ints(text):
    assert convert_argument(text, int) == int(text)


def test_custom_string_type():
    result = convert_argument("red", Color, COLORS)
    assert result == "red" and isinstance(result, Color)
    for text, expected in [("RED", "red"), ("Red", "red"), ("rEd", "red"), ("BLUE", "blue"), ("Blue", "blue")]:
        assert convert_argument(text, Color, COLORS) == expected


def test_custom_type_rejects_invalid():
    with pytest.raises(ConversionError) as info:
        convert_argument("purple", Color, COLORS)
    assert "invalid Color" in str(info.value)
    assert "purple" in str(info.value)


def test_custom_int_type():
    assert convert_argument("high", Priority, PRIORITIES) == Priority(3)
    assert convert_argument("2", Priority, PRIORITIES) == Priority(2)
    assert convert_argument("MEDIUM", Priority, PRIORITIES) == 2


def test_custom_type_without_registration():
    assert convert_argument("anything", Color) == Color("anything")


def test_allowed_values_list_dedupes():
    info = PRIORITIES["Priority"]
    assert sorted(info.allowed_values_list()) == ["1", "2", "3"]


def test_times():
    t = convert_argument("14:30", datetime)
    assert (t.year, t.hour, t.minute) == (1, 14, 30)
    t = parse_time("14:30:45")
    assert (t.hour, t.minute, t.second) == (14, 30, 45)
    t = parse_time("2:30pm")
    assert (t.hour, t.minute) == (14, 30)
    t = parse_time("14:30Z")
    assert t.hour == 14 and t.tzname() == "UTC"
    t = parse_time("14:30+05:30")
    assert t.utcoffset() == timedelta(hours=5, minutes=30)
    t = parse_time("14:30 Europe/London")
    assert t.hour == 14 and t.tzinfo.key == "Europe/London"


@pytest.mark.parametrize("text", ["2024-01-15", "15/01/2024", "15.01.2024", "15 Jan 2024", "Jan 15, 2024"])
def test_dates(text):
    d = convert_argument(text, datetime)
    assert (d.year, d.month, d.day, d.hour, d.minute) == (2024, 1, 15, 0, 0)
    assert parse_date(text) == d


def test_datetimes():
    dt = convert_argument("2024-01-15 14:30", datetime)
    assert (dt.year, dt.month, dt.day, dt.hour, dt.minute) == (2024, 1, 15, 14, 30)
    dt = parse_datetime("2024-01-15T14:30:45")
    assert (dt.day, dt.hour, dt.minute, dt.second) == (15, 14, 30, 45)
    dt = parse_datetime("2024-01-15T14:30:00Z")
    assert dt.hour == 14 and dt.tzname() == "UTC"
    dt = parse_datetime("2024-01-15T14:30:00+05:30")
    assert dt.utcoffset() == timedelta(hours=5, minutes=30)
    dt = parse_datetime("2024-01-15 14:30 Europe/London")
    assert dt.tzinfo.key == "Europe/London"
    dt = parse_datetime("15/01/2024 14:30")
    assert (dt.month, dt.day, dt.hour) == (1, 15, 14)
    dt = parse_datetime("2024-01-15 2:30pm")
    assert (dt.hour, dt.minute) == (14, 30)


def test_datetime_without_separator_fails():
    with pytest.raises(ConversionError):
        parse_datetime("2024-01-15")


def test_extract_timezone_without_zone():
    assert extract_timezone("2024-01-15 14:30") == ("2024-01-15 14:30", None)


def test_timezones():
    assert convert_argument("Z", tzinfo).tzname(None) == "UTC"
    assert parse_timezone("UTC").tzname(None) == "UTC"
    assert parse_timezone("+05:30").utcoffset(None) == timedelta(hours=5, minutes=30)
    assert parse_timezone("-08:00").utcoffset(None) == timedelta(hours=-8)
    assert parse_timezone("+0530").utcoffset(None) == timedelta(hours=5, minutes=30)
    for name in ["Europe/London", "America/New_York", "Asia/Tokyo"]:
        assert parse_timezone(name).key == name
    with pytest.raises(ConversionError):
        parse_timezone("Nowhere/Land")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("5s", timedelta(seconds=5)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("500ms", timedelta(milliseconds=500)),
        ("-30m", timedelta(minutes=-30)),
        ("2h45m30s", timedelta(hours=2, minutes=45, seconds=30)),
        ("100ns", timedelta(microseconds=0.1)),
    ],
)
def test_durations(text, expected):
    assert parse_duration(text) == expected
    assert convert_argument(text, timedelta) == expected


@pytest.mark.parametrize("text", ["", "5", "5x", "h"])
def test_bad_durations(text):
    with pytest.raises(ConversionError):
        parse_duration(text)


def test_urls():
    u = convert_argument("http://example.com", SplitResult)
    assert (u.scheme, u.netloc) == ("http", "example.com")
    u = convert_argument("https://api.example.com/users", SplitResult)
    assert (u.scheme, u.netloc, u.path) == ("https", "api.example.com", "/users")
    u = convert_argument("https://example.com/search?q=test&page=1", SplitResult)
    assert (u.path, u.query) == ("/search", "q=test&page=1")
    u = convert_argument("http://localhost:8080/api", SplitResult)
    assert (u.netloc, u.path) == ("localhost:8080", "/api")
    u = convert_argument("https://example.com/page#section", SplitResult)
    assert (u.path, u.fragment) == ("/page", "section")


def test_ip_addresses():
    assert str(convert_argument("192.168.1.1", IPv4Address)) == "192.168.1.1"
    assert str(convert_argument("127.0.0.1", IPv4Address)) == "127.0.0.1"
    assert str(convert_argument("::1", IPv6Address)) == "::1"
    with pytest.raises(ConversionError, match="cannot parse"):
        convert_argument("not-an-ip", IPv4Address)


@pytest.mark.parametrize("raw", [b"Hello", b"Hello World", b"test"])
def test_base64(raw):
    assert convert_argument(base64.b64encode(raw).decode(), bytes) == raw


def test_csv():
    assert convert_argument("foo,bar,baz", list) == ["foo", "bar", "baz"]
    assert convert_argument("1,2,3", list) == ["1", "2", "3"]
    assert convert_argument("key,value", list) == ["key", "value"]


def test_regex():
    pattern = convert_argument("/^hello.*$/", re.Pattern)
    assert pattern.search("hello world")
    assert not pattern.search("world hello")
    digits = convert_argument(r"/\d+/", re.Pattern)
    assert digits.search("123")
    assert not digits.search("abc")
    with pytest.raises(ConversionError, match="cannot parse"):
        convert_argument("/[invalid/", re.Pattern)


def test_unsupported_type():
    with pytest.raises(ConversionError, match="unsupported"):
        convert_argument("x", dict)