"""Conversion of captured step arguments to typed Python values."""

from __future__ import annotations

import base64
import binascii
import ipaddress
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from fractions import Fraction
from typing import Any, Mapping, Optional
from urllib.parse import ParseResult, SplitResult, urlparse, urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ConversionError(ValueError):
    """Raised when an argument cannot be converted to the requested type."""


@dataclass
class CustomTypeInfo:
    """Allowed values of a named custom type; keys are lower-cased names or values."""

    name: str
    underlying: str
    allowed_values: dict[str, str] = field(default_factory=dict)

    def allowed_values_list(self) -> list[str]:
        return list(dict.fromkeys(self.allowed_values.values()))


_TZ_OFFSET = re.compile(r"([+-])(\d{2}):?(\d{2})", re.ASCII)
_CLOCK_24 = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?", re.ASCII)
_CLOCK_12 = re.compile(
    r"(\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)? ?(am|pm|AM|PM)", re.ASCII
)
_DATE_EU = re.compile(r"(\d{1,2})([/.-])(\d{1,2})\2(\d{4})", re.ASCII)
_DATE_ISO = re.compile(r"(\d{4})([-/])(\d{2})\2(\d{2})", re.ASCII)
_DATE_DMY = re.compile(r"(\d{1,2}) ([A-Za-z]+) (\d{4})", re.ASCII)
_DATE_MDY = re.compile(r"([A-Za-z]+) (\d{1,2}), (\d{4})", re.ASCII)
_DURATION_PART = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]+)", re.ASCII)
_DECIMAL_INT = re.compile(r"[+-]?\d+", re.ASCII)
_OCTAL_INT = re.compile(r"([+-]?)0([0-7_]+)", re.ASCII)

_MONTH_NAMES = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]
_MONTHS = {name: i for i, name in enumerate(_MONTH_NAMES, 1)}
_MONTHS.update({name[:3]: i for i, name in enumerate(_MONTH_NAMES, 1)})

_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_MAX_DURATION_NS = (1 << 63) - 1

_TRUTHY = {"true", "yes", "on", "enabled", "1", "t"}
_FALSY = {"false", "no", "off", "disabled", "0", "f"}


def parse_bool(s: str) -> bool:
    """Parse human-readable booleans such as yes/no, on/off, enabled/disabled."""
    lowered = s.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConversionError(f"cannot parse {s!r} as bool")


def _load_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ConversionError(f"unknown timezone {name!r}: {exc}") from exc


def parse_timezone(s: str) -> tzinfo:
    """Parse ``Z``, ``UTC``, ``+05:30``/``-0800`` offsets or IANA zone names."""
    s = s.strip()
    if s in ("Z", "UTC", ""):
        return timezone.utc
    match = _TZ_OFFSET.fullmatch(s)
    if match:
        sign = -1 if match.group(1) == "-" else 1
        seconds = sign * (int(match.group(2)) * 3600 + int(match.group(3)) * 60)
        if abs(seconds) >= 86400:
            raise ConversionError(f"timezone offset out of range: {s!r}")
        return timezone(timedelta(seconds=seconds), s)
    return _load_zone(s)


def extract_timezone(s: str) -> tuple[str, Optional[tzinfo]]:
    """Split a trailing timezone off a string; ``None`` means local time."""
    s = s.strip()
    if s.endswith("Z"):
        return s[:-1], timezone.utc
    if s.endswith("UTC"):
        return s.removesuffix(" UTC").removesuffix("UTC"), timezone.utc

    parts = s.split(" ")
    last = parts[-1]
    if len(parts) >= 2 and "/" in last:
        try:
            return s.removesuffix(" " + last), _load_zone(last)
        except ConversionError:
            pass
    if len(last) >= 5 and last[0] in "+-":
        try:
            zone = parse_timezone(last)
        except ConversionError:
            pass
        else:
            return s.removesuffix(last).removesuffix(" "), zone

    pos = max(s.rfind("+"), s.rfind("-"))
    if pos >= 0:
        try:
            return s[:pos], parse_timezone(s[pos:])
        except ConversionError:
            pass
    return s, None


def _parse_clock(s: str) -> Optional[tuple[int, int, int, int]]:
    match = _CLOCK_24.fullmatch(s)
    meridiem = None
    if match is None:
        match = _CLOCK_12.fullmatch(s)
        if match is None:
            return None
        meridiem = match.group(5).lower()
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    micro = int((match.group(4) or "").ljust(6, "0")[:6] or 0)
    if minute >= 60 or second >= 60:
        return None
    if meridiem is None:
        if hour >= 24:
            return None
    else:
        if hour > 12:
            return None
        if meridiem == "pm" and hour < 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
    return hour, minute, second, micro


def _parse_calendar(s: str) -> Optional[date]:
    candidates = []
    if m := _DATE_EU.fullmatch(s):
        candidates.append((m.group(4), m.group(3), m.group(1)))
    if m := _DATE_ISO.fullmatch(s):
        candidates.append((m.group(1), m.group(3), m.group(4)))
    if m := _DATE_DMY.fullmatch(s):
        candidates.append((m.group(3), _MONTHS.get(m.group(2).lower()), m.group(1)))
    if m := _DATE_MDY.fullmatch(s):
        candidates.append((m.group(3), _MONTHS.get(m.group(1).lower()), m.group(2)))
    for year, month, day in candidates:
        if month is None:
            continue
        try:
            return date(int(year), int(month), int(day))
        except ValueError:
            continue
    return None


def parse_time(s: str) -> datetime:
    """Parse a clock time; the result carries the zero date 0001-01-01."""
    text, zone = extract_timezone(s)
    clock = _parse_clock(text.strip())
    if clock is None:
        raise ConversionError(f"cannot parse {s!r} as time")
    hour, minute, second, micro = clock
    return datetime(1, 1, 1, hour, minute, second, micro, tzinfo=zone)


def parse_date(s: str) -> datetime:
    """Parse a date (day-first numeric, ISO or written) at local midnight."""
    day = _parse_calendar(s.strip())
    if day is None:
        raise ConversionError(f"cannot parse {s!r} as date")
    return datetime(day.year, day.month, day.day)


def parse_datetime(s: str) -> datetime:
    """Parse a date and a time separated by ``T`` or a space, with optional timezone."""
    text, zone = extract_timezone(s)
    text = text.strip()
    if "T" in text:
        date_part, _, time_part = text.partition("T")
    elif " " in text:
        spaces = (i for i in range(len(text) - 1, -1, -1) if text[i] == " ")
        split = next((i for i in spaces if ":" in text[i + 1:]), None)
        if split:
            date_part, time_part = text[:split], text[split + 1:]
        else:
            date_part, _, time_part = text.rpartition(" ")
    else:
        raise ConversionError(f"cannot parse {s!r} as datetime: no separator found")

    day = _parse_calendar(date_part)
    if day is None:
        raise ConversionError(f"cannot parse date part {date_part!r}")
    clock = _parse_clock(time_part)
    if clock is None:
        raise ConversionError(f"cannot parse time part {time_part!r}")
    hour, minute, second, micro = clock
    return datetime(day.year, day.month, day.day, hour, minute, second, micro, tzinfo=zone)


def parse_duration(s: str) -> timedelta:
    """Parse durations like ``1h30m``, ``500ms`` or ``-2.5s``."""
    rest = s
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ConversionError(f"invalid duration {s!r}")
    total = Fraction(0)
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if match is None or not (match.group(1) or match.group(2)):
            raise ConversionError(f"invalid duration {s!r}")
        unit = _DURATION_UNITS.get(match.group(3))
        if unit is None:
            raise ConversionError(f"unknown unit {match.group(3)!r} in duration {s!r}")
        value = Fraction(int(match.group(1) or 0))
        if match.group(2):
            value += Fraction(int(match.group(2)), 10 ** len(match.group(2)))
        total += value * unit
        pos = match.end()
    if total > _MAX_DURATION_NS:
        raise ConversionError(f"invalid duration {s!r}")
    micros = round(total / 1000)
    return timedelta(microseconds=-micros if negative else micros)


def _parse_int(s: str) -> int:
    if s != s.strip() or not s:
        raise ConversionError(f"cannot parse {s!r} as int")
    octal = _OCTAL_INT.fullmatch(s)
    try:
        if octal:
            value = int(octal.group(2), 8)
            return -value if octal.group(1) == "-" else value
        return int(s, 0)
    except ValueError as exc:
        raise ConversionError(f"cannot parse {s!r} as int") from exc


def _parse_float(s: str) -> float:
    if s != s.strip() or not s or "_" in s:
        raise ConversionError(f"cannot parse {s!r} as float")
    try:
        return float(s)
    except ValueError:
        pass
    try:
        return float.fromhex(s)
    except ValueError as exc:
        raise ConversionError(f"cannot parse {s!r} as float") from exc


def _parse_float_or_percent(s: str) -> float:
    try:
        return _parse_float(s)
    except ConversionError:
        if s.endswith("%"):
            try:
                return _parse_float(s[:-1]) / 100
            except ConversionError:
                pass
        raise


def _convert_custom(arg: str, target: type, custom_types: Mapping[str, CustomTypeInfo]) -> Any:
    name = target.__name__
    value = arg
    info = custom_types.get(name)
    if info is not None:
        resolved = info.allowed_values.get(arg.lower())
        if resolved is None:
            raise ConversionError(
                f"invalid {name}: {arg!r} (allowed: {info.allowed_values_list()})"
            )
        value = resolved
    if issubclass(target, str):
        return target(value)
    if issubclass(target, int):
        if not _DECIMAL_INT.fullmatch(value):
            raise ConversionError(f"cannot parse {value!r} as {name}")
        return target(int(value))
    return target(_parse_float(value))


def convert_argument(arg: str, target: Any, custom_types: Optional[Mapping[str, CustomTypeInfo]] = None) -> Any:
    """Convert a captured string to the type named by ``target``."""
    if not isinstance(target, type):
        raise ConversionError(f"unsupported parameter type: {target!r}")
    if target is datetime:
        for parser in (parse_datetime, parse_date, parse_time):
            try:
                return parser(arg)
            except ConversionError:
                continue
        raise ConversionError(f"cannot parse {arg!r} as datetime")
    if issubclass(target, tzinfo):
        return parse_timezone(arg)
    if target is timedelta:
        return parse_duration(arg)
    if target in (SplitResult, ParseResult):
        try:
            return urlsplit(arg) if target is SplitResult else urlparse(arg)
        except ValueError as exc:
            raise ConversionError(f"cannot parse {arg!r} as URL: {exc}") from exc
    if target in (ipaddress.IPv4Address, ipaddress.IPv6Address):
        try:
            return ipaddress.ip_address(arg)
        except ValueError as exc:
            raise ConversionError(f"cannot parse {arg!r} as IP address") from exc
    if target is bytes:
        try:
            return base64.b64decode(arg, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConversionError(f"cannot parse {arg!r} as base64 bytes: {exc}") from exc
    if target is list:
        return arg.split(",")
    if target is re.Pattern:
        pattern = arg[1:-1] if len(arg) >= 2 and arg[0] == "/" and arg[-1] == "/" else arg
        try:
            return re.compile(pattern)
        except re.error as exc:
            raise ConversionError(f"cannot parse {arg!r} as regular expression: {exc}") from exc
    if target not in (str, int, float, bool) and issubclass(target, (str, int, float)):
        return _convert_custom(arg, target, custom_types or {})
    if target is str:
        return arg
    if target is bool:
        return parse_bool(arg)
    if target is int:
        return _parse_int(arg)
    if target is float:
        return _parse_float_or_percent(arg)
    raise ConversionError(f"unsupported parameter type: {target.__name__}")