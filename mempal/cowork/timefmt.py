"""RFC 3339 timestamp parsing and formatting on the proleptic Gregorian calendar."""

from __future__ import annotations

SECONDS_PER_DAY = 86400

_SEPARATORS = tuple(b"--T::")
_SEPARATOR_POSITIONS = (4, 7, 10, 13, 16)


def days_to_ymd(days: int) -> tuple[int, int, int]:
    """Convert days since 1970-01-01 into ``(year, month, day)``."""
    days += 719468
    era = days // 146097
    doe = days - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    year = yoe + era * 400
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    if month <= 2:
        year += 1
    return year, month, day


def days_from_civil(year: int, month: int, day: int) -> int:
    """Convert a calendar date into days since 1970-01-01 (inverse of days_to_ymd)."""
    if month <= 2:
        year -= 1
    era = year // 400
    yoe = year - era * 400
    shifted_month = month - 3 if month > 2 else month + 9
    doy = (153 * shifted_month + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _parse_int(chunk: bytes, *, signed: bool = False) -> int | None:
    sign = 1
    if chunk[:1] == b"+":
        chunk = chunk[1:]
    elif signed and chunk[:1] == b"-":
        sign = -1
        chunk = chunk[1:]
    if not chunk or not all(0x30 <= byte <= 0x39 for byte in chunk):
        return None
    return sign * int(chunk)


def parse_rfc3339(text: str) -> int | None:
    """Parse ``YYYY-MM-DDTHH:MM:SS[.frac](Z|±HH:MM)`` into UTC epoch seconds.

    Fractional seconds are accepted and discarded. Returns ``None`` for any
    input that does not match exactly or names an impossible calendar date.
    """
    data = text.encode("utf-8")
    if len(data) < 20:
        return None
    if tuple(data[pos] for pos in _SEPARATOR_POSITIONS) != _SEPARATORS:
        return None

    year = _parse_int(data[0:4], signed=True)
    month = _parse_int(data[5:7])
    day = _parse_int(data[8:10])
    hour = _parse_int(data[11:13])
    minute = _parse_int(data[14:16])
    second = _parse_int(data[17:19])
    if None in (year, month, day, hour, minute, second):
        return None
    if not 1 <= month <= 12 or not 1 <= day <= 31 or hour > 23 or minute > 59 or second > 60:
        return None

    index = 19
    if index < len(data) and data[index] == ord("."):
        index += 1
        frac_start = index
        while index < len(data) and 0x30 <= data[index] <= 0x39:
            index += 1
        if index == frac_start:
            return None

    if index >= len(data):
        return None
    marker = data[index]
    if marker == ord("Z"):
        if index + 1 != len(data):
            return None
        offset = 0
    elif marker in (ord("+"), ord("-")):
        if index + 6 != len(data) or data[index + 3] != ord(":"):
            return None
        offset_hours = _parse_int(data[index + 1 : index + 3])
        offset_minutes = _parse_int(data[index + 4 : index + 6])
        if offset_hours is None or offset_minutes is None:
            return None
        if offset_hours > 23 or offset_minutes > 59:
            return None
        sign = 1 if marker == ord("+") else -1
        offset = sign * (offset_hours * 3600 + offset_minutes * 60)
    else:
        return None

    days = days_from_civil(year, month, day)
    if days_to_ymd(days) != (year, month, day):
        return None

    local = days * SECONDS_PER_DAY + hour * 3600 + minute * 60 + second
    return local - offset


def format_rfc3339(timestamp: float) -> str:
    """Format epoch seconds as an RFC 3339 UTC string with second precision.

    Instants before the epoch are clamped to the epoch.
    """
    secs = int(timestamp) if timestamp > 0 else 0
    days, sec_of_day = divmod(secs, SECONDS_PER_DAY)
    hour = sec_of_day // 3600
    minute = (sec_of_day // 60) % 60
    second = sec_of_day % 60
    year, month, day = days_to_ymd(days)
    return f"{year:04}-{month:02}-{day:02}T{hour:02}:{minute:02}:{second:02}Z"