"""Human-readable formatting for play counts and file sizes."""

from typing import Union

Number = Union[int, float]

UNKNOWN = "未知"
UNKNOWN_SIZE = "未知大小"
UNKNOWN_RESOLUTION = "未知分辨率"

FILE_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]

_WAN = 10_000
_YI = 100_000_000


def format_play_count(count: Number) -> str:
    """Format a play count the way Chinese clients expect it.

    Values below 10,000 keep thousands separators, values from 10,000 are
    expressed in 万 (1e4) and values from 100,000,000 in 亿 (1e8), both with
    two decimals.

    >>> format_play_count(9999)
    '9,999'
    >>> format_play_count(12345)
    '1.23万'
    >>> format_play_count(100000000)
    '1.00亿'
    """
    value = float(count)

    if value < _WAN:
        return f"{int(value):,}"

    if value < _YI:
        return f"{value / _WAN:,.2f}万"

    return f"{value / _YI:,.2f}亿"


def format_file_size(size: Number, precision: int = 2) -> str:
    """Format a byte count with binary (1024) units, capped at TB.

    >>> format_file_size(0)
    '0 Bytes'
    >>> format_file_size(1536)
    '1.5 KB'
    """
    size = max(float(size), 0.0)
    if size == 0:
        return "0 Bytes"

    power = 0
    while power < len(FILE_SIZE_UNITS) - 1 and size >= 1024 ** (power + 1):
        power += 1
    value = round(size / (1024**power), precision)

    # 1.0 renders as "1"
    text = str(int(value)) if value == int(value) else str(value)
    return f"{text} {FILE_SIZE_UNITS[power]}"
