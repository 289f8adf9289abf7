# File: src/nntp_core/utils.py
"""
NNTP 核心库 - 通用解析工具

无符号整数与日期字符串的宽松解析。两者失败时都抛出 ValueError，
由调用方决定转换成何种领域异常。
"""

import re
from datetime import datetime

from dateutil import parser as date_parser

_DIGITS_RE = re.compile(r"[0-9]+")
# RFC 5322 日期末尾常见的注释，如 "(UTC)"
_TRAILING_COMMENT_RE = re.compile(r"\s*\([^()]*\)\s*$")


def parse_uint(text: str, maximum: int) -> int:
    """解析十进制无符号整数。

    只接受 ASCII 数字，不接受符号、空白或下划线分隔符
    (这些都是内置 int() 会放行的)。

    Args:
        text: 原始文本。
        maximum: 允许的最大值 (含)。

    Returns:
        int: 解析结果。

    Raises:
        ValueError: 文本不是纯数字或超出范围。
    """
    if not _DIGITS_RE.fullmatch(text):
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(text)
    if value > maximum:
        raise ValueError(f"value out of range: {text!r}")
    return value


def parse_timestamp(text: str) -> datetime:
    """尽力解析 Date 头部。

    新闻服务器返回的日期格式五花八门 (两位年份、时区缩写、附带注释等)，
    这里交给 dateutil 做启发式解析。

    Args:
        text: Date 字段原文，如 "Thu, 03 Jan 19 18:58:44 UTC"。

    Returns:
        datetime: 解析得到的时间，带时区信息时保留时区。

    Raises:
        ValueError: 无法识别为日期。
    """
    cleaned = _TRAILING_COMMENT_RE.sub("", text.strip())
    try:
        return date_parser.parse(cleaned)
    except (OverflowError, TypeError) as e:
        raise ValueError(f"unparseable date: {text!r}") from e
