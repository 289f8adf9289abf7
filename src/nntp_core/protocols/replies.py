# src/nntp_core/protocols/replies.py
"""
单行响应的解析与出站数据的构建。

- parse_status_line / check_code: 状态行 "224 Overview information follows"。
- parse_group_reply: GROUP 的 211 响应。
- parse_list_line: LIST ACTIVE 的一行。
- dot_stuff: POST 负载的 dot-stuffing。
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from ..exceptions import ProtocolViolation, ReplyError
from . import constants


class PostingStatus(Enum):
    """LIST ACTIVE 第四列的发帖权限。"""

    PERMITTED = "y"
    NOT_PERMITTED = "n"
    MODERATED = "m"

    @classmethod
    def from_flag(cls, flag: str) -> "PostingStatus":
        """未知标志一律视为不允许发帖。"""
        if flag == "y":
            return cls.PERMITTED
        if flag == "m":
            return cls.MODERATED
        return cls.NOT_PERMITTED


@dataclass
class Group:
    """新闻组信息。

    Attributes:
        name: 组名。
        low: 最小文章编号。
        high: 最大文章编号。
        count: 估计的文章数量 (仅 GROUP 响应提供)。
        posting: 发帖权限 (仅 LIST 响应提供)。
    """

    name: str
    low: int
    high: int
    count: int = 0
    posting: PostingStatus = PostingStatus.NOT_PERMITTED


def parse_status_line(line: str) -> tuple[int, str]:
    """把状态行拆成 (状态码, 文本)。

    Raises:
        ProtocolViolation: 行首不是 3 位数字。
    """
    code_text, _, message = line.partition(" ")
    if len(code_text) != 3 or not code_text.isdigit():
        raise ProtocolViolation(f"状态行格式非法: {line!r}")
    return int(code_text), message


def check_code(code: int, message: str, expected: int) -> None:
    """校验状态码。

    expected 为 3 位数时必须完全相等；为 1 或 2 位数时按前缀匹配
    (如 2 表示 200-299)；为 -1 时不做校验。

    Raises:
        ReplyError: 状态码不符合期望。
    """
    if expected < 0:
        return
    digits = len(str(expected))
    if digits >= 3:
        ok = code == expected
    else:
        ok = code // 10 ** (3 - digits) == expected
    if not ok:
        raise ReplyError(code, message, expected)


def parse_group_reply(message: str) -> Group:
    """解析 GROUP 的 211 响应文本: "count low high name"。

    Raises:
        ProtocolViolation: 字段数量不对或不是数字。
    """
    parts = message.split()
    if len(parts) < 4:
        raise ProtocolViolation(f"无法解析 GROUP 响应: {message!r}")
    try:
        count, low, high = (int(p) for p in parts[:3])
    except ValueError:
        raise ProtocolViolation(f"无法解析 GROUP 响应: {message!r}") from None
    return Group(name=parts[3], low=low, high=high, count=count)


def parse_list_line(line: str) -> Group | None:
    """解析 LIST ACTIVE 的一行: "name high low posting"。无法解析时返回 None。"""
    parts = line.split()
    if len(parts) < 4:
        return None
    try:
        high = int(parts[1])
        low = int(parts[2])
    except ValueError:
        return None
    return Group(
        name=parts[0],
        low=low,
        high=high,
        posting=PostingStatus.from_flag(parts[3]),
    )


def dot_stuff(lines: Iterable[str]) -> Iterator[str]:
    """为出站负载做 dot-stuffing: 以标记字符开头的行前面再补一个标记字符。

    只产出负载行，不包含结束行。
    """
    for line in lines:
        if line.startswith(constants.MARKER):
            yield constants.MARKER + line
        else:
            yield line
