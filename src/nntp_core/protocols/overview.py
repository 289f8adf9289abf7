# src/nntp_core/protocols/overview.py
"""
Overview 摘要记录 (OVER / XOVER)

- parse_overview_format: 把 LIST OVERVIEW.FMT 返回的字段描述行映射为有序的字段标签。
- parse_overview_line: 按协商好的字段顺序，把一行 Tab 分隔文本解析为 OverviewRecord。

纯解析，不包含任何 socket 操作。
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..exceptions import FieldParseError, MalformedIdentifier
from ..utils import parse_timestamp, parse_uint
from . import constants

logger = logging.getLogger(__name__)


class OverviewField(Enum):
    """Overview Schema 中可识别的字段标签。"""

    SUBJECT = "subject"
    FROM = "from"
    DATE = "date"
    MESSAGE_ID = "message-id"
    REFERENCES = "references"
    BYTES = "bytes"
    LINES = "lines"
    XREF_FULL = "xref-full"
    UNKNOWN = "unknown"
    """服务器声明了本客户端不认识的扩展字段，解析时跳过该位置。"""


_HEADER_TAGS: dict[str, OverviewField] = {}
for _names, _tag in (
    (constants.HEADER_SUBJECT, OverviewField.SUBJECT),
    (constants.HEADER_FROM, OverviewField.FROM),
    (constants.HEADER_DATE, OverviewField.DATE),
    (constants.HEADER_MESSAGE_ID, OverviewField.MESSAGE_ID),
    (constants.HEADER_REFERENCES, OverviewField.REFERENCES),
    (constants.HEADER_BYTES, OverviewField.BYTES),
    (constants.HEADER_LINES, OverviewField.LINES),
    (constants.HEADER_XREF_FULL, OverviewField.XREF_FULL),
):
    for _name in _names:
        _HEADER_TAGS[_name] = _tag


@dataclass
class OverviewRecord:
    """一篇文章的 Overview 摘要。

    Schema 中缺席或原文为空的字段保持各自类型的零值。

    Attributes:
        article_id: 文章编号 (无符号 64 位)。
        subject: Subject 头部。
        author: From 头部。
        date: Date 头部解析后的时间，缺席时为 None。
        message_id: Message-ID 头部。
        references: References 头部。
        byte_count: 文章字节数 (:bytes)。
        line_count: 文章行数 (:lines)。
        xref: 完整的 Xref 头部 (Xref:full)。
    """

    article_id: int
    subject: str = ""
    author: str = ""
    date: datetime | None = None
    message_id: str = ""
    references: str = ""
    byte_count: int = 0
    line_count: int = 0
    xref: str = ""


def field_for_header(line: str) -> OverviewField:
    """把一行字段描述映射为字段标签，不认识的返回 OverviewField.UNKNOWN。"""
    return _HEADER_TAGS.get(line.strip(), OverviewField.UNKNOWN)


def parse_overview_format(lines: Iterable[str]) -> list[OverviewField]:
    """解析 LIST OVERVIEW.FMT 的多行响应。

    顺序保持不变；重复的标签各自保留 (解析记录时后写入者生效)。
    不认识的扩展字段以 UNKNOWN 占位，保证后续字段的位置不错位。

    Args:
        lines: 已去除 dot-stuffing 的字段描述行。

    Returns:
        list[OverviewField]: 有序的字段标签。
    """
    schema = []
    for line in lines:
        tag = field_for_header(line)
        if tag is OverviewField.UNKNOWN:
            logger.debug(f"忽略未知的 Overview 字段: {line!r}")
        schema.append(tag)
    return schema


def _apply_field(
    record: OverviewRecord, tag: OverviewField, position: int, text: str
) -> None:
    """按标签把一个字段的原文写入记录。"""
    try:
        match tag:
            case OverviewField.SUBJECT:
                record.subject = text
            case OverviewField.FROM:
                record.author = text
            case OverviewField.DATE:
                record.date = parse_timestamp(text) if text else None
            case OverviewField.MESSAGE_ID:
                record.message_id = text
            case OverviewField.REFERENCES:
                record.references = text
            case OverviewField.BYTES:
                record.byte_count = (
                    parse_uint(text, constants.MAX_FIELD_UINT) if text else 0
                )
            case OverviewField.LINES:
                record.line_count = (
                    parse_uint(text, constants.MAX_FIELD_UINT) if text else 0
                )
            case OverviewField.XREF_FULL:
                record.xref = text
            case OverviewField.UNKNOWN:
                # 未知字段只占位，其值直接跳过
                pass
    except ValueError as e:
        raise FieldParseError(tag, position, text) from e


def parse_overview_line(line: str, schema: Sequence[OverviewField]) -> OverviewRecord:
    """解析一行 Overview 数据。

    行内第一个字段是文章编号，之后第 i 个字段对应 schema[i - 1]。
    行比 schema 长时多余字段被忽略，行比 schema 短时缺少的字段保持零值。

    Args:
        line: 一行 Tab 分隔文本 (已去除 dot-stuffing)。
        schema: 协商得到的字段顺序。

    Returns:
        OverviewRecord: 解析结果。

    Raises:
        MalformedIdentifier: 文章编号不是无符号整数。
        FieldParseError: 某字段原文非空但无法按类型解析，整条记录作废。
    """
    items = line.split("\t")
    try:
        article_id = parse_uint(items[0], constants.MAX_ARTICLE_ID)
    except ValueError:
        raise MalformedIdentifier(items[0]) from None

    record = OverviewRecord(article_id=article_id)
    for position in range(1, min(len(items), len(schema) + 1)):
        _apply_field(record, schema[position - 1], position, items[position])
    return record
