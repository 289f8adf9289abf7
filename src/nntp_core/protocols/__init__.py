# src/nntp_core/protocols/__init__.py
"""
NNTP 协议层 (Protocol Layer)

本包负责协议文本的纯粹解析 (Parse) 与构建 (Build)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何会话状态 (State)。
- 不依赖于 client 或 network 层。
"""

from . import constants
from .overview import (
    OverviewField,
    OverviewRecord,
    field_for_header,
    parse_overview_format,
    parse_overview_line,
)
from .replies import (
    Group,
    PostingStatus,
    check_code,
    dot_stuff,
    parse_group_reply,
    parse_list_line,
    parse_status_line,
)

# 公共 API
__all__ = [
    "constants",
    "OverviewField",
    "OverviewRecord",
    "field_for_header",
    "parse_overview_format",
    "parse_overview_line",
    "Group",
    "PostingStatus",
    "check_code",
    "dot_stuff",
    "parse_group_reply",
    "parse_list_line",
    "parse_status_line",
]
