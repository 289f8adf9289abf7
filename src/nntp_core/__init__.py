# src/nntp_core/__init__.py
"""
NNTP-Core v1.0.0
同步、阻塞式的 NNTP 客户端核心库：响应分帧、压缩信封解码与 Overview 记录解析。
"""

# 暴露核心配置
from .config import (
    NntpConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露客户端与状态
from .client import NntpClient

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthError,
    ConfigError,
    DecompressionError,
    FieldParseError,
    MalformedIdentifier,
    NntpError,
    ProtocolViolation,
    RecordError,
    ReplyError,
    TransportError,
    UnexpectedEndOfResponse,
)
from .framing import (
    LineFramer,
    TerminatorWindow,
    open_compressed_stream,
    read_compressed_envelope,
)
from .network import NntpConnection
from .protocols import Group, OverviewField, OverviewRecord, PostingStatus
from .state import ClientStatus, SessionState

__version__ = "1.0.0"

__all__ = [
    "NntpClient",
    "NntpConnection",
    "NntpConfig",
    "SessionState",
    "ClientStatus",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "TerminatorWindow",
    "LineFramer",
    "read_compressed_envelope",
    "open_compressed_stream",
    "OverviewField",
    "OverviewRecord",
    "Group",
    "PostingStatus",
    "NntpError",
    "ConfigError",
    "TransportError",
    "DecompressionError",
    "ProtocolViolation",
    "UnexpectedEndOfResponse",
    "RecordError",
    "MalformedIdentifier",
    "FieldParseError",
    "ReplyError",
    "AuthError",
]
