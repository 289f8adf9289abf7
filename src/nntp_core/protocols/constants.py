# src/nntp_core/protocols/constants.py
"""
NNTP 协议常量表 (Constants)

仅定义协议的结构性常量 (结束标记、状态码、Overview 头部名称)。
"""

# =========================================================================
# 分帧 (Framing)
# =========================================================================
MARKER = "."  # 多行响应的结束标记字符，同时也是 dot-stuffing 的转义字符
CRLF = b"\r\n"
# 压缩信封的结束标记：标记字符 + CRLF，追加在压缩数据之后，本身不压缩
ENVELOPE_TERMINATOR = MARKER.encode("ascii") + CRLF

READ_CHUNK_SIZE = 1024


# =========================================================================
# 状态码 (Reply Codes)
# =========================================================================
class Reply:
    """各命令期望的成功状态码"""

    CAPABILITIES = 101
    POSTING_ALLOWED = 200
    POSTING_PROHIBITED = 201
    QUIT = 205
    GROUP_SELECTED = 211
    LIST_FOLLOWS = 215
    ARTICLE_FOLLOWS = 220
    HEAD_FOLLOWS = 221
    BODY_FOLLOWS = 222
    OVERVIEW_FOLLOWS = 224
    POST_OK = 240
    AUTH_ACCEPTED = 281
    COMPRESS_ENABLED = 290
    SEND_ARTICLE = 340
    PASSWORD_REQUIRED = 381


# =========================================================================
# Overview 头部名称 (LIST OVERVIEW.FMT)
# =========================================================================
HEADER_SUBJECT = ("Subject:",)
HEADER_FROM = ("From:",)
HEADER_DATE = ("Date:",)
HEADER_MESSAGE_ID = ("Message-ID:",)
HEADER_REFERENCES = ("References:",)
HEADER_BYTES = ("Bytes", "Bytes:", ":bytes")
HEADER_LINES = ("Lines", "Lines:", ":lines")
HEADER_XREF_FULL = ("Xref:full",)

# 无符号字段的上限
MAX_ARTICLE_ID = 2**64 - 1
MAX_FIELD_UINT = 2**32 - 1
