# File: src/nntp_core/exceptions.py
"""
NNTP 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用能区分“传输失败”、“响应被截断”
和“单条记录损坏”等不同性质的错误。
"""


class NntpError(Exception):
    """NNTP 核心库所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 nntp-core 抛出的已知错误。
    """

    pass


class ConfigError(NntpError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host)。
    2. 字段格式错误 (如端口不是整数)。
    3. 找不到配置文件或环境变量。
    """

    pass


class TransportError(NntpError):
    """底层读写失败 (I/O 级别)。

    触发场景:
    1. Socket 连接、发送或接收失败 (含读超时)。
    2. 读取压缩信封时，在见到结束标记之前遇到 EOF。

    不做任何重试，直接向上抛出。
    """

    pass


class DecompressionError(NntpError):
    """压缩信封中的数据不是合法的 zlib 流 (头部错误、数据块损坏或缺少校验尾)。"""

    pass


class ProtocolViolation(NntpError):
    """分帧约束被破坏。

    触发场景:
    1. 多行响应已经结束后仍继续读取 (调用方误用)。
    2. 状态行格式非法 (不是 3 位数字开头)。
    3. GROUP 等单行响应无法解析。
    """

    pass


class UnexpectedEndOfResponse(NntpError):
    """数据流在出现单独的结束行之前就结束了。

    与正常结束区分开，调用方据此判断响应是“被截断”还是“已完整”。
    """

    pass


class RecordError(NntpError):
    """单条 Overview 记录解析失败。

    只影响当前这一行，不会破坏分帧状态；剩余的行仍可由调用方继续读取。
    """

    pass


class MalformedIdentifier(RecordError):
    """记录首字段 (文章编号) 不是无符号整数。"""

    def __init__(self, text: str) -> None:
        super().__init__(f"文章编号无效: {text!r}")
        self.text = text


class FieldParseError(RecordError):
    """Schema 中某个字段的原始文本无法按其类型解析。"""

    def __init__(self, field: object, position: int, text: str) -> None:
        """初始化字段解析错误。

        Args:
            field: 出错字段对应的 OverviewField。
            position: 字段在行内的位置 (1 起，编号字段为 0)。
            text: 原始文本。
        """
        name = getattr(field, "value", field)
        super().__init__(f"字段 {name} (位置 {position}) 解析失败: {text!r}")
        self.field = field
        self.position = position
        self.text = text


class ReplyError(NntpError):
    """服务器返回了非预期的状态码。"""

    def __init__(self, code: int, message: str, expected: int | None = None) -> None:
        """初始化响应码错误。

        Args:
            code: 服务器返回的状态码。
            message: 状态行中状态码之后的文本。
            expected: 调用方期望的状态码 (或前缀)。
        """
        text = f"{code} {message}".rstrip()
        if expected is not None:
            text = f"期望 {expected}，实际收到: {text}"
        super().__init__(text)
        self.code = code
        self.message = message
        self.expected = expected


class AuthError(ReplyError):
    """AUTHINFO 认证被服务器拒绝。

    这通常意味着用户名或密码错误，需要用户干预。
    """

    pass
