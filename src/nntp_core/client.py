# File: src/nntp_core/client.py
"""
NNTP 客户端 (Client)

职责：
1. 资源组装：State + Connection + Config。
2. 命令分发：发送命令行，校验状态码，把多行响应交给分帧层。
3. 会话缓存：CAPABILITIES 与 Overview Schema 每个会话只协商一次。

所有操作都是同步阻塞的，同一时间只有一个未完成的请求。
返回惰性迭代器的命令在迭代器读完之前会占用连接，
期间发出新命令会抛出 ProtocolViolation (可调用 drain() 丢弃剩余行)。
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import replace

from .config import NntpConfig
from .exceptions import (
    AuthError,
    ConfigError,
    NntpError,
    ProtocolViolation,
    ReplyError,
    TransportError,
)
from .framing import LineFramer, open_compressed_stream
from .network import NntpConnection
from .protocols import (
    Group,
    OverviewField,
    OverviewRecord,
    check_code,
    constants,
    dot_stuff,
    parse_group_reply,
    parse_list_line,
    parse_overview_format,
    parse_overview_line,
    parse_status_line,
)
from .protocols.constants import Reply
from .state import ClientStatus, SessionState

logger = logging.getLogger(__name__)


class NntpClient:
    """同步 NNTP 客户端。"""

    def __init__(
        self,
        config: NntpConfig,
        connection: NntpConnection | None = None,
    ) -> None:
        """初始化客户端。

        Args:
            config: 全局配置对象。
            connection: 可选的连接对象，缺省时按配置创建 NntpConnection。
        """
        self.config = config
        self.conn = connection if connection is not None else NntpConnection(config)
        self._state = SessionState()
        self._active: LineFramer | None = None

    @property
    def state(self) -> SessionState:
        """获取当前会话状态的副本，修改它不会影响客户端内部状态。"""
        state = self._state
        return replace(
            state,
            capabilities=None if state.capabilities is None else list(state.capabilities),
            overview_format=None
            if state.overview_format is None
            else list(state.overview_format),
        )

    @property
    def banner(self) -> str:
        return self._state.banner

    # ------------------------------------------------------------------
    # 连接生命周期
    # ------------------------------------------------------------------

    def connect(self) -> str:
        """建立连接并读取欢迎横幅。

        配置了用户名时自动认证，配置了 compression 时自动启用压缩。

        Returns:
            str: 欢迎横幅文本。

        Raises:
            TransportError: 连接失败。
            ReplyError: 欢迎码不是 200/201。
            AuthError: 认证被拒绝。
        """
        if self._state.is_connected:
            logger.warning("当前已连接，跳过 connect()")
            return self._state.banner

        if not self.conn.is_open:
            self.conn.connect()

        try:
            code, message = self._read_status()
            if code not in (Reply.POSTING_ALLOWED, Reply.POSTING_PROHIBITED):
                raise ReplyError(code, message, Reply.POSTING_ALLOWED)

            self._state = SessionState(
                status=ClientStatus.CONNECTED,
                banner=message,
                posting_allowed=code == Reply.POSTING_ALLOWED,
            )
            self._active = None
            logger.info(f"已连接 {self.config.host}:{self.config.port}: {message}")

            if self.config.username:
                self.authenticate()
            if self.config.compression:
                self.enable_compression()
        except NntpError:
            # 握手未完成，__exit__ 不会被调用，这里负责释放连接
            self.conn.close()
            self._active = None
            self._state.status = ClientStatus.CLOSED
            raise
        return message

    def quit(self) -> str:
        """发送 QUIT 并关闭连接。

        Returns:
            str: 服务器的告别文本。

        Raises:
            ReplyError: 状态码不是 205。
            ProtocolViolation: 上一个多行响应尚未读完。
            TransportError: 读写失败。
        """
        try:
            _, message = self.command("QUIT", Reply.QUIT)
        finally:
            self.conn.close()
            self._active = None
            self._state.status = ClientStatus.CLOSED
        logger.info(f"已断开 {self.config.host}: {message}")
        return message

    def close(self) -> None:
        """尽力发送 QUIT 后关闭连接。QUIT 失败只记录警告。"""
        if self._state.is_connected and self.conn.is_open:
            if self._active is None or self._active.done:
                try:
                    self.quit()
                except NntpError as e:
                    logger.warning(f"QUIT 失败: {e}")
            else:
                logger.debug("仍有未读完的响应，直接关闭连接")
        self.conn.close()
        self._active = None
        self._state.status = ClientStatus.CLOSED

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # 底层命令
    # ------------------------------------------------------------------

    def _read_status(self) -> tuple[int, str]:
        raw = self.conn.readline()
        if not raw:
            raise TransportError("连接已被服务器关闭")
        line = raw.decode(self.config.encoding, errors="replace").rstrip("\r\n")
        logger.debug(f"<<< {line}")
        return parse_status_line(line)

    def _send(self, line: str, shown: str | None = None) -> None:
        if self._active is not None and not self._active.done:
            raise ProtocolViolation("上一个多行响应尚未读完，不能发送新命令")
        self._active = None
        logger.debug(f">>> {shown if shown is not None else line}")
        self.conn.write_line(line)

    def command(self, line: str, expect: int = -1) -> tuple[int, str]:
        """发送一条命令并读取状态行。

        Args:
            line: 命令文本 (不含 CRLF)。
            expect: 期望的状态码。3 位数要求完全相等，1-2 位数按前缀匹配，
                -1 表示不校验。

        Returns:
            tuple[int, str]: (状态码, 状态码之后的文本)。

        Raises:
            ReplyError: 状态码不符合期望。
            ProtocolViolation: 状态行格式非法，或上一个多行响应尚未读完。
            TransportError: 读写失败。
        """
        self._send(line)
        code, message = self._read_status()
        check_code(code, message, expect)
        return code, message

    def _open_lines(self, stuffed: bool = True) -> LineFramer:
        framer = LineFramer(self.conn, stuffed=stuffed, encoding=self.config.encoding)
        self._active = framer
        return framer

    def _open_compressed_lines(self) -> LineFramer:
        stream = open_compressed_stream(self.conn, chunk_size=self.config.read_chunk_size)
        # 压缩通道内的行不做转义，解压流读完即响应结束
        return LineFramer(
            stream, stuffed=False, eof_is_end=True, encoding=self.config.encoding
        )

    def drain(self) -> int:
        """丢弃当前多行响应的剩余行，返回丢弃的行数。"""
        if self._active is None or self._active.done:
            return 0
        count = self._active.drain()
        logger.debug(f"丢弃了 {count} 行未读取的响应")
        return count

    # ------------------------------------------------------------------
    # 会话命令
    # ------------------------------------------------------------------

    def capabilities(self) -> list[str]:
        """查询 CAPABILITIES，结果在会话内缓存。"""
        if self._state.capabilities is None:
            self.command("CAPABILITIES", Reply.CAPABILITIES)
            self._state.capabilities = list(self._open_lines())
        return list(self._state.capabilities)

    def authenticate(self, username: str | None = None, password: str | None = None) -> str:
        """AUTHINFO USER/PASS 认证。

        Args:
            username: 用户名，缺省使用配置中的值。
            password: 密码，缺省使用配置中的值。

        Returns:
            str: 服务器的认证成功消息。

        Raises:
            ConfigError: 未提供用户名。
            AuthError: 认证被拒绝。
        """
        username = username if username is not None else self.config.username
        password = password if password is not None else self.config.password
        if not username:
            raise ConfigError("认证需要用户名")

        self._send(f"AUTHINFO USER {username}")
        code, message = self._read_status()
        if code == Reply.PASSWORD_REQUIRED:
            self._send(f"AUTHINFO PASS {password}", shown="AUTHINFO PASS ******")
            code, message = self._read_status()
            expected = Reply.AUTH_ACCEPTED
        else:
            expected = Reply.PASSWORD_REQUIRED

        if code != Reply.AUTH_ACCEPTED:
            raise AuthError(code, message, expected)

        self._state.status = ClientStatus.AUTHENTICATED
        logger.info(f"认证成功 (User: {username})")
        return message

    def enable_compression(self) -> None:
        """启用 XFEATURE COMPRESS GZIP，之后的 XOVER 响应通过压缩信封传输。"""
        self.command("XFEATURE COMPRESS GZIP", Reply.COMPRESS_ENABLED)
        self._state.compression = True
        logger.info("已启用 XOVER 压缩")

    def list_groups(self, keyword: str = "ACTIVE", wildmat: str | None = None) -> list[Group]:
        """LIST ACTIVE，无法解析的行会被跳过。"""
        line = f"LIST {keyword}" if wildmat is None else f"LIST {keyword} {wildmat}"
        self.command(line, Reply.LIST_FOLLOWS)
        groups = []
        for text in self._open_lines():
            group = parse_list_line(text)
            if group is None:
                logger.warning(f"跳过无法解析的 LIST 行: {text!r}")
                continue
            groups.append(group)
        return groups

    def group(self, name: str) -> Group:
        """选中新闻组。"""
        _, message = self.command(f"GROUP {name}", Reply.GROUP_SELECTED)
        group = parse_group_reply(message)
        self._state.current_group = group.name
        return group

    # ------------------------------------------------------------------
    # 文章
    # ------------------------------------------------------------------

    def _articleish(self, verb: str, specifier: str, expect: int) -> tuple[int, str, Iterator[str]]:
        _, message = self.command(f"{verb} {specifier}", expect)
        parts = message.split()
        try:
            number = int(parts[0])
        except (IndexError, ValueError):
            # 响应后面仍跟着多行正文，先标记为未读完，由调用方决定是否 drain()
            self._open_lines()
            raise ProtocolViolation(f"无法解析 {verb} 响应: {message!r}") from None
        message_id = parts[1] if len(parts) > 1 else ""
        return number, message_id, iter(self._open_lines())

    def article(self, specifier: str) -> tuple[int, str, Iterator[str]]:
        """获取整篇文章 (头部 + 空行 + 正文)。

        Returns:
            tuple: (文章编号, Message-ID, 惰性的文本行迭代器)。
        """
        return self._articleish("ARTICLE", specifier, Reply.ARTICLE_FOLLOWS)

    def head(self, specifier: str) -> tuple[int, str, Iterator[str]]:
        """获取文章头部。"""
        return self._articleish("HEAD", specifier, Reply.HEAD_FOLLOWS)

    def body(self, specifier: str) -> tuple[int, str, Iterator[str]]:
        """获取文章正文。"""
        return self._articleish("BODY", specifier, Reply.BODY_FOLLOWS)

    def post(self, article: str | Iterable[str]) -> str:
        """发帖。article 需包含完整的头部与正文 (RFC 5322 格式)。

        Returns:
            str: 服务器的发帖成功消息。
        """
        self.command("POST", Reply.SEND_ARTICLE)
        lines = article.splitlines() if isinstance(article, str) else article
        for line in dot_stuff(lines):
            self.conn.write_line(line)
        self.conn.write_line(constants.MARKER)
        code, message = self._read_status()
        check_code(code, message, Reply.POST_OK)
        return message

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------

    def overview_format(self, refresh: bool = False) -> list[OverviewField]:
        """协商 Overview Schema (LIST OVERVIEW.FMT)。

        结果在会话内缓存，refresh=True 时重新协商。
        """
        if refresh or self._state.overview_format is None:
            self.command("LIST OVERVIEW.FMT", Reply.LIST_FOLLOWS)
            schema = parse_overview_format(self._open_lines())
            self._state.overview_format = schema
            logger.info(f"Overview Schema: {[tag.value for tag in schema]}")
        return list(self._state.overview_format)

    @staticmethod
    def _range(start: int, end: int | None) -> str:
        return f"{start}-" if end is None else f"{start}-{end}"

    def _records(
        self, lines: Iterable[str], schema: list[OverviewField]
    ) -> Iterator[OverviewRecord]:
        for line in lines:
            yield parse_overview_line(line, schema)

    def over(self, start: int, end: int | None = None) -> Iterator[OverviewRecord]:
        """OVER start-end，返回惰性的 OverviewRecord 迭代器。

        单条记录解析失败时迭代器抛出 MalformedIdentifier / FieldParseError 并终止，
        剩余的行可通过 drain() 丢弃。
        """
        schema = self.overview_format()
        self.command(f"OVER {self._range(start, end)}", Reply.OVERVIEW_FOLLOWS)
        return self._records(self._open_lines(), schema)

    def xover(self, start: int, end: int | None = None) -> Iterator[OverviewRecord]:
        """XOVER start-end。已启用压缩时通过压缩信封读取。"""
        schema = self.overview_format()
        self.command(f"XOVER {self._range(start, end)}", Reply.OVERVIEW_FOLLOWS)
        if self._state.compression:
            return self._records(self._open_compressed_lines(), schema)
        return self._records(self._open_lines(), schema)
