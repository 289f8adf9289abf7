# src/nntp_core/network.py
"""
NNTP 核心库 - 网络模块 (Network)

封装 TCP / TLS 连接的建立、逐行写入与阻塞读取。
向上层提供两种读取方式：按行 (readline) 和按块 (read1)，
两者共享同一个缓冲区，因此可以在同一条连接上交替使用。

读取超时由 config.timeout 控制 (Socket 读超时)，超时表现为 TransportError。
"""

import logging
import socket
import ssl
from typing import BinaryIO

from .config import NntpConfig
from .exceptions import TransportError
from .protocols import constants

logger = logging.getLogger(__name__)


class NntpConnection:
    """阻塞式 NNTP 连接。

    一条连接同一时间只能有一个未完成的请求；多线程使用时必须由调用方串行化。
    """

    def __init__(self, config: NntpConfig):
        self.config = config
        self.sock: socket.socket | None = None
        self._reader: BinaryIO | None = None

    def connect(self) -> None:
        """建立 TCP 连接，按配置升级为 TLS。"""
        address = (self.config.host, self.config.port)
        try:
            sock = socket.create_connection(address, timeout=self.config.timeout)
        except OSError as e:
            raise TransportError(f"连接失败 {address}: {e}") from e

        if self.config.use_ssl:
            context = ssl.create_default_context()
            if not self.config.verify_ssl:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            try:
                sock = context.wrap_socket(sock, server_hostname=self.config.host)
            except OSError as e:
                sock.close()
                raise TransportError(f"TLS 握手失败 {address}: {e}") from e

        self.sock = sock
        self._reader = sock.makefile("rb")
        logger.debug(f"已连接 {address} (ssl={self.config.use_ssl})")

    @property
    def is_open(self) -> bool:
        return self.sock is not None

    def _require_reader(self) -> BinaryIO:
        if self._reader is None:
            raise TransportError("连接未建立")
        return self._reader

    def readline(self, size: int = -1, /) -> bytes:
        """读取一行 (含行尾)。EOF 时返回 b""。"""
        reader = self._require_reader()
        try:
            return reader.readline(size)
        except OSError as e:
            raise TransportError(f"接收失败: {e}") from e

    def read1(self, size: int = -1, /) -> bytes:
        """读取当前可用的一块数据，最多 size 字节。EOF 时返回 b""。"""
        reader = self._require_reader()
        try:
            return reader.read1(size)
        except OSError as e:
            raise TransportError(f"接收失败: {e}") from e

    def write_line(self, line: str) -> None:
        """发送一行文本，自动追加 CRLF。"""
        if self.sock is None:
            raise TransportError("连接未建立")
        data = line.encode(self.config.encoding) + constants.CRLF
        try:
            self.sock.sendall(data)
        except OSError as e:
            raise TransportError(f"发送失败: {e}") from e

    def close(self) -> None:
        """关闭连接。重复调用无副作用。"""
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        if self.sock is not None:
            self.sock.close()
            self.sock = None
            logger.debug("连接已关闭")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
