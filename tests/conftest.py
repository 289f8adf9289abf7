# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from nntp_core.client import NntpClient
from nntp_core.config import NntpConfig

BANNER = b"200 news.example.com InterNetNews server ready\r\n"


class StubConnection:
    """按命令脚本回放响应的假连接，接口与 NntpConnection 一致。

    响应按 “完整命令行 -> 前两个单词 -> 第一个单词” 的顺序查找，
    找不到时返回 500。
    """

    def __init__(self, banner: bytes = BANNER):
        self.responses: dict[str, bytes] = {}
        self.sent: list[str] = []
        self.posted: list[str] = []
        self.is_open = False
        self.closed = False
        self._incoming = bytearray(banner)
        self._posting = False

    def prepare(self, command, status, payload=None, raw=b""):
        """登记一条命令的响应: 状态行 + 可选的多行负载 (自动追加结束行) + 原始字节。"""
        data = f"{status}\r\n".encode()
        if payload is not None:
            for line in payload:
                data += line.encode() + b"\r\n"
            data += b".\r\n"
        self.responses[command] = data + raw

    def connect(self):
        self.is_open = True

    def write_line(self, line):
        self.sent.append(line)
        if self._posting:
            if line == ".":
                self._posting = False
                self._incoming += self.responses.get(
                    "POST-END", b"441 Posting failed\r\n"
                )
            else:
                self.posted.append(line)
            return

        words = line.split(" ")
        for key in (line, " ".join(words[:2]), words[0]):
            if key in self.responses:
                response = self.responses[key]
                break
        else:
            response = b"500 What?\r\n"

        if words[0] == "POST" and response.startswith(b"340"):
            self._posting = True
        self._incoming += response

    def readline(self, size=-1):
        idx = self._incoming.find(b"\n")
        end = len(self._incoming) if idx < 0 else idx + 1
        data = bytes(self._incoming[:end])
        del self._incoming[:end]
        return data

    def read1(self, size=-1):
        if size < 0:
            size = len(self._incoming)
        data = bytes(self._incoming[:size])
        del self._incoming[:size]
        return data

    def close(self):
        self.is_open = False
        self.closed = True


@pytest.fixture
def valid_config():
    """[Fixture] 返回一个无需认证、不启用压缩的 NntpConfig。"""
    return NntpConfig(host="news.example.com", port=119, timeout=5.0)


@pytest.fixture
def stub_conn():
    return StubConnection()


@pytest.fixture
def client(valid_config, stub_conn):
    """[Fixture] 已完成连接 (读过 Banner) 的客户端。"""
    c = NntpClient(valid_config, connection=stub_conn)
    c.connect()
    return c


OVERVIEW_FMT = [
    "Subject:",
    "From:",
    "Date:",
    "Message-ID:",
    "References:",
    ":bytes",
    ":lines",
    "Xref:full",
]


@pytest.fixture
def overview_fmt():
    """[Fixture] 标准的 LIST OVERVIEW.FMT 响应行。"""
    return list(OVERVIEW_FMT)


@pytest.fixture
def make_client(valid_config):
    """[Fixture] 工厂: 用指定 Banner / 配置创建 (未连接的) 客户端与假连接。"""

    def _make(banner: bytes = BANNER, config: NntpConfig | None = None):
        conn = StubConnection(banner)
        return NntpClient(config or valid_config, connection=conn), conn

    return _make
