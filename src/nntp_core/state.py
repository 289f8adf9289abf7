# File: src/nntp_core/state.py
"""
NNTP 核心库 - 状态模块

负责定义和存储所有易变的会话状态。
本模块不包含业务逻辑，仅作为数据容器供 Client 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto

from .protocols.overview import OverviewField


class ClientStatus(Enum):
    """客户端会话的生命周期状态枚举。

    状态流转示意:
    IDLE -> CONNECTED -> AUTHENTICATED -> CLOSED
               |                            ^
               +----------------------------+
    """

    IDLE = auto()
    """初始状态，客户端已实例化但尚未连接。"""

    CONNECTED = auto()
    """已连接并读取欢迎横幅 (Banner)。"""

    AUTHENTICATED = auto()
    """AUTHINFO 认证成功。"""

    CLOSED = auto()
    """连接已关闭。"""


@dataclass
class SessionState:
    """存储一次 NNTP 连接会话的易变状态。

    每次重新连接时应重新实例化此对象，避免旧会话的缓存污染新会话。

    Attributes:
        status: 当前会话状态。
        banner: 服务器欢迎横幅 (状态码之后的文本)。
        posting_allowed: 欢迎码为 200 时为 True，201 时为 False。
        capabilities: CAPABILITIES 的缓存结果，None 表示尚未查询。
        overview_format: 协商得到的 Overview Schema，None 表示尚未协商。
        compression: 是否已启用 XFEATURE COMPRESS GZIP。
        current_group: 最近一次 GROUP 选中的组名。
    """

    status: ClientStatus = ClientStatus.IDLE
    banner: str = ""
    posting_allowed: bool = False
    capabilities: list[str] | None = None
    overview_format: list[OverviewField] | None = None
    compression: bool = False
    current_group: str = ""

    @property
    def is_connected(self) -> bool:
        """连接是否可用 (已连接或已认证)。"""
        return self.status in (ClientStatus.CONNECTED, ClientStatus.AUTHENTICATED)
