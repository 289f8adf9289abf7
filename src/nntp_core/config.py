"""
NNTP 核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (可选 .env 文件) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 119
DEFAULT_SSL_PORT = 563


@dataclass(frozen=True)
class NntpConfig:
    """NntpClient 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 新闻服务器主机名或 IP。
        port: 服务器端口 (明文 119，TLS 563)。
        use_ssl: 是否使用 TLS 连接。
        verify_ssl: 是否校验服务器证书。
        username: AUTHINFO 用户名，为空表示匿名。
        password: AUTHINFO 密码。
        timeout: Socket 读写超时 (秒)，即每次阻塞读取的最长等待时间。
        encoding: 文本行的解码字符集。
        compression: 登录后是否启用 XFEATURE COMPRESS GZIP。
        read_chunk_size: 读取压缩信封时每次读取的最大字节数。
    """

    host: str
    port: int = DEFAULT_PORT
    use_ssl: bool = False
    verify_ssl: bool = True
    username: str = ""
    password: str = ""
    timeout: float = 30.0
    encoding: str = "utf-8"
    compression: bool = False
    read_chunk_size: int = 1024

    def __repr__(self) -> str:
        """隐藏密码字段，防止日志泄露敏感信息。"""
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"ssl={self.use_ssl}, "
            f"username='{self.username}', "
            f"password='******', "
            f"compression={self.compression}>"
        )


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "t", "yes", "on")


def create_config_from_dict(raw_data: dict[str, Any]) -> NntpConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        NntpConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:

        def _req(key: str) -> Any:
            """获取必要字段，缺失则报错"""
            if key not in raw_data or raw_data[key] in ("", None):
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            return raw_data[key]

        def _get(key: str, default: Any) -> Any:
            """获取可选字段，缺失则使用默认值"""
            return raw_data.get(key, default)

        def _to_positive(key: str, default: Any, cast: type) -> Any:
            val = _get(key, default)
            try:
                num = cast(val)
            except (TypeError, ValueError):
                raise ConfigError(f"数值格式无效 '{key}': {val}")
            if num <= 0:
                raise ConfigError(f"数值必须为正 '{key}': {val}")
            return num

        use_ssl = _to_bool(_get("use_ssl", False))
        port = _to_positive("port", DEFAULT_SSL_PORT if use_ssl else DEFAULT_PORT, int)
        if port > 0xFFFF:
            raise ConfigError(f"端口超出范围: {port}")

        encoding = str(_get("encoding", "utf-8"))
        try:
            "".encode(encoding)
        except LookupError:
            raise ConfigError(f"未知字符集 'encoding': {encoding}")

        return NntpConfig(
            host=str(_req("host")),
            port=port,
            use_ssl=use_ssl,
            verify_ssl=_to_bool(_get("verify_ssl", True)),
            username=str(_get("username", "")),
            password=str(_get("password", "")),
            timeout=_to_positive("timeout", 30.0, float),
            encoding=encoding,
            compression=_to_bool(_get("compression", False)),
            read_chunk_size=_to_positive("read_chunk_size", 1024, int),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> NntpConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [nntp]: 单服务器配置块。
    3. Root: 根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        NntpConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]
    elif "nntp" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [nntp] 节，忽略 profile='{profile}'。")
        raw_config = data["nntp"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


# 字段映射表 (Config Field -> Env Suffix)
ENV_MAP = {
    "host": "HOST",
    "port": "PORT",
    "use_ssl": "USE_SSL",
    "verify_ssl": "VERIFY_SSL",
    "username": "USERNAME",
    "password": "PASSWORD",
    "timeout": "TIMEOUT",
    "encoding": "ENCODING",
    "compression": "COMPRESSION",
    "read_chunk_size": "READ_CHUNK_SIZE",
}


def load_config_from_env(env_file: Path | None = None) -> NntpConfig:
    """从环境变量加载配置。

    读取所有以 `NNTP_` 开头的环境变量，并映射到配置字段。
    例如: `NNTP_HOST` -> `host`。

    Args:
        env_file: 可选的 .env 文件路径，存在时先加载 (不覆盖已有环境变量)。

    Returns:
        NntpConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量，或指定的 .env 文件不存在。
    """
    if env_file is not None:
        if not env_file.exists():
            raise ConfigError(f".env 文件未找到: {env_file}")
        load_dotenv(dotenv_path=env_file, override=False)

    raw_data = {}

    for cfg_key, env_suffix in ENV_MAP.items():
        val = os.environ.get(f"NNTP_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 NNTP_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
