#!/usr/bin/env python
# run.py (调试脚本)
# 功能：优先加载本地 config.toml，其次读取 NNTP_* 环境变量 / .env，连接服务器并打印 Overview

import argparse
import logging
import sys
from pathlib import Path

# --- 0. 环境准备 ---
PROJECT_ROOT = Path(__file__).resolve().parent
SRC_PATH = PROJECT_ROOT / "src"

if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from nntp_core import (  # noqa: E402
    AuthError,
    ConfigError,
    NntpClient,
    NntpError,
    RecordError,
    __version__,
    load_config_from_env,
    load_config_from_toml,
)

# --- 1. 配置日志 ---
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("DebugApp")


def main() -> int:
    parser = argparse.ArgumentParser(description=f"NNTP-Core v{__version__} 调试工具")
    parser.add_argument("group", help="要读取的新闻组")
    parser.add_argument("-n", "--count", type=int, default=20, help="读取最近多少篇的 Overview")
    parser.add_argument("-p", "--profile", default="default", help="config.toml 中的预设名")
    args = parser.parse_args()

    config_path = PROJECT_ROOT / "config.toml"
    env_path = PROJECT_ROOT / ".env"

    try:
        # A. 加载配置
        if config_path.exists():
            logger.info(f"📄 发现配置文件: {config_path}")
            config = load_config_from_toml(config_path, args.profile)
        else:
            config = load_config_from_env(env_path if env_path.exists() else None)
        logger.debug(f"配置加载完成: {config!r}")

        # B. 连接并读取 Overview
        with NntpClient(config) as client:
            group = client.group(args.group)
            start = max(group.low, group.high - args.count + 1)
            logger.info(f">>> {group.name}: {group.low}-{group.high}，读取 {start}-{group.high}")

            fetch = client.xover if client.state.compression else client.over
            records = fetch(start, group.high)
            while True:
                try:
                    record = next(records)
                except StopIteration:
                    break
                except RecordError as err:
                    logger.warning(f"⚠️ 跳过无法解析的记录: {err}")
                    client.drain()
                    break
                print(f"{record.article_id:>10}  {record.date or '-'}  {record.subject}")

    except AuthError as ae:
        logger.error(f"⛔ 认证被拒绝: {ae}")
        return 1
    except ConfigError as ce:
        logger.error(f"🔧 配置错误: {ce}")
        return 1
    except NntpError as e:
        logger.exception(f"⚠️ 运行时异常: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
