"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、历史存储容量上限等可配置项。
"""

import os
from pathlib import Path

import structlog

log = structlog.get_logger()

# 历史存储默认容量上限（字节），与浏览器 localStorage 的 5 MiB 配额一致
DEFAULT_HISTORY_MAX_BYTES: int = 5 * 1024 * 1024


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("CASEWATCH_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "CASEWATCH_DB_PATH",
        str(_get_base_dir() / "sqlite" / "casewatch.db"),
    )


def get_history_max_bytes() -> int:
    """获取历史存储容量上限（字节）

    非法值不阻塞启动，记录告警后回退到默认值。
    """
    val = os.environ.get("CASEWATCH_HISTORY_MAX_BYTES")
    if not val:
        return DEFAULT_HISTORY_MAX_BYTES
    try:
        max_bytes = int(val)
    except ValueError:
        log.warning(
            "invalid_history_max_bytes",
            env_var="CASEWATCH_HISTORY_MAX_BYTES",
            value=val,
            fallback=DEFAULT_HISTORY_MAX_BYTES,
        )
        return DEFAULT_HISTORY_MAX_BYTES
    if max_bytes <= 0:
        log.warning(
            "invalid_history_max_bytes",
            env_var="CASEWATCH_HISTORY_MAX_BYTES",
            value=val,
            fallback=DEFAULT_HISTORY_MAX_BYTES,
        )
        return DEFAULT_HISTORY_MAX_BYTES
    return max_bytes
