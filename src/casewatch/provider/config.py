"""ProviderConfig -- 数据源配置加载

从环境变量加载配置。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

DEFAULT_API_URL = "https://my.uscis.gov/account/case-service/api/cases"


class ProviderConfig(BaseModel):
    """Provider 包配置 -- 从环境变量加载

    环境变量:
        CASEWATCH_API_URL: 案件状态接口地址
        CASEWATCH_SESSION_COOKIE: 已登录会话的 Cookie 头
        CASEWATCH_SOURCE_MODE: 数据源模式（http/file）
        CASEWATCH_SOURCE_DIR: file 模式下的 JSON 目录
        CASEWATCH_FETCH_TIMEOUT_S: 单个案件抓取超时（秒，默认 30）
        CASEWATCH_FETCH_CONCURRENCY: 并发抓取数（默认 1）
    """

    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="案件状态接口基础 URL",
    )
    session_cookie: SecretStr = Field(
        default=SecretStr(""),
        description="会话 Cookie，接口需要已登录会话",
    )
    source_mode: Literal["http", "file"] = Field(
        default="http",
        description="数据源模式：http / file",
    )
    source_dir: str = Field(
        default="data/cases",
        description="file 模式下存放 <case_id>.json 的目录",
    )
    timeout_s: float = Field(
        default=30.0,
        gt=0,
        description="单个案件抓取超时（秒）",
    )
    concurrency: int = Field(
        default=1,
        ge=1,
        description="并发抓取数",
    )


def _env_number(env_var: str, cast: type, fallback: float) -> float | None:
    """读取数值型环境变量；非法值记录告警并返回 None（使用默认值）"""
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        return cast(val)
    except ValueError:
        log.warning(
            "invalid_provider_config",
            env_var=env_var,
            value=val,
            fallback=fallback,
        )
        return None


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    Returns:
        ProviderConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("CASEWATCH_API_URL"):
        kwargs["api_url"] = val

    if val := os.environ.get("CASEWATCH_SESSION_COOKIE"):
        kwargs["session_cookie"] = SecretStr(val)

    if val := os.environ.get("CASEWATCH_SOURCE_MODE"):
        kwargs["source_mode"] = val

    if val := os.environ.get("CASEWATCH_SOURCE_DIR"):
        kwargs["source_dir"] = val

    # 非法数值不阻塞启动，使用默认值
    timeout_s = _env_number("CASEWATCH_FETCH_TIMEOUT_S", float, 30.0)
    if timeout_s is not None and timeout_s > 0:
        kwargs["timeout_s"] = timeout_s

    concurrency = _env_number("CASEWATCH_FETCH_CONCURRENCY", int, 1)
    if concurrency is not None and concurrency >= 1:
        kwargs["concurrency"] = concurrency

    return ProviderConfig(**kwargs)
