"""CaseWatch Provider -- 案件数据源

provider 包的公开接口导出。
"""

from .client import HttpCaseSource

# 配置
from .config import DEFAULT_API_URL, ProviderConfig, load_provider_config

# 异常
from .exceptions import CaseFetchError, ProviderError, SourceUnreachableError
from .file_source import FileCaseSource


def create_case_source(config: ProviderConfig) -> HttpCaseSource | FileCaseSource:
    """根据配置创建数据源"""
    if config.source_mode == "file":
        return FileCaseSource(config.source_dir)
    return HttpCaseSource(
        api_url=config.api_url,
        timeout_s=config.timeout_s,
        session_cookie=config.session_cookie.get_secret_value(),
    )


__all__ = [
    "HttpCaseSource",
    "FileCaseSource",
    "create_case_source",
    "ProviderConfig",
    "load_provider_config",
    "DEFAULT_API_URL",
    "ProviderError",
    "CaseFetchError",
    "SourceUnreachableError",
]
