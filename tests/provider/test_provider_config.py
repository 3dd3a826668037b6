"""ProviderConfig + load_provider_config 单元测试

验证环境变量映射、默认值、非法数值回退。
"""

import pytest
from casewatch.provider.config import DEFAULT_API_URL, ProviderConfig, load_provider_config
from pydantic import SecretStr, ValidationError

_ENV_VARS = (
    "CASEWATCH_API_URL",
    "CASEWATCH_SESSION_COOKIE",
    "CASEWATCH_SOURCE_MODE",
    "CASEWATCH_SOURCE_DIR",
    "CASEWATCH_FETCH_TIMEOUT_S",
    "CASEWATCH_FETCH_CONCURRENCY",
)


@pytest.fixture
def clean_env(monkeypatch):
    """清除相关环境变量"""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestProviderConfig:
    """ProviderConfig 数据模型测试"""

    def test_default_values(self):
        config = ProviderConfig()
        assert config.api_url == DEFAULT_API_URL
        assert config.session_cookie.get_secret_value() == ""
        assert config.source_mode == "http"
        assert config.source_dir == "data/cases"
        assert config.timeout_s == 30
        assert config.concurrency == 1

    def test_custom_values(self):
        config = ProviderConfig(
            api_url="http://localhost:8080/cases",
            session_cookie=SecretStr("session=abc"),
            source_mode="file",
            timeout_s=5,
            concurrency=4,
        )
        assert config.session_cookie.get_secret_value() == "session=abc"
        assert config.source_mode == "file"
        assert config.concurrency == 4

    def test_cookie_not_in_repr(self):
        config = ProviderConfig(session_cookie=SecretStr("session=abc"))
        assert "session=abc" not in repr(config)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ProviderConfig(timeout_s=0)

    def test_concurrency_min_value(self):
        with pytest.raises(ValidationError):
            ProviderConfig(concurrency=0)

    def test_unknown_source_mode_rejected(self):
        with pytest.raises(ValidationError):
            ProviderConfig(source_mode="ftp")


class TestLoadProviderConfig:
    """load_provider_config() 环境变量映射测试"""

    def test_default_when_no_env(self, clean_env):
        config = load_provider_config()
        assert config == ProviderConfig()

    def test_values_from_env(self, clean_env):
        clean_env.setenv("CASEWATCH_API_URL", "http://proxy:9999/cases")
        clean_env.setenv("CASEWATCH_SESSION_COOKIE", "session=xyz")
        clean_env.setenv("CASEWATCH_SOURCE_MODE", "file")
        clean_env.setenv("CASEWATCH_SOURCE_DIR", "/srv/cases")
        clean_env.setenv("CASEWATCH_FETCH_TIMEOUT_S", "12.5")
        clean_env.setenv("CASEWATCH_FETCH_CONCURRENCY", "3")

        config = load_provider_config()

        assert config.api_url == "http://proxy:9999/cases"
        assert config.session_cookie.get_secret_value() == "session=xyz"
        assert config.source_mode == "file"
        assert config.source_dir == "/srv/cases"
        assert config.timeout_s == 12.5
        assert config.concurrency == 3

    def test_invalid_numbers_fall_back(self, clean_env):
        """非法数值不阻塞启动"""
        clean_env.setenv("CASEWATCH_FETCH_TIMEOUT_S", "soon")
        clean_env.setenv("CASEWATCH_FETCH_CONCURRENCY", "many")
        config = load_provider_config()
        assert config.timeout_s == 30
        assert config.concurrency == 1

    def test_non_positive_numbers_fall_back(self, clean_env):
        clean_env.setenv("CASEWATCH_FETCH_TIMEOUT_S", "-1")
        clean_env.setenv("CASEWATCH_FETCH_CONCURRENCY", "0")
        config = load_provider_config()
        assert config.timeout_s == 30
        assert config.concurrency == 1
