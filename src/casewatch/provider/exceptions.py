"""Provider 异常体系"""


class ProviderError(Exception):
    """Provider 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class CaseFetchError(ProviderError):
    """单个案件抓取失败（HTTP 错误状态、响应不是 JSON、本地文件缺失等）"""

    def __init__(self, case_id: str, reason: str) -> None:
        super().__init__(f"案件 {case_id} 抓取失败: {reason}", recoverable=True)
        self.case_id = case_id
        self.reason = reason


class SourceUnreachableError(ProviderError):
    """数据源不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, url: str, original_error: Exception) -> None:
        """
        Args:
            url: 尝试访问的地址
            original_error: 原始异常
        """
        super().__init__(
            f"数据源不可达: {url} -- {original_error}",
            recoverable=True,
        )
        self.url = url
        self.original_error = original_error
