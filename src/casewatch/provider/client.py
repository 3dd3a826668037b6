"""HttpCaseSource -- 案件状态接口客户端

每个案件请求两个接口：
    GET {api_url}/{case_id}            状态与事件
    GET {api_url}/{case_id}/documents  附带文档
任一请求失败即视为该案件抓取失败。
"""

import httpx
import structlog
from casewatch.core.models.raw import RawCaseFetch

from .config import DEFAULT_API_URL
from .exceptions import CaseFetchError, SourceUnreachableError

log = structlog.get_logger()


class HttpCaseSource:
    """基于 httpx 的案件数据源"""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float = 30.0,
        session_cookie: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化数据源

        Args:
            api_url: 案件状态接口基础 URL
            timeout_s: HTTP 请求超时（秒）
            session_cookie: 已登录会话的 Cookie 头，空字符串表示不发送
            transport: 自定义 transport（测试时注入 httpx.MockTransport）
        """
        self._api_url = api_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session_cookie = session_cookie
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._session_cookie:
            headers["Cookie"] = self._session_cookie
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """创建带超时和请求头的 AsyncClient，配合 async with 使用"""
        return httpx.AsyncClient(
            timeout=self._timeout_s,
            headers=self._headers(),
            transport=self._transport,
        )

    async def _get_json(self, client: httpx.AsyncClient, case_id: str, url: str):
        try:
            response = await client.get(url)
        except httpx.TransportError as e:
            log.warning("case_source_unreachable", url=url, error=str(e))
            raise SourceUnreachableError(url=url, original_error=e) from e

        if not response.is_success:
            raise CaseFetchError(case_id, f"HTTP {response.status_code} ({url})")

        try:
            return response.json()
        except ValueError as e:
            raise CaseFetchError(case_id, f"响应不是合法 JSON ({url})") from e

    async def fetch_case(self, case_id: str) -> RawCaseFetch:
        """抓取单个案件的状态与文档

        Args:
            case_id: 案件编号

        Returns:
            RawCaseFetch

        Raises:
            SourceUnreachableError: 连接失败或超时
            CaseFetchError: 非 2xx 状态或响应不是 JSON
        """
        async with self._get_client() as client:
            status = await self._get_json(client, case_id, f"{self._api_url}/{case_id}")
            documents = await self._get_json(
                client, case_id, f"{self._api_url}/{case_id}/documents"
            )

        log.debug("case_fetched", case_id=case_id)
        return RawCaseFetch(case_id=case_id, status=status, documents=documents)
