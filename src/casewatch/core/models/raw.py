"""原始抓取结果模型

Reconciler 的输入：上游状态接口与文档接口的原始 JSON，未做任何校验。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class RawCaseFetch(BaseModel):
    """单个案件的原始抓取结果"""

    case_id: str = Field(description="案件编号")
    status: Any = Field(default=None, description="状态接口原始 payload")
    documents: Any = Field(default=None, description="文档接口原始 payload")
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="抓取时间",
    )
