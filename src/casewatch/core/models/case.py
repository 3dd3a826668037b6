"""Case Domain Model -- 规范化后的案件记录

CaseRecord 每轮追踪重新生成，从不就地修改。
events 按时间戳倒序排列（最新在前），顺序由 Reconciler 每次重新计算，
不信任输入中的顺序。持久化 JSON 使用 camelCase 字段名。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from ..event_codes import UNKNOWN_EVENT_DESCRIPTION


class EventRecord(BaseModel):
    """案件生命周期事件

    事件没有独立的外部 ID，跨快照匹配使用 (code, timestamp) 复合键。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    code: str = Field(description="事件代码，如 IAF / H008")
    description: str = Field(
        default=UNKNOWN_EVENT_DESCRIPTION,
        description="由事件代码表解析出的描述",
    )
    timestamp: str | None = Field(
        default=None,
        description="事件发生时间，保留上游原始字符串",
    )

    @property
    def key(self) -> tuple[str, str | None]:
        """复合键：两个事件当且仅当 code 与 timestamp 均相等时视为同一事件"""
        return (self.code, self.timestamp)


class CaseRecord(BaseModel):
    """单个案件的当前已知状态

    updated_at 与 updated_at_timestamp 是上游两个独立的“最后变更”标记，
    任一变化都视为字段变更。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(description="案件编号，快照内唯一")
    form_type: str | None = Field(default=None, description="表格类型，如 I-485")
    form_name: str | None = Field(default=None, description="表格名称")
    closed: bool = Field(default=False, description="案件是否已关闭")
    updated_at: str | None = Field(default=None, description="上游 updatedAt")
    updated_at_timestamp: str | None = Field(
        default=None,
        description="上游 updatedAtTimestamp",
    )
    events: tuple[EventRecord, ...] = Field(
        default=(),
        description="事件列表，按时间戳倒序",
    )
    documents: Any = Field(default=None, description="附带文档数据，原样透传，不参与比较")
    fetched_at: datetime | None = Field(default=None, description="抓取时间，仅用于过期提示")

    @computed_field(alias="currentActionCode")  # type: ignore[prop-decorator]
    @property
    def current_action_code(self) -> str | None:
        """最新事件的代码，无事件时为 None"""
        return self.events[0].code if self.events else None

    @computed_field(alias="currentActionDesc")  # type: ignore[prop-decorator]
    @property
    def current_action_desc(self) -> str | None:
        """最新事件的描述，无事件时为 None"""
        return self.events[0].description if self.events else None
