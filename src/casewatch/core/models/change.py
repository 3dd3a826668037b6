"""变更标注与追踪结果模型

ChangeAnnotation 是临时计算结果，从不持久化。
CaseChange 是面向日志与展示的可读变更摘要。
"""

from pydantic import BaseModel, ConfigDict, Field

from .case import CaseRecord, EventRecord
from .enums import ChangeType, FailureStage


class ChangeAnnotation(BaseModel):
    """单个案件相对上一快照的变更标注"""

    model_config = ConfigDict(frozen=True)

    is_new: bool = Field(description="上一快照中不存在该案件")
    field_changed: bool = Field(
        description="updated_at 或 updated_at_timestamp 发生变化（新案件恒为 True）",
    )
    new_event_positions: frozenset[int] = Field(
        default=frozenset(),
        description="新记录 events 中复合键不在上一记录中的下标",
    )


class CaseChange(BaseModel):
    """可读的变更摘要"""

    model_config = ConfigDict(frozen=True)

    case_id: str
    type: ChangeType
    details: str = Field(default="", description="变更说明")
    old_value: str | None = Field(default=None, description="UPDATED：旧的更新时间")
    new_value: str | None = Field(default=None, description="UPDATED：新的更新时间")
    new_events: tuple[EventRecord, ...] = Field(
        default=(),
        description="NEW_EVENTS：新增事件",
    )


class CaseFailure(BaseModel):
    """单个案件的抓取或解析失败"""

    model_config = ConfigDict(frozen=True)

    case_id: str
    stage: FailureStage
    error: str


class TrackResult(BaseModel):
    """一轮追踪的完整结果

    persisted=False 时快照未写入历史，但 cases / annotations 仍然有效。
    """

    cases: dict[str, CaseRecord] = Field(default_factory=dict)
    annotations: dict[str, ChangeAnnotation] = Field(default_factory=dict)
    changes: list[CaseChange] = Field(default_factory=list)
    failures: list[CaseFailure] = Field(default_factory=list)
    persisted: bool = Field(default=False)
    persist_error: str | None = Field(default=None)
