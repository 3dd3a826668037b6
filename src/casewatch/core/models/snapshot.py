"""Snapshot Domain Model

快照是一次观测的不可变记录：案件编号 -> CaseRecord 映射 + 保存时间。
快照创建后只会被追加到历史，从不修改；历史只能被整体清空。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .case import CaseRecord


class Snapshot(BaseModel):
    """一次观测的全部案件状态"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    cases: dict[str, CaseRecord] = Field(
        default_factory=dict,
        description="案件编号 -> CaseRecord",
    )
    saved_at: datetime = Field(description="快照保存时间")
