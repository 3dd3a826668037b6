"""枚举定义 -- 变更类型与失败阶段"""

from enum import StrEnum


class ChangeType(StrEnum):
    """变更摘要类型"""

    NEW = "NEW"
    UPDATED = "UPDATED"
    NEW_EVENTS = "NEW_EVENTS"


class FailureStage(StrEnum):
    """单个案件失败所处的阶段"""

    FETCH = "fetch"
    RECONCILE = "reconcile"
