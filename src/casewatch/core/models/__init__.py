"""CaseWatch Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .case import CaseRecord, EventRecord
from .change import CaseChange, CaseFailure, ChangeAnnotation, TrackResult
from .enums import ChangeType, FailureStage
from .raw import RawCaseFetch
from .snapshot import Snapshot

__all__ = [
    # 枚举
    "ChangeType",
    "FailureStage",
    # Case
    "CaseRecord",
    "EventRecord",
    # 原始输入
    "RawCaseFetch",
    # Snapshot
    "Snapshot",
    # 变更
    "ChangeAnnotation",
    "CaseChange",
    "CaseFailure",
    "TrackResult",
]
