"""Core 异常体系

失败在最小单元（单个案件、单次存储操作）内被隔离，不中断整批追踪。
"""


class CaseWatchError(Exception):
    """Core 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过下一轮追踪恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ReconcileError(CaseWatchError):
    """原始 payload 无法解析为 CaseRecord

    仅影响单个案件，该案件从本轮快照中排除。
    """

    def __init__(self, case_id: str, reason: str) -> None:
        """
        Args:
            case_id: 案件编号
            reason: 无法解析的原因
        """
        super().__init__(f"案件 {case_id} 数据无法解析: {reason}", recoverable=True)
        self.case_id = case_id
        self.reason = reason


class HistoryWriteError(CaseWatchError):
    """历史快照写入失败（SQLite 错误、序列化失败、超出容量上限）

    写入在事务内回滚，已存储的数据保持不变；
    已计算出的快照与标注不受影响，由调用方决定如何上报。
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"历史快照写入失败: {reason}", recoverable=True)
        self.reason = reason
