"""Store Protocol 接口定义

使用 Python Protocol 实现结构化子类型（duck typing），
测试中可用 AsyncMock 替换真实存储。
"""

from collections.abc import Mapping
from typing import Protocol

from ..models.case import CaseRecord
from ..models.snapshot import Snapshot


class KeyValueStore(Protocol):
    """按 key 读写 JSON 文本的存储接口"""

    async def get_item(self, key: str) -> str | None:
        """读取 key 对应的值"""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """写入或覆盖 key 对应的值（不提交事务）"""
        ...

    async def remove_item(self, key: str) -> None:
        """删除 key（不提交事务）"""
        ...


class SnapshotHistory(Protocol):
    """快照历史接口

    append-only：append() 是唯一写入入口，clear() 整体清空。
    """

    async def latest_cases(self) -> dict[str, CaseRecord]:
        """最近一次快照中的案件，无历史时为空"""
        ...

    async def append(self, cases: Mapping[str, CaseRecord]) -> Snapshot:
        """追加新快照"""
        ...

    async def clear(self) -> None:
        """清空全部历史"""
        ...
