"""CaseWatch Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

from pathlib import Path

import aiosqlite

from ..config import DEFAULT_HISTORY_MAX_BYTES
from .history_store import CORRUPT_HISTORY_KEY, HISTORY_KEY, LATEST_KEY, HistoryStore
from .kv_store import SqliteKeyValueStore
from .sqlite_init import init_db


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        max_bytes: int = DEFAULT_HISTORY_MAX_BYTES,
    ) -> None:
        self.conn = conn
        self.kv_store = SqliteKeyValueStore(conn)
        self.history_store = HistoryStore(conn, self.kv_store, max_bytes=max_bytes)


async def create_store_group(
    db_path: str,
    max_bytes: int = DEFAULT_HISTORY_MAX_BYTES,
) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径
        max_bytes: 历史存储容量上限（字节）

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    return StoreGroup(conn=conn, max_bytes=max_bytes)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "HistoryStore",
    "SqliteKeyValueStore",
    "init_db",
    "HISTORY_KEY",
    "CORRUPT_HISTORY_KEY",
    "LATEST_KEY",
]
