"""KeyValueStore SQLite 实现

按 key 读写 JSON 文本。
注意：写操作不自动提交事务，需由调用方管理事务。
"""

from datetime import UTC, datetime

import aiosqlite


class SqliteKeyValueStore:
    """KeyValueStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_item(self, key: str) -> str | None:
        """读取 key 对应的值，不存在时返回 None"""
        cursor = await self._conn.execute(
            "SELECT value FROM kv_entries WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        """写入或覆盖 key 对应的值"""
        await self._conn.execute(
            """
            INSERT INTO kv_entries (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value, datetime.now(UTC).isoformat()),
        )

    async def remove_item(self, key: str) -> None:
        """删除 key，不存在时无操作"""
        await self._conn.execute(
            "DELETE FROM kv_entries WHERE key = ?",
            (key,),
        )

    async def keys(self) -> list[str]:
        """列出所有 key，按字典序"""
        cursor = await self._conn.execute("SELECT key FROM kv_entries ORDER BY key ASC")
        rows = await cursor.fetchall()
        return [row[0] for row in rows]
