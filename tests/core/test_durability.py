"""进程重启持久性测试

测试内容：
1. 追加快照 -> 关闭 DB 连接 -> 重新打开 -> 历史完整
2. WAL 模式验证
"""

from pathlib import Path

import aiosqlite
from casewatch.core.store import create_store_group
from casewatch.core.store.sqlite_init import init_db, verify_wal_mode


class TestDurability:
    """进程重启后快照不丢失"""

    async def test_history_survives_restart(self, tmp_path: Path, make_case):
        """追加两次 -> 关闭 -> 重新打开 -> 顺序与内容完整"""
        db_path = str(tmp_path / "durability.db")
        first = {"A": make_case("A", "T1", [("IAF", "2024-01-01T00:00:00Z")])}
        second = {
            "A": make_case(
                "A",
                "T2",
                [("H008", "2024-03-01T00:00:00Z"), ("IAF", "2024-01-01T00:00:00Z")],
            )
        }

        # 第一次连接：写入数据
        group1 = await create_store_group(db_path)
        await group1.history_store.append(first)
        await group1.history_store.append(second)
        await group1.conn.close()

        # 第二次连接：验证数据
        group2 = await create_store_group(db_path)
        try:
            snapshots = await group2.history_store.snapshots()
            assert [s.cases for s in snapshots] == [first, second]
            assert await group2.history_store.latest_cases() == second
        finally:
            await group2.conn.close()

    async def test_creates_missing_directory(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "dir" / "casewatch.db"
        group = await create_store_group(str(db_path))
        await group.conn.close()
        assert db_path.exists()

    async def test_wal_mode_enabled(self, tmp_path: Path):
        """WAL 模式验证"""
        conn = await aiosqlite.connect(str(tmp_path / "wal.db"))
        await init_db(conn)
        assert await verify_wal_mode(conn) is True
        await conn.close()
