"""全局 pytest 配置 -- 临时 SQLite 数据库 + 测试数据构造 fixture"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import aiosqlite
import pytest
import pytest_asyncio
from casewatch.core.event_codes import DEFAULT_EVENT_CODES, EventCodeTable
from casewatch.core.models import CaseRecord, EventRecord, RawCaseFetch
from casewatch.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from casewatch.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """创建测试用 StoreGroup"""
    sg = await create_store_group(str(tmp_db_path))
    yield sg
    await sg.conn.close()


@pytest.fixture
def code_table() -> EventCodeTable:
    """默认事件代码表"""
    return DEFAULT_EVENT_CODES


@pytest.fixture
def make_raw() -> Callable[..., RawCaseFetch]:
    """构造原始抓取结果：make_raw("IOE1", events=[("IAF", "2024-01-01T00:00:00Z")])"""

    def _make(
        case_id: str,
        events: list[tuple[str, str | None]] | None = None,
        updated_at_timestamp: str | None = "2024-01-01T00:00:00Z",
        updated_at: str | None = "2024-01-01",
        documents: Any = None,
        **extra: Any,
    ) -> RawCaseFetch:
        data: dict[str, Any] = {
            "formType": "I-485",
            "formName": "Application to Register Permanent Residence",
            "closed": False,
            "updatedAt": updated_at,
            "updatedAtTimestamp": updated_at_timestamp,
            "events": [
                {"eventCode": code, "updatedAtTimestamp": ts} for code, ts in (events or [])
            ],
            **extra,
        }
        return RawCaseFetch(
            case_id=case_id,
            status={"data": data},
            documents=documents if documents is not None else {"data": []},
        )

    return _make


@pytest.fixture
def make_case() -> Callable[..., CaseRecord]:
    """构造 CaseRecord：make_case("A", "T1", [("IAF", "T1")])"""

    def _make(
        case_id: str,
        updated_at_timestamp: str | None = None,
        events: list[tuple[str, str | None]] | None = None,
        updated_at: str | None = None,
    ) -> CaseRecord:
        return CaseRecord(
            id=case_id,
            updated_at=updated_at,
            updated_at_timestamp=updated_at_timestamp,
            events=tuple(
                EventRecord(
                    code=code,
                    description=DEFAULT_EVENT_CODES.describe(code),
                    timestamp=ts,
                )
                for code, ts in (events or [])
            ),
        )

    return _make
