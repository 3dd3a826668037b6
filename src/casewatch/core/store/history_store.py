"""HistoryStore -- append-only 快照历史

存储布局（与旧版浏览器脚本的数据兼容）：
- uscis_cases_data:    最新快照指针 {cases, lastFetch}（旧版单快照格式）
- uscis_cases_history: 完整历史 [{cases, savedAt}, ...]
- uscis_cases_history.corrupt: 最近一次被替换的损坏历史原文

append() 是唯一的写入入口，两个条目在同一事务内更新。
读取损坏数据时按“无历史”处理（fail-open），写入失败抛出 HistoryWriteError。
旧版数据只在读取时转换，直到下一次 append() 才会以新格式写回。
"""

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import aiosqlite
import structlog
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from ..config import DEFAULT_HISTORY_MAX_BYTES
from ..event_codes import UNKNOWN_EVENT_DESCRIPTION
from ..exceptions import HistoryWriteError
from ..models.case import CaseRecord
from ..models.snapshot import Snapshot
from ..reconciler import sort_events
from .protocols import KeyValueStore

log = structlog.get_logger()

LATEST_KEY = "uscis_cases_data"
HISTORY_KEY = "uscis_cases_history"
# 历史无法解析时，append() 重新开始前把原文保存在这里
CORRUPT_HISTORY_KEY = "uscis_cases_history.corrupt"

# 本包写入的条目版本号；旧版脚本写入的条目没有该字段
SCHEMA_VERSION = 2

_PARSE_ERRORS = (ValidationError, ValueError, TypeError, KeyError, AttributeError)


def _is_legacy_case(data: Mapping[str, Any]) -> bool:
    """旧版记录使用 caseNumber / eventCode / lastFetched 字段"""
    if "caseNumber" in data or "lastFetched" in data:
        return True
    events = data.get("events") or []
    return any(isinstance(e, Mapping) and "eventCode" in e for e in events)


def _upgrade_legacy_case(case_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
    """将旧版记录转换为当前字段名"""
    events = [
        {
            "code": e.get("eventCode"),
            "description": e.get("eventDesc") or UNKNOWN_EVENT_DESCRIPTION,
            "timestamp": e.get("updatedAtTimestamp"),
        }
        for e in data.get("events") or []
    ]
    return {
        "id": data.get("caseNumber", case_id),
        "formType": data.get("formType"),
        "formName": data.get("formName"),
        "closed": data.get("closed", False),
        "updatedAt": data.get("updatedAt"),
        "updatedAtTimestamp": data.get("updatedAtTimestamp"),
        "events": events,
        "documents": data.get("documents"),
        "fetchedAt": data.get("lastFetched"),
    }


def parse_case(case_id: str, data: Any) -> CaseRecord:
    """解析单个存储的案件记录，兼容旧版格式

    事件顺序按时间戳重新计算，不信任存储中的顺序。

    Raises:
        ValidationError / ValueError / TypeError: 记录格式非法
    """
    if not isinstance(data, Mapping):
        raise TypeError(f"案件 {case_id} 记录不是 JSON 对象")
    if _is_legacy_case(data):
        data = _upgrade_legacy_case(case_id, data)
    record = CaseRecord.model_validate(data)
    return record.model_copy(update={"events": sort_events(record.events)})


def parse_cases(raw_cases: Any) -> dict[str, CaseRecord]:
    """解析 cases 映射（案件编号 -> 记录）"""
    if not isinstance(raw_cases, Mapping):
        raise TypeError("cases 不是 JSON 对象")
    return {case_id: parse_case(case_id, data) for case_id, data in raw_cases.items()}


def _parse_saved_at(value: Any) -> datetime:
    saved_at = datetime.fromisoformat(value)
    if saved_at.tzinfo is None:
        saved_at = saved_at.replace(tzinfo=UTC)
    return saved_at


def _log_corrupt(key: str, raw: str, error: str) -> None:
    log.warning(
        "history_entry_corrupt",
        key=key,
        byte_length=len(raw.encode("utf-8")),
        error=error,
    )


def _dump_cases(cases: Mapping[str, CaseRecord]) -> dict[str, Any]:
    return {
        case_id: record.model_dump(mode="json", by_alias=True)
        for case_id, record in cases.items()
    }


class HistoryStore:
    """快照历史存储

    单写者模型：同一时间只允许一个进程实例写入，本类不做互斥。
    """

    def __init__(
        self,
        conn: aiosqlite.Connection,
        kv_store: KeyValueStore,
        max_bytes: int = DEFAULT_HISTORY_MAX_BYTES,
    ) -> None:
        """
        Args:
            conn: 数据库连接（与 kv_store 共享，用于事务提交/回滚）
            kv_store: 底层 key-value 存储
            max_bytes: 两个条目序列化后的总字节上限
        """
        self._conn = conn
        self._kv = kv_store
        self._max_bytes = max_bytes

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------

    async def _read_text(self, key: str) -> str | None:
        """读取条目原文；不存在或存储错误时返回 None"""
        try:
            return await self._kv.get_item(key)
        except aiosqlite.Error as e:
            log.error("history_read_failed", key=key, error=str(e))
            return None

    @staticmethod
    def _decode_json(key: str, raw: str) -> Any | None:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            _log_corrupt(key, raw, str(e))
            return None

    @classmethod
    def _parse_history(cls, raw: str | None) -> tuple[list[Any], list[Snapshot]] | None:
        """解析历史条目原文，返回 (原始条目, 解析后的快照)

        条目不存在时返回空历史；任一条目无法解析时返回 None。
        """
        if raw is None:
            return [], []
        data = cls._decode_json(HISTORY_KEY, raw)
        if data is None:
            return None
        if not isinstance(data, list):
            _log_corrupt(HISTORY_KEY, raw, "not a list")
            return None

        snapshots: list[Snapshot] = []
        try:
            for entry in data:
                if not isinstance(entry, Mapping):
                    raise TypeError("快照条目不是 JSON 对象")
                snapshots.append(
                    Snapshot(
                        cases=parse_cases(entry["cases"]),
                        saved_at=_parse_saved_at(entry["savedAt"]),
                    )
                )
        except _PARSE_ERRORS as e:
            _log_corrupt(HISTORY_KEY, raw, str(e))
            return None

        return data, snapshots

    async def _load_history(self) -> tuple[list[Any], list[Snapshot]]:
        """读取历史；损坏时按空历史处理"""
        parsed = self._parse_history(await self._read_text(HISTORY_KEY))
        return parsed if parsed is not None else ([], [])

    async def _load_latest_pointer(self) -> Mapping[str, Any] | None:
        raw = await self._read_text(LATEST_KEY)
        if raw is None:
            return None
        data = self._decode_json(LATEST_KEY, raw)
        if data is None:
            return None
        if not isinstance(data, Mapping):
            _log_corrupt(LATEST_KEY, raw, "not an object")
            return None
        return data

    async def snapshots(self) -> list[Snapshot]:
        """按保存顺序返回全部快照"""
        _, snapshots = await self._load_history()
        return snapshots

    async def count(self) -> int:
        """历史中的快照数量"""
        return len(await self.snapshots())

    async def latest_cases(self) -> dict[str, CaseRecord]:
        """返回最近一次快照中的案件

        历史为空但存在旧版单快照条目时，返回旧版条目中的案件（只读迁移，不写回）。
        两者都不存在或均已损坏时返回空映射。
        """
        snapshots = await self.snapshots()
        if snapshots:
            return dict(snapshots[-1].cases)

        pointer = await self._load_latest_pointer()
        if pointer is None or "cases" not in pointer:
            return {}
        try:
            cases = parse_cases(pointer["cases"])
        except _PARSE_ERRORS as e:
            log.warning("history_entry_corrupt", key=LATEST_KEY, error=str(e))
            return {}

        log.info("history_read_from_legacy_entry", case_count=len(cases))
        return cases

    async def last_fetch(self) -> datetime | None:
        """最新快照指针中的 lastFetch，用于过期提示"""
        pointer = await self._load_latest_pointer()
        if pointer is None:
            return None
        value = pointer.get("lastFetch")
        if not isinstance(value, str):
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # 写入
    # ------------------------------------------------------------------

    async def append(self, cases: Mapping[str, CaseRecord]) -> Snapshot:
        """追加新快照并更新最新快照指针（同一事务）

        已存储的历史条目原样保留。历史损坏时先把原文移到
        CORRUPT_HISTORY_KEY，再以新快照重新开始。

        Args:
            cases: 案件编号 -> CaseRecord

        Returns:
            新追加的 Snapshot

        Raises:
            HistoryWriteError: 读取现有历史失败、序列化失败、超出容量上限或数据库写入失败
        """
        snapshot = Snapshot(cases=dict(cases), saved_at=datetime.now(UTC))

        # 读取失败时不能按空历史覆盖
        try:
            history_raw = await self._kv.get_item(HISTORY_KEY)
        except aiosqlite.Error as e:
            raise HistoryWriteError(f"读取现有历史失败: {e}") from e

        corrupt_raw: str | None = None
        parsed = self._parse_history(history_raw)
        if parsed is None:
            corrupt_raw = history_raw
            entries, snapshots = [], []
        else:
            entries, snapshots = parsed

        if snapshots and snapshots[-1].saved_at > snapshot.saved_at:
            # 只记录，不重排
            log.warning(
                "snapshot_clock_went_backwards",
                previous_saved_at=snapshots[-1].saved_at.isoformat(),
                saved_at=snapshot.saved_at.isoformat(),
            )

        saved_at = snapshot.saved_at.isoformat()
        try:
            dumped_cases = _dump_cases(snapshot.cases)
            history_json = json.dumps(
                [
                    *entries,
                    {
                        "cases": dumped_cases,
                        "savedAt": saved_at,
                        "schemaVersion": SCHEMA_VERSION,
                    },
                ],
                ensure_ascii=False,
            )
            latest_json = json.dumps(
                {
                    "cases": dumped_cases,
                    "lastFetch": saved_at,
                    "schemaVersion": SCHEMA_VERSION,
                },
                ensure_ascii=False,
            )
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise HistoryWriteError(f"序列化失败: {e}") from e

        total_bytes = len(history_json.encode("utf-8")) + len(latest_json.encode("utf-8"))
        if total_bytes > self._max_bytes:
            log.error(
                "history_quota_exceeded",
                total_bytes=total_bytes,
                max_bytes=self._max_bytes,
            )
            raise HistoryWriteError(
                f"超出容量上限: {total_bytes} > {self._max_bytes} 字节"
            )

        try:
            if corrupt_raw is not None:
                await self._kv.set_item(CORRUPT_HISTORY_KEY, corrupt_raw)
            await self._kv.set_item(HISTORY_KEY, history_json)
            await self._kv.set_item(LATEST_KEY, latest_json)
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            await self._conn.rollback()
            raise HistoryWriteError(str(e)) from e

        if corrupt_raw is not None:
            log.warning(
                "history_corrupt_entry_preserved",
                key=CORRUPT_HISTORY_KEY,
                byte_length=len(corrupt_raw.encode("utf-8")),
            )

        log.info(
            "snapshot_appended",
            case_count=len(snapshot.cases),
            history_length=len(entries) + 1,
            saved_at=saved_at,
        )
        return snapshot

    async def clear(self) -> None:
        """不可逆地清空历史、最新快照指针（包括旧版条目）和保存的损坏历史

        Raises:
            HistoryWriteError: 数据库写入失败
        """
        try:
            await self._kv.remove_item(CORRUPT_HISTORY_KEY)
            await self._kv.remove_item(HISTORY_KEY)
            await self._kv.remove_item(LATEST_KEY)
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            await self._conn.rollback()
            raise HistoryWriteError(str(e)) from e

        log.info("history_cleared")
