"""Case Reconciler -- 原始抓取结果 -> 规范化 CaseRecord

纯函数转换，无副作用：
- 事件代码经注入的代码表解析描述（大小写不敏感，未知代码 -> "Unknown"）
- 事件按时间戳倒序重新排序（稳定排序，时间相同保持输入顺序）
- 单个案件解析失败抛出 ReconcileError，批量解析时隔离为 CaseFailure
"""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import ValidationError

from .event_codes import EventCodeTable
from .exceptions import ReconcileError
from .models.case import CaseRecord, EventRecord
from .models.change import CaseFailure
from .models.enums import FailureStage
from .models.raw import RawCaseFetch

log = structlog.get_logger()

# 至少出现其一才认为 payload 是一条案件记录
_CASE_MARKER_FIELDS = ("events", "updatedAt", "updatedAtTimestamp", "formType")


def parse_timestamp(value: str | None) -> datetime | None:
    """解析 ISO-8601 时间戳，仅用于排序和展示

    无时区信息的时间按 UTC 处理；空值或无法解析时返回 None。
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _event_sort_key(event: EventRecord) -> tuple[int, float]:
    # 无法解析的时间戳排在最后
    parsed = parse_timestamp(event.timestamp)
    if parsed is None:
        return (0, 0.0)
    return (1, parsed.timestamp())


def sort_events(events: Iterable[EventRecord]) -> tuple[EventRecord, ...]:
    """按时间戳倒序排列事件（最新在前）

    sorted(reverse=True) 仍是稳定排序，时间相同的事件保持输入顺序。
    """
    return tuple(sorted(events, key=_event_sort_key, reverse=True))


def _optional_str(case_id: str, data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ReconcileError(case_id, f"字段 {key} 应为字符串，实际为 {type(value).__name__}")


def _extract_case_data(case_id: str, status: Any) -> Mapping[str, Any]:
    """取出状态 payload 中的案件数据，兼容有无 data 外壳两种形式

    data 为空或不含任何案件字段时视为无法解析，不生成空记录。
    """
    if not isinstance(status, Mapping):
        raise ReconcileError(case_id, "状态 payload 不是 JSON 对象")
    data = status["data"] if "data" in status else status
    if data is None:
        raise ReconcileError(case_id, "data 为空")
    if not isinstance(data, Mapping):
        raise ReconcileError(case_id, "data 字段不是 JSON 对象")
    if not any(key in data for key in _CASE_MARKER_FIELDS):
        raise ReconcileError(case_id, "payload 中没有案件字段")
    return data


def _build_event(
    case_id: str,
    raw_event: Any,
    code_table: EventCodeTable,
) -> EventRecord:
    if not isinstance(raw_event, Mapping):
        raise ReconcileError(case_id, "事件不是 JSON 对象")
    code = raw_event.get("eventCode")
    if not isinstance(code, str) or not code:
        raise ReconcileError(case_id, "事件缺少 eventCode")
    return EventRecord(
        code=code,
        description=code_table.describe(code),
        timestamp=_optional_str(case_id, raw_event, "updatedAtTimestamp"),
    )


def reconcile_case(raw: RawCaseFetch, code_table: EventCodeTable) -> CaseRecord:
    """将单个案件的原始抓取结果规范化为 CaseRecord

    Args:
        raw: 原始抓取结果
        code_table: 事件代码表

    Returns:
        规范化后的 CaseRecord，events 已按时间戳倒序

    Raises:
        ReconcileError: payload 结构无法解析
    """
    case_id = raw.case_id
    data = _extract_case_data(case_id, raw.status)

    raw_events = data.get("events")
    if raw_events is None:
        raw_events = []
    if not isinstance(raw_events, list):
        raise ReconcileError(case_id, "events 字段不是数组")

    events = sort_events(_build_event(case_id, e, code_table) for e in raw_events)

    closed = data.get("closed")
    if closed is not None and not isinstance(closed, bool):
        raise ReconcileError(case_id, "closed 字段不是布尔值")

    try:
        return CaseRecord(
            id=case_id,
            form_type=_optional_str(case_id, data, "formType"),
            form_name=_optional_str(case_id, data, "formName"),
            closed=bool(closed),
            updated_at=_optional_str(case_id, data, "updatedAt"),
            updated_at_timestamp=_optional_str(case_id, data, "updatedAtTimestamp"),
            events=events,
            documents=raw.documents,
            fetched_at=raw.fetched_at,
        )
    except ValidationError as e:
        raise ReconcileError(case_id, str(e)) from e


def reconcile_batch(
    fetches: Iterable[RawCaseFetch],
    code_table: EventCodeTable,
) -> tuple[dict[str, CaseRecord], list[CaseFailure]]:
    """批量规范化，单个案件失败不影响其他案件

    Args:
        fetches: 原始抓取结果
        code_table: 事件代码表

    Returns:
        (案件编号 -> CaseRecord, 失败列表)
    """
    cases: dict[str, CaseRecord] = {}
    failures: list[CaseFailure] = []

    for raw in fetches:
        try:
            cases[raw.case_id] = reconcile_case(raw, code_table)
        except ReconcileError as e:
            log.warning(
                "case_reconcile_failed",
                case_id=raw.case_id,
                reason=e.reason,
            )
            failures.append(
                CaseFailure(
                    case_id=raw.case_id,
                    stage=FailureStage.RECONCILE,
                    error=str(e),
                )
            )

    return cases, failures
